from labnote.services.sanitize import sanitize_latex


def test_none_passes_through():
    assert sanitize_latex(None) is None


def test_plain_text_is_unchanged():
    assert sanitize_latex("Sugiura A-101") == "Sugiura A-101"


def test_escapes_each_special_character_once():
    assert sanitize_latex("100%_{A}") == r"100\%\_\{A\}"


def test_backslash_replacement_braces_are_not_escaped():
    assert sanitize_latex("a\\b") == r"a\textbackslash{}b"


def test_literal_braces_next_to_backslash_are_escaped():
    assert sanitize_latex("\\{x}") == r"\textbackslash{}\{x\}"
    assert sanitize_latex("\\}") == r"\textbackslash{}\}"


def test_remaining_specials():
    assert sanitize_latex("$5 & #3") == r"\$5 \& \#3"
    assert sanitize_latex("x^2~y") == r"x\textasciicircum{}2\textasciitilde{}y"


def test_introduced_backslashes_are_not_re_escaped():
    result = sanitize_latex("^~%")
    assert result == r"\textasciicircum{}\textasciitilde{}\%"
    assert "textbackslash" not in result


def test_sanitizing_twice_is_not_idempotent():
    once = sanitize_latex("50%")
    assert once == r"50\%"
    assert sanitize_latex(once) == r"50\textbackslash{}\%"


def test_non_ascii_text_is_preserved():
    assert sanitize_latex("杉浦_実験") == r"杉浦\_実験"
