from __future__ import annotations

import re

__all__ = ["LATEX_ESCAPES", "sanitize_latex"]

# Applied strictly in order. The backslash rule must run first so the
# backslashes introduced by later rules are left alone, and the brace rule
# skips the braces of the ``\textbackslash{}`` it produced.
LATEX_ESCAPES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\\"), r"\\textbackslash{}"),
    (re.compile(r"(?<!\\textbackslash)\{|(?<!\\textbackslash\{)\}"), r"\\\g<0>"),
    (re.compile(r"_"), r"\\_"),
    (re.compile(r"%"), r"\\%"),
    (re.compile(r"\$"), r"\\$"),
    (re.compile(r"&"), r"\\&"),
    (re.compile(r"#"), r"\\#"),
    (re.compile(r"\^"), r"\\textasciicircum{}"),
    (re.compile(r"~"), r"\\textasciitilde{}"),
)


def sanitize_latex(text: str | None) -> str | None:
    """Escape LaTeX special characters so ``text`` renders literally.

    ``None`` passes through unchanged. The result is not meant to be escaped
    again: sanitizing twice escapes the backslashes added by the first pass.
    """
    if text is None:
        return None
    for pattern, replacement in LATEX_ESCAPES:
        text = pattern.sub(replacement, text)
    return text
