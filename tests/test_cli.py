import pytest

from labnote import cli


@pytest.fixture(autouse=True)
def _use_test_settings(monkeypatch, settings):
    monkeypatch.setattr(cli, "get_settings", lambda: settings)


def _run(argv) -> int:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)
    return excinfo.value.code


def test_check_table(capsys):
    assert _run(["check-table"]) == 0
    assert "3 entries" in capsys.readouterr().out


def test_lookup(capsys):
    assert _run(["lookup", "subject 2"]) == 0
    assert "002: 45 → 55 → 30" in capsys.readouterr().out


def test_lookup_not_found(capsys):
    assert _run(["lookup", "999"]) == cli.EXIT_NOT_FOUND
    assert "999" in capsys.readouterr().err


def test_lookup_invalid_id(capsys):
    assert _run(["lookup", "abc"]) == cli.EXIT_ERROR
    assert capsys.readouterr().err.startswith("Error:")


def test_bad_table_path(capsys, tmp_path):
    assert _run(["--table", str(tmp_path / "nope.csv"), "check-table"]) == cli.EXIT_ERROR
    assert "not found" in capsys.readouterr().err


def test_generate_writes_files(capsys, tmp_path):
    out_dir = tmp_path / "notes"
    code = _run(
        [
            "generate",
            "1",
            "--lab-number",
            "A-101",
            "--experimenter",
            "Sugiura",
            "--start",
            "2025-08-09 14:00",
            "--end",
            "2025-08-09 14:45",
            "--output-dir",
            str(out_dir),
        ]
    )
    assert code == 0
    files = sorted(path.name for path in out_dir.iterdir())
    assert len(files) == 2
    assert files[0].startswith("labnote_ID-001_") and files[0].endswith(".csv")
    assert files[1].endswith(".params.json")
    csv_text = (out_dir / files[0]).read_text(encoding="utf-8-sig")
    assert "2025-08-09 14:00" in csv_text
    assert str(out_dir) in capsys.readouterr().out


def test_generate_editable(tmp_path):
    assert _run(["generate", "2", "--editable", "--output-dir", str(tmp_path)]) == 0
    assert sorted(path.suffix for path in tmp_path.iterdir()) == [".Rmd", ".csv"]


def test_generate_not_found_writes_nothing(tmp_path):
    assert _run(["generate", "999", "--output-dir", str(tmp_path)]) == cli.EXIT_NOT_FOUND
    assert list(tmp_path.iterdir()) == []
