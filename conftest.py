from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from labnote.core.config import Settings

REPO_ROOT = Path(__file__).resolve().parent
JST = timezone(timedelta(hours=9))

SAMPLE_TABLE = "ID,Trial1,Trial2,Trial3\n1,30,45,55\n2,45,55,30\n3,30,45,55\n"


@pytest.fixture
def sample_table_bytes() -> bytes:
    return ("\ufeff" + SAMPLE_TABLE).encode("utf-8")


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 8, 9, 14, 5, tzinfo=JST)


@pytest.fixture
def settings(
    tmp_path: Path, tmp_path_factory: pytest.TempPathFactory, sample_table_bytes: bytes
) -> Settings:
    table_dir = tmp_path_factory.mktemp("table")
    table_path = table_dir / "randomization_list.csv"
    table_path.write_bytes(sample_table_bytes)
    return Settings(
        table_path=str(table_path),
        template_path=str(REPO_ROOT / "labnote_template.Rmd"),
        output_dir=str(tmp_path / "outputs"),
        templates_dir=str(REPO_ROOT / "templates"),
    )
