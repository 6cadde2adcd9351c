from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_TIMEZONE = "Asia/Tokyo"
DEFAULT_EXPERIMENT_ORDER = "Heartbeat Counting Task → Experiment → Questionnaire"


@dataclass(slots=True)
class Settings:
    """Application configuration values loaded from the environment."""

    table_path: str
    template_path: str
    output_dir: str
    templates_dir: str
    timezone: str = DEFAULT_TIMEZONE
    experiment_order: str = DEFAULT_EXPERIMENT_ORDER
    hct_unit: str | None = None

    def ensure_directories(self) -> None:
        """Ensure that directories required by the application exist."""
        Path(self.output_dir).mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""
    load_dotenv()

    base_dir = Path(__file__).resolve().parents[2]

    def _str_env(name: str, default: str) -> str:
        value = (os.environ.get(name) or "").strip()
        return value or default

    settings = Settings(
        table_path=_str_env("RANDOMIZATION_LIST", str(base_dir / "randomization_list.csv")),
        template_path=_str_env("LABNOTE_TEMPLATE", str(base_dir / "labnote_template.Rmd")),
        output_dir=_str_env("OUTPUT_DIR", str(base_dir / "outputs")),
        templates_dir=_str_env("TEMPLATES_DIR", str(base_dir / "templates")),
        timezone=_str_env("LABNOTE_TIMEZONE", DEFAULT_TIMEZONE),
        experiment_order=_str_env("EXPERIMENT_ORDER_LABEL", DEFAULT_EXPERIMENT_ORDER),
        hct_unit=(os.environ.get("HCT_ORDER_UNIT") or "").strip() or None,
    )
    settings.ensure_directories()
    return settings
