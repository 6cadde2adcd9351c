from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.templating import Jinja2Templates

from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .routes import labnotes, pages
from .services.clock import now_in


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging()
    logger = logging.getLogger(__name__)
    logger.info("Using randomization list %s", settings.table_path)

    app = FastAPI(title="Lab note")
    app.state.settings = settings
    app.state.templates = Jinja2Templates(directory=settings.templates_dir)
    # Loaded on first lookup and replaced by /api/table/reload.
    app.state.table = None
    app.state.clock = lambda: now_in(settings.timezone)

    app.include_router(pages.router)
    app.include_router(labnotes.router)

    return app
