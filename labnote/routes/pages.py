from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from ..services.clock import format_timestamp

router = APIRouter()

PROCEDURE_STEPS = (
    "Heartbeat Counting Task",
    "Experiment (Computer)",
    "Questionnaire (Computer)",
)


@router.get("/", response_class=HTMLResponse, name="index")
async def index(request: Request):
    templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "now": format_timestamp(request.app.state.clock()),
            "steps": PROCEDURE_STEPS,
        },
    )
