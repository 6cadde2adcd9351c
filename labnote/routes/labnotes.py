from __future__ import annotations

import logging

from fastapi import APIRouter, Form, HTTPException, Request

from ..core.errors import InvalidIdError, TableError, TemplateError
from ..services.assignments import NotFound, resolve
from ..services.clock import format_timestamp
from ..services.counterbalance import CounterbalanceTable, load_table_file
from ..services.identifiers import canonicalize
from ..services.labnotes import prepare_labnote, write_labnote
from ..services.reports import ReportMetadata
from ..services.templates import read_template

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


def _current_table(request: Request) -> CounterbalanceTable:
    state = request.app.state
    if state.table is None:
        result = load_table_file(state.settings.table_path)
        if isinstance(result, TableError):
            logger.warning("Counterbalancing table unavailable: %s", result)
            raise HTTPException(status_code=503, detail=str(result))
        state.table = result
    return state.table


def _canonical_or_422(raw_id: str) -> str:
    subject_id = canonicalize(raw_id)
    if isinstance(subject_id, InvalidIdError):
        raise HTTPException(status_code=422, detail=str(subject_id))
    return subject_id


@router.get("/assignment", name="assignment")
async def assignment(request: Request, subject_id: str):
    canonical = _canonical_or_422(subject_id)
    result = resolve(_current_table(request), canonical)
    if isinstance(result, NotFound):
        raise HTTPException(status_code=404, detail=result.message)
    return {
        "subject_id": canonical,
        "hct_order": result.format(request.app.state.settings.hct_unit),
        "sequence": list(result.sequence),
    }


@router.get("/now", name="now")
async def now(request: Request):
    return {"timestamp": format_timestamp(request.app.state.clock())}


@router.post("/labnotes", name="generate_labnote")
async def generate_labnote(
    request: Request,
    subject_id: str = Form(...),
    lab_number: str | None = Form(None),
    experimenter_name: str | None = Form(None),
    start_time: str | None = Form(None),
    end_time: str | None = Form(None),
    editable: bool = Form(False),
):
    settings = request.app.state.settings
    table = _current_table(request)

    template_text = None
    if editable:
        try:
            template_text = read_template(settings.template_path)
        except TemplateError as exc:
            logger.warning("Lab-note template unavailable: %s", exc)
            raise HTTPException(status_code=503, detail=str(exc)) from exc

    metadata = ReportMetadata(
        lab_number=lab_number,
        experimenter_name=experimenter_name,
        start_time=start_time,
        end_time=end_time,
    )
    outputs = prepare_labnote(
        subject_id,
        table,
        metadata,
        request.app.state.clock(),
        template_text=template_text,
        experiment_order=settings.experiment_order,
        unit=settings.hct_unit,
    )
    if isinstance(outputs, InvalidIdError):
        raise HTTPException(status_code=422, detail=str(outputs))
    if isinstance(outputs, NotFound):
        raise HTTPException(status_code=404, detail=outputs.message)
    if isinstance(outputs, TemplateError):
        logger.warning("Lab-note template rejected: %s", outputs)
        raise HTTPException(status_code=503, detail=str(outputs))

    try:
        written = write_labnote(outputs, settings.output_dir)
    except OSError as exc:
        logger.error("Failed to write lab-note files", exc_info=exc)
        raise HTTPException(status_code=500, detail="Failed to write lab-note files.") from exc

    return {
        "files": [path.name for path in written],
        "row": outputs.record.csv_row(),
    }


@router.post("/table/reload", name="reload_table")
async def reload_table(request: Request):
    state = request.app.state
    result = load_table_file(state.settings.table_path)
    if isinstance(result, TableError):
        logger.warning("Reload failed; keeping previous table: %s", result)
        raise HTTPException(status_code=503, detail=str(result))
    state.table = result
    return {"entries": len(result)}
