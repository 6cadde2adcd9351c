from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from ..core.config import DEFAULT_EXPERIMENT_ORDER
from ..core.errors import InvalidIdError, TemplateError
from .assignments import NotFound, resolve
from .clock import format_date, format_file_tag, format_timestamp
from .counterbalance import CounterbalanceEntry
from .identifiers import canonicalize
from .reports import ReportMetadata, ReportRecord, render_csv, synthesize, template_params
from .templates import build_editable_template

logger = logging.getLogger(__name__)

__all__ = [
    "LabNoteOutputs",
    "base_filename",
    "prepare_labnote",
    "write_labnote",
]


@dataclass(frozen=True, slots=True)
class LabNoteOutputs:
    """Everything produced for one "generate" action, ready to be written."""

    record: ReportRecord
    csv_bytes: bytes
    params: dict[str, str | None]
    base_name: str
    editable_template: str | None = None


def base_filename(subject_id: str, moment: datetime) -> str:
    return f"labnote_ID-{subject_id}_{format_file_tag(moment)}"


def prepare_labnote(
    raw_id: str,
    table: Mapping[str, CounterbalanceEntry],
    metadata: ReportMetadata,
    now: datetime,
    *,
    template_text: str | None = None,
    experiment_order: str = DEFAULT_EXPERIMENT_ORDER,
    unit: str | None = None,
) -> LabNoteOutputs | InvalidIdError | NotFound | TemplateError:
    """Resolve ``raw_id`` and build the CSV record and template parameters.

    When ``template_text`` is given, an editable copy of the template with the
    parameters in its header is built as well. The first failure is returned
    and nothing is produced for it.
    """
    subject_id = canonicalize(raw_id)
    if isinstance(subject_id, InvalidIdError):
        return subject_id
    assignment = resolve(table, subject_id)
    if isinstance(assignment, NotFound):
        return assignment

    record = synthesize(
        subject_id,
        assignment,
        metadata,
        format_timestamp(now),
        experiment_order=experiment_order,
        unit=unit,
    )
    params = template_params(record)
    editable = None
    if template_text is not None:
        try:
            editable = build_editable_template(template_text, params, format_date(now))
        except TemplateError as exc:
            return exc
    return LabNoteOutputs(
        record=record,
        csv_bytes=render_csv(record),
        params=params,
        base_name=base_filename(subject_id, now),
        editable_template=editable,
    )


def write_labnote(outputs: LabNoteOutputs, output_dir: str | Path) -> list[Path]:
    """Write the CSV plus either the editable ``.Rmd`` or the parameter JSON.

    Files written by this call are removed again if any later write fails.
    """
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    stem = directory / outputs.base_name

    payloads: list[tuple[Path, bytes]] = [(stem.with_name(f"{stem.name}.csv"), outputs.csv_bytes)]
    if outputs.editable_template is not None:
        payloads.append((stem.with_name(f"{stem.name}.Rmd"), outputs.editable_template.encode("utf-8")))
    else:
        params_json = json.dumps(outputs.params, ensure_ascii=False, indent=2)
        payloads.append((stem.with_name(f"{stem.name}.params.json"), params_json.encode("utf-8")))

    written: list[Path] = []
    try:
        for path, data in payloads:
            written.append(path)
            path.write_bytes(data)
    except Exception:
        for path in written:
            path.unlink(missing_ok=True)
        raise
    logger.info(
        "Wrote lab note for ID %s: %s",
        outputs.record.subject_id,
        ", ".join(path.name for path in written),
    )
    return written
