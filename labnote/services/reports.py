from __future__ import annotations

import csv
import io
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from ..core.config import DEFAULT_EXPERIMENT_ORDER
from ..core.errors import SynthesisPreconditionError
from .assignments import Assignment, Found
from .identifiers import is_canonical_id
from .sanitize import sanitize_latex

__all__ = [
    "CSV_COLUMNS",
    "PARAM_NAMES",
    "ReportMetadata",
    "ReportRecord",
    "render_csv",
    "synthesize",
    "template_params",
]

CSV_COLUMNS = (
    "ID",
    "ExperimentOrder",
    "HCT_Order",
    "StartDateTime",
    "EndDateTime",
    "LabNumber",
    "Experimenter",
)
PARAM_NAMES = (
    "subject_id",
    "experiment_order",
    "start_time",
    "end_time",
    "lab_number",
    "hct_order",
    "output_timestamp",
    "experimenter_name",
)
CSV_BOM = "\ufeff"
_BARE_FIELD = re.compile(r"[0-9]+")


class ReportMetadata(BaseModel):
    """Experiment details typed in by the experimenter."""

    model_config = ConfigDict(frozen=True)

    lab_number: str | None = None
    experimenter_name: str | None = None
    start_time: str | None = None
    end_time: str | None = None

    @field_validator("lab_number", "experimenter_name", "start_time", "end_time", mode="before")
    @classmethod
    def _coerce_to_string(cls, v: Any) -> str | None:
        if v is None or isinstance(v, str):
            return v
        return str(v)


class ReportRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    subject_id: str
    experiment_order: str
    hct_order: str
    metadata: ReportMetadata
    generated_at: str

    @field_validator("subject_id")
    @classmethod
    def _canonical_id(cls, v: str) -> str:
        if not is_canonical_id(v):
            raise ValueError(f"subject_id must be a canonical 3-digit ID, got {v!r}")
        return v

    def csv_row(self) -> dict[str, str]:
        meta = self.metadata
        values = (
            self.subject_id,
            self.experiment_order,
            self.hct_order,
            meta.start_time,
            meta.end_time,
            meta.lab_number,
            meta.experimenter_name,
        )
        return {column: "" if value is None else value for column, value in zip(CSV_COLUMNS, values)}


def synthesize(
    subject_id: str,
    assignment: Assignment,
    metadata: ReportMetadata,
    generated_at: str,
    *,
    experiment_order: str = DEFAULT_EXPERIMENT_ORDER,
    unit: str | None = None,
) -> ReportRecord:
    """Combine a resolved assignment and experiment details into one record.

    Callers must resolve the ID first; passing anything but ``Found`` is a
    programming error and raises ``SynthesisPreconditionError``.
    """
    if not isinstance(assignment, Found):
        raise SynthesisPreconditionError(
            f"cannot build a lab note for {subject_id!r} without a resolved assignment"
        )
    if not is_canonical_id(subject_id):
        raise SynthesisPreconditionError(f"{subject_id!r} is not a canonical participant ID")
    return ReportRecord(
        subject_id=subject_id,
        experiment_order=experiment_order,
        hct_order=assignment.format(unit),
        metadata=metadata,
        generated_at=generated_at,
    )


class _Bare(str):
    """A digit-run field; ``__index__`` makes QUOTE_NONNUMERIC leave it unquoted."""

    def __index__(self) -> int:
        return int(self)


def render_csv(record: ReportRecord) -> bytes:
    """Render the record as a one-row, BOM-prefixed UTF-8 CSV.

    Fields other than bare digit runs are double-quoted with embedded quotes
    doubled, so the ID is written as ``001`` and text columns are quoted.
    """
    row = {
        column: _Bare(value) if _BARE_FIELD.fullmatch(value) else value
        for column, value in record.csv_row().items()
    }
    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer, fieldnames=CSV_COLUMNS, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n"
    )
    writer.writeheader()
    writer.writerow(row)
    return (CSV_BOM + buffer.getvalue()).encode("utf-8")


def template_params(record: ReportRecord) -> dict[str, str | None]:
    """Parameter set for the lab-note template; free text is LaTeX-escaped."""
    meta = record.metadata
    return {
        "subject_id": record.subject_id,
        "experiment_order": record.experiment_order,
        "start_time": meta.start_time,
        "end_time": meta.end_time,
        "lab_number": sanitize_latex(meta.lab_number),
        "hct_order": sanitize_latex(record.hct_order),
        "output_timestamp": record.generated_at,
        "experimenter_name": sanitize_latex(meta.experimenter_name),
    }
