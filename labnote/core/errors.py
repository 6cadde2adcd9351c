from __future__ import annotations


class LabNoteError(ValueError):
    """Base class for user- or configuration-correctable lab-note failures."""


class InvalidIdError(LabNoteError):
    """Participant identifier could not be turned into a canonical ID."""


class IdOutOfRangeError(InvalidIdError):
    """Identifier digits do not fit the fixed canonical width."""


class TableError(LabNoteError):
    """Counterbalancing table is missing, unreadable or violates its schema."""


class TemplateError(TableError):
    """Lab-note template header is missing or malformed."""


class SynthesisPreconditionError(RuntimeError):
    """A report was requested without a resolved assignment."""
