from __future__ import annotations

import csv
import io
import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from ..core.errors import InvalidIdError, TableError
from .identifiers import canonicalize

logger = logging.getLogger(__name__)

__all__ = [
    "CounterbalanceEntry",
    "CounterbalanceTable",
    "ID_ALIASES",
    "TRIAL_ALIASES",
    "load_table",
    "load_table_file",
    "normalize_header",
]

ID_ALIASES = ("id", "subject_id", "participant", "participant_id")
TRIAL_ALIASES = (("trial1", "t1"), ("trial2", "t2"), ("trial3", "t3"))
# U+FEFF, and the same marker when UTF-8 bytes were decoded as Latin-1.
_BOM_ARTIFACTS = ("\ufeff", "\u00ef\u00bb\u00bf")
# Trial cells are ASCII integers only: no digit separators, no non-ASCII digits.
_TRIAL_VALUE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True, slots=True)
class CounterbalanceEntry:
    id: str
    trial1: int
    trial2: int
    trial3: int

    @property
    def sequence(self) -> tuple[int, int, int]:
        """Trial values in the order the participant runs them."""
        return (self.trial1, self.trial2, self.trial3)


class CounterbalanceTable(Mapping[str, CounterbalanceEntry]):
    """Read-only mapping of canonical participant ID to its counterbalancing entry."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[CounterbalanceEntry] = ()) -> None:
        mapping: dict[str, CounterbalanceEntry] = {}
        for entry in entries:
            if entry.id in mapping:
                raise TableError(f"duplicate id {entry.id} in counterbalancing table")
            mapping[entry.id] = entry
        self._entries = MappingProxyType(mapping)

    def __getitem__(self, key: str) -> CounterbalanceEntry:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"CounterbalanceTable({len(self)} entries)"


def normalize_header(name: str | None) -> str:
    """Return the matching key for a raw CSV header cell."""
    cleaned = name or ""
    for artifact in _BOM_ARTIFACTS:
        if cleaned.startswith(artifact):
            cleaned = cleaned[len(artifact) :]
    return cleaned.strip().casefold()


def _find_column(headers: list[str], aliases: Iterable[str]) -> int | None:
    accepted = set(aliases)
    return next((index for index, name in enumerate(headers) if name in accepted), None)


def _decode_source(source: bytes | str) -> str | TableError:
    if isinstance(source, str):
        return source[1:] if source.startswith("\ufeff") else source
    try:
        return source.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        return TableError(f"counterbalancing table is not valid UTF-8: {exc}")


def _parse_trial(value: str, *, line: int, column: str) -> int | TableError:
    text = value.strip()
    if not _TRIAL_VALUE.fullmatch(text):
        return TableError(
            f"non-integer trial value {text!r} in column {column!r} on line {line}"
        )
    return int(text)


def load_table(source: bytes | str) -> CounterbalanceTable | TableError:
    """Parse a counterbalancing CSV into a ``CounterbalanceTable``.

    Header names are matched after stripping BOM artifacts, whitespace and
    case, so ``subject_id,t1,t2,t3`` loads the same as ``ID,Trial1,Trial2,Trial3``
    in any column order. Every failure is returned as a ``TableError``; a table
    is only produced when every row is valid and every ID is unique.
    """
    text = _decode_source(source)
    if isinstance(text, TableError):
        return text

    reader = csv.reader(io.StringIO(text))
    header_row = next(reader, None)
    if not header_row or not any(cell.strip() for cell in header_row):
        return TableError("missing header row")
    headers = [normalize_header(cell) for cell in header_row]

    id_index = _find_column(headers, ID_ALIASES)
    if id_index is None:
        return TableError("missing id column")
    trial_indexes = [_find_column(headers, aliases) for aliases in TRIAL_ALIASES]
    if any(index is None for index in trial_indexes):
        return TableError("missing trial columns")

    entries: dict[str, CounterbalanceEntry] = {}
    for row in reader:
        if not any(cell.strip() for cell in row):
            continue
        line = reader.line_num
        if max(id_index, *trial_indexes) >= len(row):
            return TableError(f"row on line {line} has fewer cells than the header")

        subject_id = canonicalize(row[id_index])
        if isinstance(subject_id, InvalidIdError):
            return TableError(f"invalid id on line {line}: {subject_id}")

        trials: list[int] = []
        for index in trial_indexes:
            parsed = _parse_trial(row[index], line=line, column=header_row[index].strip())
            if isinstance(parsed, TableError):
                return parsed
            trials.append(parsed)

        if subject_id in entries:
            return TableError(f"duplicate id {subject_id} on line {line}")
        entries[subject_id] = CounterbalanceEntry(subject_id, *trials)

    table = CounterbalanceTable(entries.values())
    logger.debug("Parsed counterbalancing table with %d entries", len(table))
    return table


def load_table_file(path: str | Path) -> CounterbalanceTable | TableError:
    """Read a local counterbalancing CSV and parse it with ``load_table``."""
    table_path = Path(path)
    if not table_path.exists():
        return TableError(f"randomization list not found: {table_path}")
    try:
        raw = table_path.read_bytes()
    except OSError as exc:
        return TableError(f"unable to read randomization list {table_path}: {exc}")
    result = load_table(raw)
    if not isinstance(result, TableError):
        logger.info("Loaded %d counterbalancing entries from %s", len(result), table_path)
    return result
