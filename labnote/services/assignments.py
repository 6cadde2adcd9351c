from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from .counterbalance import CounterbalanceEntry

logger = logging.getLogger(__name__)

ORDER_SEPARATOR = " → "


@dataclass(frozen=True, slots=True)
class Found:
    """Trial sequence prescribed for a participant, in table order."""

    sequence: tuple[int, int, int]

    def format(self, unit: str | None = None) -> str:
        return format_order(self.sequence, unit=unit)


@dataclass(frozen=True, slots=True)
class NotFound:
    """The canonical ID has no row in the counterbalancing table."""

    subject_id: str

    @property
    def message(self) -> str:
        return f"ID {self.subject_id} is not in the randomization list."


Assignment = Found | NotFound


def resolve(table: Mapping[str, CounterbalanceEntry], subject_id: str) -> Assignment:
    entry = table.get(subject_id)
    if entry is None:
        logger.info("No counterbalancing entry for ID %s", subject_id)
        return NotFound(subject_id)
    return Found(entry.sequence)


def format_order(sequence: Sequence[int], unit: str | None = None) -> str:
    """Join trial values with arrows, e.g. ``"45 → 55 → 30"``."""
    suffix = f" {unit}" if unit else ""
    return ORDER_SEPARATOR.join(f"{value}{suffix}" for value in sequence)
