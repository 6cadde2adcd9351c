from __future__ import annotations

import re

from ..core.errors import IdOutOfRangeError, InvalidIdError

ID_WIDTH = 3
CANONICAL_ID_PATTERN = re.compile(rf"[0-9]{{{ID_WIDTH}}}")
_DIGIT_RUN = re.compile(r"[0-9]+")


def canonicalize(raw: str | None) -> str | InvalidIdError:
    """Return the zero-padded participant ID found in ``raw``.

    The first run of ASCII digits is read as an integer and left-padded to
    ``ID_WIDTH`` characters, so ``"id 042 extra"`` and ``"42"`` both map to
    ``"042"``. Failures are returned, not raised: ``InvalidIdError`` when the
    text holds no digits, ``IdOutOfRangeError`` when the value needs more than
    ``ID_WIDTH`` digits.
    """
    match = _DIGIT_RUN.search(raw or "")
    if not match:
        return InvalidIdError(f"No participant number found in {raw!r}.")
    value = int(match.group(0))
    if value >= 10**ID_WIDTH:
        return IdOutOfRangeError(
            f"Participant number {value} does not fit in {ID_WIDTH} digits."
        )
    return f"{value:0{ID_WIDTH}d}"


def is_canonical_id(value: object) -> bool:
    return isinstance(value, str) and bool(CANONICAL_ID_PATTERN.fullmatch(value))
