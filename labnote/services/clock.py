from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"
FILE_TAG_FORMAT = "%Y%m%d-%H%M"
DATE_FORMAT = "%Y-%m-%d"


def now_in(zone: str) -> datetime:
    """Return the current time in the named IANA zone."""
    return datetime.now(ZoneInfo(zone))


def format_timestamp(moment: datetime) -> str:
    return moment.strftime(TIMESTAMP_FORMAT)


def format_file_tag(moment: datetime) -> str:
    return moment.strftime(FILE_TAG_FORMAT)


def format_date(moment: datetime) -> str:
    return moment.strftime(DATE_FORMAT)
