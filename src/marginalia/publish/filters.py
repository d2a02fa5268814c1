"""Custom Jinja2 filters for post templates."""

from __future__ import annotations

from datetime import datetime

from marginalia.utils.datetime_utils import format_iso_utc

DEFAULT_DATE_FORMAT = "%Y-%m-%d"


def format_date(value: datetime | None, fmt: str = DEFAULT_DATE_FORMAT) -> str:
    if value is None:
        return ""
    return value.strftime(fmt)


def isoformat(value: datetime | None) -> str:
    if value is None:
        return ""
    return format_iso_utc(value)
