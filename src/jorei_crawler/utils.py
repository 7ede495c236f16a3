from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from dateutil import parser as date_parser
from dateutil import tz


JST = tz.tzoffset("JST", 9 * 3600)
SOLR_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def safe_filename(text: str) -> str:
    """Percent-encode an id into a file name. Distinct ids never share a name."""
    return quote(text, safe="")


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def parse_bound(text: str, *, end: bool = False) -> date:
    """Parse a date bound given as YYYY-MM-DD or a bare year.

    A bare year expands to Jan 1 (start bound) or Dec 31 (end bound).
    """
    text = text.strip()
    if re.fullmatch(r"\d{1,4}", text):
        year = int(text)
        return date(year, 12, 31) if end else date(year, 1, 1)
    return date_parser.isoparse(text).date()


def to_japan_date(value: Optional[str]) -> Optional[date]:
    """Convert a UTC timestamp from the registry API to a calendar date in Japan."""
    if not value:
        return None
    parsed = date_parser.isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz.UTC)
    return parsed.astimezone(JST).date()


def solr_bound(value: Optional[date], *, end: bool = False) -> str:
    if value is None:
        return "*"
    local = datetime.combine(value, time.min, tzinfo=JST)
    if end:
        local += timedelta(days=1, seconds=-1)
    return local.astimezone(tz.UTC).strftime(SOLR_DATE_FORMAT)


def within_window(value: Optional[date], start: Optional[date], end: Optional[date]) -> bool:
    if start is None and end is None:
        return True
    if value is None:
        return False
    if start is not None and value < start:
        return False
    if end is not None and value > end:
        return False
    return True
