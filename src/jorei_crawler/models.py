from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class OrdinanceSummary:
    id: str
    title: str
    announcement_date: Optional[date]
    reiki_id: Optional[str] = None
    prefecture: Optional[str] = None
    city: Optional[str] = None


@dataclass(frozen=True)
class ListingPage:
    summaries: List[OrdinanceSummary]
    num_found: int
    start: int
    has_next: bool


@dataclass(frozen=True)
class OrdinanceRecord:
    id: str
    reiki_id: str
    title: str
    source_url: str
    municipality_id: str
    municipality_type: str
    area: str
    jorei_type: str
    has_version: bool
    prefecture: Optional[str] = None
    city: Optional[str] = None
    prefecture_kana: Optional[str] = None
    city_kana: Optional[str] = None
    h1: Optional[str] = None
    announcement_date: Optional[date] = None
    last_updated_date: Optional[date] = None
    updated_date: List[date] = field(default_factory=list)
    collection: List[str] = field(default_factory=list)
    collected_date: List[str] = field(default_factory=list)
    reiki_dates: Optional[List[str]] = None
    reiki_numbers: Optional[List[str]] = None
    original_url: Optional[str] = None
    reiki_url: Optional[str] = None
    file_type: Optional[str] = None
    h_type: List[str] = field(default_factory=list)
    content: Optional[str] = None
    full_text: Optional[str] = None
    collected_date_s: Optional[str] = None
    announcement_date_s: Optional[str] = None
    last_updated_date_s: Optional[str] = None
    updated_date_s: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        for key in ("announcement_date", "last_updated_date"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        data["updated_date"] = [value.isoformat() for value in self.updated_date]
        return data


@dataclass(frozen=True)
class IndexEntry:
    id: str
    title: str
    path: Path
    announcement_date: Optional[date]
    reiki_id: Optional[str] = None
    prefecture: Optional[str] = None
    city: Optional[str] = None
    updated_date: Optional[date] = None

    @classmethod
    def for_record(cls, record: OrdinanceRecord, path: Path) -> "IndexEntry":
        return cls(
            id=record.id,
            title=record.title,
            path=path,
            announcement_date=record.announcement_date,
            reiki_id=record.reiki_id,
            prefecture=record.prefecture,
            city=record.city,
            updated_date=record.last_updated_date,
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["path"] = self.path.as_posix()
        for key in ("announcement_date", "updated_date"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data


@dataclass
class CrawlSummary:
    total_found: int = 0
    pages_fetched: int = 0
    written: int = 0
    filtered: int = 0
    parse_failures: int = 0
    stopped_on_duplicate: bool = False
