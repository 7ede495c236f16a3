"""Request shapes and response parsing for the jorei.slis.doshisha.ac.jp API.

Everything that knows about the registry's Solr responses lives here, so a
change on the remote side only touches this module.
"""
from __future__ import annotations

import json
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup
from loguru import logger

from .errors import ParseError
from .models import ListingPage, OrdinanceRecord, OrdinanceSummary
from .utils import solr_bound, to_japan_date


SELECT_PATH = "/api/reiki/select"

REQUIRED_DETAIL_FIELDS = (
    "id",
    "reiki_id",
    "title",
    "municipality_id",
    "municipality_type",
    "area",
    "type",
    "has_version",
)

Params = Dict[str, Any]


class JoreiExtractor:
    def __init__(self, base_url: str) -> None:
        self.base_url = base_url.rstrip("/")

    @property
    def select_url(self) -> str:
        return self.base_url + SELECT_PATH

    def listing_request(
        self,
        page_index: int,
        rows: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Tuple[str, Params]:
        query = (
            "collection:latest AND announcement_date:"
            f"[{solr_bound(start_date)} TO {solr_bound(end_date, end=True)}]"
        )
        params = {"q": query, "start": page_index * rows, "rows": rows}
        return self.select_url, params

    def detail_request(self, summary: OrdinanceSummary) -> Tuple[str, Params]:
        return self.select_url, {"q": f"ids:{summary.id}", "all": "true"}

    def extract_listing(self, body: bytes, rows: int, url: str = "") -> ListingPage:
        response = _load_response(body, url)
        try:
            num_found = int(response["numFound"])
            start = int(response.get("start", 0))
            docs = response["docs"]
        except (KeyError, TypeError, ValueError) as exc:
            raise ParseError(f"malformed listing response: {exc!r}", url=url) from exc
        if not isinstance(docs, list):
            raise ParseError("listing docs is not a list", url=url)

        summaries: List[OrdinanceSummary] = []
        for position, doc in enumerate(docs):
            summary = _summary_from_doc(doc)
            if summary is None:
                logger.warning("listing entry {} at offset {} has no id, skipped", position, start)
                continue
            summaries.append(summary)
        return ListingPage(
            summaries=summaries,
            num_found=num_found,
            start=start,
            has_next=len(docs) >= rows,
        )

    def extract_detail(
        self, body: bytes, summary: OrdinanceSummary, source_url: str = ""
    ) -> OrdinanceRecord:
        response = _load_response(body, source_url)
        docs = response.get("docs")
        if docs is not None and not isinstance(docs, list):
            raise ParseError("detail docs is not a list", url=source_url, context={"id": summary.id})
        if not docs:
            raise ParseError("detail response has no docs", url=source_url, context={"id": summary.id})
        doc = docs[0]
        if not isinstance(doc, dict):
            raise ParseError("detail doc is not an object", url=source_url, context={"id": summary.id})
        missing = [name for name in REQUIRED_DETAIL_FIELDS if doc.get(name) is None]
        if missing:
            raise ParseError(
                "detail doc is missing required fields",
                url=source_url,
                context={"id": summary.id, "missing": ", ".join(missing)},
            )
        if doc["id"] != summary.id:
            raise ParseError(
                "detail doc id does not match listing",
                url=source_url,
                context={"id": summary.id, "got": doc["id"]},
            )
        try:
            return _record_from_doc(doc, source_url)
        except (TypeError, ValueError, OverflowError) as exc:
            raise ParseError(
                f"bad value in detail doc: {exc}", url=source_url, context={"id": summary.id}
            ) from exc


def extract_plain_text(content: Optional[str]) -> Optional[str]:
    """Strip markup from an ordinance body, keeping one block per line."""
    if content is None:
        return None
    if "<" not in content:
        return content.strip()
    soup = BeautifulSoup(content, "lxml")
    for skip in soup.find_all(["script", "style"]):
        skip.decompose()
    return soup.get_text(separator="\n", strip=True)


def _load_response(body: bytes, url: str) -> Dict[str, Any]:
    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise ParseError(f"response is not JSON: {exc}", url=url) from exc
    if not isinstance(payload, dict) or not isinstance(payload.get("response"), dict):
        raise ParseError("response has no 'response' object", url=url)
    return payload["response"]


def _summary_from_doc(doc: Any) -> Optional[OrdinanceSummary]:
    if not isinstance(doc, dict) or not doc.get("id"):
        return None
    try:
        announced = to_japan_date(doc.get("announcement_date"))
    except (TypeError, ValueError, OverflowError):
        announced = None
    return OrdinanceSummary(
        id=str(doc["id"]),
        title=doc.get("title") or "",
        announcement_date=announced,
        reiki_id=doc.get("reiki_id"),
        prefecture=doc.get("prefecture"),
        city=doc.get("city"),
    )


def _record_from_doc(doc: Dict[str, Any], source_url: str) -> OrdinanceRecord:
    content = doc.get("content")
    return OrdinanceRecord(
        id=doc["id"],
        reiki_id=doc["reiki_id"],
        title=doc["title"],
        source_url=source_url,
        municipality_id=doc["municipality_id"],
        municipality_type=doc["municipality_type"],
        area=doc["area"],
        jorei_type=doc["type"],
        has_version=bool(doc["has_version"]),
        prefecture=doc.get("prefecture"),
        city=doc.get("city"),
        prefecture_kana=doc.get("prefecture_kana"),
        city_kana=doc.get("city_kana"),
        h1=doc.get("h1"),
        announcement_date=to_japan_date(doc.get("announcement_date")),
        last_updated_date=to_japan_date(doc.get("last_updated_date")),
        updated_date=[to_japan_date(value) for value in doc.get("updated_date") or []],
        collection=list(doc.get("collection") or []),
        collected_date=list(doc.get("collected_date") or []),
        reiki_dates=doc.get("reiki_dates"),
        reiki_numbers=doc.get("reiki_numbers"),
        original_url=doc.get("original_url"),
        reiki_url=doc.get("reiki_url"),
        file_type=doc.get("file_type"),
        h_type=list(doc.get("h_type") or []),
        content=content,
        full_text=extract_plain_text(content),
        collected_date_s=doc.get("collected_date_s"),
        announcement_date_s=doc.get("announcement_date_s"),
        last_updated_date_s=doc.get("last_updated_date_s"),
        updated_date_s=doc.get("updated_date_s"),
    )
