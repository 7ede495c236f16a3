import json
from pathlib import Path

import pytest
import requests

from jorei_crawler.config import CrawlConfig
from jorei_crawler.http_client import HttpFetcher, Throttle
from jorei_crawler.pipeline import PaginationDriver

FIXTURES = Path(__file__).parent / "fixtures"


class FakeResponse:
    def __init__(self, status_code=200, content=b""):
        self.status_code = status_code
        self.content = content

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error", response=self)


def make_doc(jorei_id, announced="2022-06-01T00:00:00Z", title=None, **extra):
    doc = {
        "id": jorei_id,
        "reiki_id": f"r-{jorei_id}",
        "title": title or f"条例 {jorei_id}",
        "municipality_id": "131016",
        "municipality_type": "特別区",
        "area": "関東",
        "prefecture": "東京都",
        "city": "千代田区",
        "type": "条例",
        "has_version": False,
        "file_type": "html",
        "announcement_date": announced,
        "announcement_date_s": announced[:10] if announced else None,
        "content": f"<p>第一条</p><p>{jorei_id}</p>",
    }
    doc.update(extra)
    return doc


def solr_body(docs, start=0, num_found=None):
    payload = {
        "response": {
            "numFound": len(docs) if num_found is None else num_found,
            "start": start,
            "docs": docs,
        }
    }
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


class FakeRegistry:
    """Stands in for requests.Session, serving a Solr-like listing from memory."""

    def __init__(self, docs, broken_ids=(), fail_at_start=None, garbage_at_start=None, failing_ids=()):
        self.docs = list(docs)
        self.broken_ids = set(broken_ids)
        self.fail_at_start = fail_at_start
        self.garbage_at_start = garbage_at_start
        self.failing_ids = set(failing_ids)
        self.calls = []
        self.closed = False

    def get(self, url, params=None, timeout=None, verify=None):
        params = dict(params or {})
        self.calls.append((url, params))
        query = params["q"]
        if query.startswith("ids:"):
            return self._detail(query[len("ids:"):])
        start, rows = int(params["start"]), int(params["rows"])
        if self.fail_at_start == start:
            return FakeResponse(503)
        if self.garbage_at_start == start:
            return FakeResponse(200, b"<html>maintenance</html>")
        return FakeResponse(200, solr_body(self.page(start, rows), start, len(self.docs)))

    def page(self, start, rows):
        return self.docs[start:start + rows]

    def _detail(self, jorei_id):
        if jorei_id in self.failing_ids:
            return FakeResponse(500)
        if jorei_id in self.broken_ids:
            return FakeResponse(200, solr_body([{"id": jorei_id, "title": "broken"}]))
        docs = [doc for doc in self.docs if doc["id"] == jorei_id]
        return FakeResponse(200, solr_body(docs))

    @property
    def listing_calls(self):
        return [params for _, params in self.calls if not params["q"].startswith("ids:")]

    @property
    def detail_calls(self):
        return [params for _, params in self.calls if params["q"].startswith("ids:")]

    def close(self):
        self.closed = True


class CyclingRegistry(FakeRegistry):
    """A listing that wraps around instead of ever returning an empty page."""

    def page(self, start, rows):
        return [self.docs[(start + offset) % len(self.docs)] for offset in range(rows)]


class SleepRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def make_config(tmp_path):
    def _make(**overrides):
        values = {
            "output_dir": tmp_path / "output",
            "index_path": tmp_path / "index.jsonl",
            "rows": 2,
            "sleep_time_ms": 0,
            "show_progress": False,
        }
        values.update(overrides)
        return CrawlConfig(**values)

    return _make


@pytest.fixture
def sleeps():
    return SleepRecorder()


@pytest.fixture
def make_driver(sleeps):
    def _make(config, registry):
        return PaginationDriver(
            config,
            fetcher=HttpFetcher(registry),
            throttle=Throttle(config.sleep_seconds, sleep=sleeps),
        )

    return _make


@pytest.fixture
def detail_body():
    return (FIXTURES / "detail.json").read_bytes()


@pytest.fixture
def listing_body():
    return (FIXTURES / "listing.json").read_bytes()
