from __future__ import annotations

from typing import Optional, Set

import requests
from loguru import logger
from tqdm import tqdm

from .config import CrawlConfig
from .errors import ParseError
from .http_client import HttpFetcher, Throttle
from .models import CrawlSummary, OrdinanceRecord, OrdinanceSummary
from .parse import JoreiExtractor
from .utils import within_window
from .writer import OutputWriter


class DetailFetcher:
    def __init__(self, fetcher: HttpFetcher, extractor: JoreiExtractor) -> None:
        self.fetcher = fetcher
        self.extractor = extractor

    def fetch(self, summary: OrdinanceSummary) -> OrdinanceRecord:
        url, params = self.extractor.detail_request(summary)
        source_url = requests.Request("GET", url, params=params).prepare().url
        body = self.fetcher.fetch(url, params)
        return self.extractor.extract_detail(body, summary, source_url)


class PaginationDriver:
    """Walks the listing page by page and persists every ordinance in range.

    The crawl stops on the first page shorter than ``rows`` (an empty page
    included) or when an id already seen in this run comes back, since the
    registry repeats listings instead of signalling the end. FetchError,
    OutputError and unreadable listing pages end the run; a ParseError on a
    single detail page skips that ordinance.
    """

    def __init__(
        self,
        config: CrawlConfig,
        *,
        fetcher: Optional[HttpFetcher] = None,
        extractor: Optional[JoreiExtractor] = None,
        throttle: Optional[Throttle] = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher or HttpFetcher.from_config(config)
        self.extractor = extractor or JoreiExtractor(config.base_url)
        self.throttle = throttle or Throttle(config.sleep_seconds)
        self.details = DetailFetcher(self.fetcher, self.extractor)

    def run(self) -> CrawlSummary:
        config = self.config
        summary = CrawlSummary()
        seen: Set[str] = set()
        progress: Optional[tqdm] = None
        page_index = 0

        with OutputWriter(config.output_dir, config.index_path) as writer:
            try:
                while True:
                    if summary.pages_fetched:
                        self.throttle.wait()
                    url, params = self.extractor.listing_request(
                        page_index, config.rows, config.start_date, config.end_date
                    )
                    body = self.fetcher.fetch(url, params)
                    summary.pages_fetched += 1
                    try:
                        page = self.extractor.extract_listing(body, config.rows, url)
                    except ParseError as exc:
                        raise ParseError(
                            f"unreadable listing page: {exc.message}",
                            url=exc.url or url,
                            context={**exc.context, "page": page_index, "params": dict(params)},
                        ) from exc

                    if progress is None:
                        summary.total_found = page.num_found
                        logger.info("number of all jorei: {}", page.num_found)
                        progress = tqdm(
                            total=page.num_found,
                            desc="Fetching ordinances",
                            unit="jorei",
                            disable=not config.show_progress,
                        )

                    for item in page.summaries:
                        progress.update(1)
                        if item.id in seen:
                            logger.warning(
                                "id {} seen again on page {}, treating listing as exhausted",
                                item.id,
                                page_index,
                            )
                            summary.stopped_on_duplicate = True
                            return summary
                        seen.add(item.id)

                        if not within_window(item.announcement_date, config.start_date, config.end_date):
                            summary.filtered += 1
                            logger.debug("out of range: {}({}) at ({})", item.title, item.id, item.announcement_date)
                            continue

                        self.throttle.wait()
                        try:
                            record = self.details.fetch(item)
                        except ParseError as exc:
                            summary.parse_failures += 1
                            logger.warning("skipped {}({}): {}", item.title, item.id, exc)
                            continue
                        writer.write(record)
                        summary.written += 1
                        logger.info(
                            "done: {}({}) at ({})",
                            record.title,
                            record.id,
                            record.announcement_date_s or "None",
                        )

                    if not page.has_next:
                        return summary
                    page_index += 1
            finally:
                if progress is not None:
                    progress.close()
                logger.info(
                    "crawl ended: {} written, {} out of range, {} unparseable, {} pages",
                    summary.written,
                    summary.filtered,
                    summary.parse_failures,
                    summary.pages_fetched,
                )


def run_crawl(config: CrawlConfig) -> CrawlSummary:
    driver = PaginationDriver(config)
    try:
        return driver.run()
    finally:
        driver.fetcher.close()
