"""Exception types raised while crawling the ordinance registry.

FetchError and OutputError end the run. ParseError raised for a single
ordinance is reported and that ordinance is skipped.
"""

from __future__ import annotations

from typing import Any, Optional


class CrawlError(Exception):
    """Base class for crawl failures.

    Carries the URL (or path) being processed and optional context, both
    rendered into the message so the failing page or record is identifiable
    from the log line alone.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.url = url
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        if self.url:
            parts.append(f"URL: {self.url}")
        for key, value in self.context.items():
            parts.append(f"{key}: {value}")
        return " | ".join(parts)


class FetchError(CrawlError):
    """Transport or HTTP-level failure. Fatal to the run."""


class ParseError(CrawlError):
    """A response did not have the expected structure."""


class OutputError(CrawlError):
    """A record or index line could not be written. Fatal to the run."""


class ConfigError(ValueError):
    """Invalid crawl configuration."""
