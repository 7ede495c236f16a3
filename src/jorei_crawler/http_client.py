from __future__ import annotations

import time
from typing import Any, Callable, Mapping, Optional

import requests
import urllib3
from loguru import logger
from urllib3.exceptions import InsecureRequestWarning

from .config import CrawlConfig
from .errors import FetchError


def build_session(config: CrawlConfig) -> requests.Session:
    session = requests.Session()
    session.headers.update(
        {
            "User-Agent": config.user_agent,
            "Accept": "application/json,text/html;q=0.9,*/*;q=0.8",
            "Accept-Language": "ja,en-US;q=0.8",
        }
    )
    if not config.verify_tls:
        # jorei.slis.doshisha.ac.jp serves a broken certificate chain.
        urllib3.disable_warnings(InsecureRequestWarning)
    return session


class Throttle:
    """Fixed pause between outbound requests."""

    def __init__(self, seconds: float, sleep: Callable[[float], None] = time.sleep) -> None:
        self.seconds = seconds
        self._sleep = sleep
        self.waits = 0

    def wait(self) -> None:
        self.waits += 1
        if self.seconds > 0:
            logger.debug("sleep {:.3f}s", self.seconds)
            self._sleep(self.seconds)


class HttpFetcher:
    """One GET per call. No retries; any failure surfaces as FetchError."""

    def __init__(
        self,
        session: requests.Session,
        *,
        timeout_seconds: float = 30.0,
        verify_tls: bool = True,
    ) -> None:
        self.session = session
        self.timeout_seconds = timeout_seconds
        self.verify_tls = verify_tls
        self.requests_made = 0

    @classmethod
    def from_config(cls, config: CrawlConfig) -> "HttpFetcher":
        return cls(
            build_session(config),
            timeout_seconds=config.timeout_seconds,
            verify_tls=config.verify_tls,
        )

    def fetch(self, url: str, params: Optional[Mapping[str, Any]] = None) -> bytes:
        self.requests_made += 1
        try:
            response = self.session.get(
                url,
                params=params,
                timeout=self.timeout_seconds,
                verify=self.verify_tls,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            status = getattr(exc.response, "status_code", None)
            context: dict[str, Any] = {"params": dict(params or {})}
            if status is not None:
                context["status"] = status
            raise FetchError(f"request failed: {exc}", url=url, context=context) from exc
        return response.content

    def close(self) -> None:
        self.session.close()
