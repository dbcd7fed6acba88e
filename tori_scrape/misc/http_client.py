"""Fetches tori.fi result pages over HTTP and records when each page was fetched."""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import httpx

from tori_scrape.misc.config_loader import coerce_positive_float
from tori_scrape.misc.logger import get_logger


@dataclass(slots=True)
class FetchResult:
    ok: bool
    requested_url: str
    final_url: str
    status_code: int | None
    content: bytes
    fetched_at: datetime
    elapsed_ms: int
    headers: dict[str, str] = field(default_factory=dict)
    error: str | None = None


class HttpClient:
    """Single-attempt page fetcher that records when each page was fetched."""

    def __init__(
        self, http_cfg: Mapping[str, Any], transport: httpx.BaseTransport | None = None
    ) -> None:
        self.timeout = coerce_positive_float(http_cfg.get("timeout_seconds"), 35.0)
        self.follow_redirects = bool(http_cfg.get("follow_redirects", True))
        self.user_agent = str(http_cfg.get("user_agent", "Mozilla/5.0"))
        self.accept_language = str(http_cfg.get("accept_language", "fi-FI,fi;q=0.9"))
        self.transport = transport
        self.logger = get_logger("http_client")

    def get(self, url: str) -> FetchResult:
        headers = {"User-Agent": self.user_agent, "Accept-Language": self.accept_language}
        # The fetch time anchors relative timestamps, so take it before the request goes out.
        fetched_at = datetime.now(timezone.utc)
        start = time.perf_counter()
        try:
            with httpx.Client(
                timeout=self.timeout,
                follow_redirects=self.follow_redirects,
                headers=headers,
                transport=self.transport,
            ) as client:
                response = client.get(url)
        except httpx.HTTPError as exc:
            elapsed = int((time.perf_counter() - start) * 1000)
            self.logger.warning("fetch failed url=%s error=%s", url, exc)
            return FetchResult(
                ok=False,
                requested_url=url,
                final_url=url,
                status_code=None,
                content=b"",
                fetched_at=fetched_at,
                elapsed_ms=elapsed,
                error=str(exc),
            )

        elapsed = int((time.perf_counter() - start) * 1000)
        self.logger.info(
            "fetch url=%s status=%s elapsed_ms=%s", url, response.status_code, elapsed
        )
        ok = response.is_success
        return FetchResult(
            ok=ok,
            requested_url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            content=response.content,
            fetched_at=fetched_at,
            elapsed_ms=elapsed,
            headers=dict(response.headers),
            error=None if ok else f"status={response.status_code}",
        )
