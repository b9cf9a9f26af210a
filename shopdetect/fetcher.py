from __future__ import annotations

import http.cookiejar
import logging
import urllib.parse
from typing import Optional

import requests
from requests.adapters import HTTPAdapter

from .config import DEFAULT_ACCEPT, DetectorConfig, RedirectPolicy
from .models import FetchOutcome, FetchSuccess, HttpFailure, TransportFailure

logger = logging.getLogger(__name__)


class NoDowngradeSession(requests.Session):
    """Session that follows redirects except https -> http."""

    def get_redirect_target(self, resp):
        target = super().get_redirect_target(resp)
        if not target:
            return target
        src = urllib.parse.urlparse(resp.url or "")
        dst = urllib.parse.urlparse(urllib.parse.urljoin(resp.url or "", target))
        if src.scheme == "https" and dst.scheme == "http":
            logger.debug("Not following https->http redirect: %s -> %s", resp.url, target)
            return None
        return target


def build_session(cfg: DetectorConfig) -> requests.Session:
    session = NoDowngradeSession() if cfg.redirect_policy is RedirectPolicy.NORMAL else requests.Session()
    session.max_redirects = int(cfg.max_redirects)
    # The jar stores nothing, so a Set-Cookie from one URL is never sent with another.
    session.cookies.set_policy(http.cookiejar.DefaultCookiePolicy(allowed_domains=[]))
    # One pooled connection per worker; no urllib3 retries (single attempt per URL).
    adapter = HTTPAdapter(pool_maxsize=max(10, int(cfg.max_workers)), max_retries=0)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"User-Agent": cfg.user_agent, "Accept": DEFAULT_ACCEPT})
    return session


class PageFetcher:
    """
    Single-attempt HTML fetch reduced to a FetchOutcome.

    Connection settings (redirects, headers, connect timeout) are fixed at construction
    so every call in a batch behaves the same. The session is shared by the worker
    threads of one detector.
    """

    def __init__(self, cfg: DetectorConfig | None = None, *, session: Optional[requests.Session] = None) -> None:
        self.cfg = cfg or DetectorConfig()
        self._owns_session = session is None
        self._session = session if session is not None else build_session(self.cfg)

    def fetch(self, url: str) -> FetchOutcome:
        try:
            resp = self._session.get(
                url,
                timeout=self.cfg.timeout,
                allow_redirects=self.cfg.redirect_policy is not RedirectPolicy.NEVER,
            )
            code = int(resp.status_code)
            if code < 200 or code >= 400:
                return HttpFailure(code)
            return FetchSuccess(code, resp.text or "")
        except Exception as e:
            return TransportFailure(f"{type(e).__name__}: {e}")

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "PageFetcher":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
