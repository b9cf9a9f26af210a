from __future__ import annotations

import urllib.parse
from typing import Optional


def normalize_url(url: Optional[str]) -> str:
    """Trim and default the scheme to https. Blank input returns "" (do not fetch)."""
    u = (url or "").strip()
    if not u:
        return ""
    if not u.startswith(("http://", "https://")):
        u = "https://" + u
    return u


def normalize_for_dedupe(url: Optional[str]) -> str:
    """Comparison key for input rows: host + path + query, lower-cased, no scheme or trailing slash."""
    u = (url or "").strip().lower()
    if not u:
        return ""
    parts = urllib.parse.urlsplit(u if "://" in u else "//" + u)
    key = parts.netloc + parts.path
    if parts.query:
        key = f"{key}?{parts.query}"
    return key.rstrip("/")
