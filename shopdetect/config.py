from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Tuple

DEFAULT_USER_AGENT = "Mozilla/5.0 (PlatformDetectorBot/1.0)"
DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


class RedirectPolicy(str, Enum):
    # Follow redirects, but never from https down to http.
    NORMAL = "normal"
    ALWAYS = "always"
    NEVER = "never"


@dataclass(frozen=True)
class DetectorConfig:
    max_workers: int = 10
    queue_capacity: int = 200
    block_when_full: bool = True
    request_timeout_seconds: float = 12.0
    connect_timeout_seconds: float = 8.0
    redirect_policy: RedirectPolicy = RedirectPolicy.NORMAL
    max_redirects: int = 10
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        object.__setattr__(self, "redirect_policy", RedirectPolicy(self.redirect_policy))
        if int(self.max_workers) < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if int(self.queue_capacity) < 0:
            raise ValueError(f"queue_capacity must be >= 0, got {self.queue_capacity}")
        if float(self.request_timeout_seconds) <= 0 or float(self.connect_timeout_seconds) <= 0:
            raise ValueError("timeouts must be positive")
        if int(self.max_redirects) < 0:
            raise ValueError(f"max_redirects must be >= 0, got {self.max_redirects}")
        if not (self.user_agent or "").strip():
            raise ValueError("user_agent must not be empty")

    @property
    def timeout(self) -> Tuple[float, float]:
        """(connect, read) tuple as accepted by requests."""
        return (float(self.connect_timeout_seconds), float(self.request_timeout_seconds))


def _parse_bool(key: str, raw: str) -> bool:
    v = raw.strip().lower()
    if v in _TRUTHY:
        return True
    if v in _FALSY:
        return False
    raise ValueError(f"{key}={raw!r} is not a boolean (use 1/0, true/false, yes/no)")


def config_from_env(env: Mapping[str, str], default: Optional[DetectorConfig] = None) -> DetectorConfig:
    """Read detector settings from SHOPDETECT_* environment variables; blank values keep the default."""
    base = default or DetectorConfig()

    def _raw(key: str) -> Optional[str]:
        v = env.get(key)
        if v is None or str(v).strip() == "":
            return None
        return str(v).strip()

    def _get_int(key: str, fallback: int) -> int:
        v = _raw(key)
        return fallback if v is None else int(v)

    def _get_float(key: str, fallback: float) -> float:
        v = _raw(key)
        return fallback if v is None else float(v)

    block = _raw("SHOPDETECT_BLOCK_WHEN_FULL")
    policy = _raw("SHOPDETECT_REDIRECT_POLICY")

    return DetectorConfig(
        max_workers=_get_int("SHOPDETECT_MAX_WORKERS", base.max_workers),
        queue_capacity=_get_int("SHOPDETECT_QUEUE_CAPACITY", base.queue_capacity),
        block_when_full=base.block_when_full if block is None else _parse_bool("SHOPDETECT_BLOCK_WHEN_FULL", block),
        request_timeout_seconds=_get_float("SHOPDETECT_REQUEST_TIMEOUT_SECONDS", base.request_timeout_seconds),
        connect_timeout_seconds=_get_float("SHOPDETECT_CONNECT_TIMEOUT_SECONDS", base.connect_timeout_seconds),
        redirect_policy=base.redirect_policy if policy is None else RedirectPolicy(policy.lower()),
        max_redirects=_get_int("SHOPDETECT_MAX_REDIRECTS", base.max_redirects),
        user_agent=_raw("SHOPDETECT_USER_AGENT") or base.user_agent,
    )
