from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .platforms import Platform, parse_platform
from .schema import RECORD_FIELDS

# statusCode for results that never produced an HTTP status line.
NO_STATUS = -1

_EMPTY_EVIDENCE: Mapping[Platform, Tuple[str, ...]] = MappingProxyType({})


def _freeze_evidence(evidence: Optional[Mapping[Platform, Sequence[str]]]) -> Mapping[Platform, Tuple[str, ...]]:
    if not evidence:
        return _EMPTY_EVIDENCE
    ordered = sorted(evidence.items(), key=lambda kv: kv[0].name)
    return MappingProxyType({p: tuple(reasons) for p, reasons in ordered})


@dataclass(frozen=True)
class DetectionResult:
    url: str
    ok: bool
    status_code: int
    error: Optional[str] = None
    platforms: FrozenSet[Platform] = frozenset()
    # MappingProxyType is unhashable; equality still compares it.
    evidence: Mapping[Platform, Tuple[str, ...]] = field(default_factory=lambda: _EMPTY_EVIDENCE, hash=False)

    def __post_init__(self) -> None:
        # Accept mutable accumulators from callers; store read-only views.
        object.__setattr__(self, "platforms", frozenset(self.platforms or ()))
        object.__setattr__(self, "evidence", _freeze_evidence(self.evidence))

        if self.ok:
            if self.error is not None:
                raise ValueError("ok result must not carry an error")
            if not 200 <= int(self.status_code) < 400:
                raise ValueError(f"ok result needs a 2xx/3xx status, got {self.status_code}")
        else:
            if not self.error:
                raise ValueError("failed result needs an error message")
            if self.platforms or self.evidence:
                raise ValueError("failed result must not carry platforms or evidence")
        extra = set(self.evidence) - set(self.platforms)
        if extra:
            names = ", ".join(sorted(p.name for p in extra))
            raise ValueError(f"evidence for undetected platform(s): {names}")

    @classmethod
    def success(
        cls,
        url: str,
        platforms: Iterable[Platform],
        evidence: Optional[Mapping[Platform, Sequence[str]]] = None,
        *,
        status_code: int = 200,
    ) -> "DetectionResult":
        return cls(url=url, ok=True, status_code=status_code, platforms=frozenset(platforms), evidence=evidence or {})

    @classmethod
    def failure(cls, url: str, status_code: int, error: str) -> "DetectionResult":
        return cls(url=url, ok=False, status_code=status_code, error=error)

    def sorted_platform_names(self) -> List[str]:
        return sorted(p.name for p in self.platforms)

    def to_record(self) -> Dict[str, Any]:
        """Plain-JSON view with keys in RECORD_FIELDS order."""
        values = {
            "url": self.url,
            "ok": self.ok,
            "statusCode": int(self.status_code),
            "error": self.error,
            "platforms": self.sorted_platform_names(),
            "evidence": {p.name: list(reasons) for p, reasons in sorted(self.evidence.items(), key=lambda kv: kv[0].name)},
        }
        return {k: values[k] for k in RECORD_FIELDS}

    @classmethod
    def from_record(cls, rec: Mapping[str, Any]) -> "DetectionResult":
        platforms = frozenset(parse_platform(n) for n in (rec.get("platforms") or []))
        evidence = {parse_platform(k): list(v or []) for k, v in (rec.get("evidence") or {}).items()}
        return cls(
            url=rec.get("url") or "",
            ok=bool(rec.get("ok")),
            status_code=int(rec.get("statusCode", NO_STATUS)),
            error=rec.get("error"),
            platforms=platforms,
            evidence=evidence,
        )


@dataclass(frozen=True)
class FetchSuccess:
    status_code: int
    body: str

    ok = True


@dataclass(frozen=True)
class HttpFailure:
    status_code: int

    ok = False

    @property
    def message(self) -> str:
        return f"HTTP {self.status_code}"


@dataclass(frozen=True)
class TransportFailure:
    reason: str

    ok = False
    status_code = NO_STATUS

    @property
    def message(self) -> str:
        return self.reason


FetchOutcome = Union[FetchSuccess, HttpFailure, TransportFailure]
