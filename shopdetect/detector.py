from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Callable, List, Optional, Sequence, Union

from .config import DetectorConfig
from .export import results_to_csv
from .fetcher import PageFetcher
from .fingerprinting import classify_html
from .models import NO_STATUS, DetectionResult
from .pool import BoundedExecutor
from .urls import normalize_url

logger = logging.getLogger(__name__)

ResultCallback = Callable[[int, DetectionResult], None]


def _unexpected(url: str, exc: BaseException) -> DetectionResult:
    return DetectionResult.failure(url, NO_STATUS, f"Unexpected error: {type(exc).__name__}")


class PlatformDetector:
    """
    Batch fetch + classify over a bounded worker pool.

    Every input URL yields exactly one DetectionResult, in input order. Failures of
    one URL (bad input, HTTP error, transport error, or anything unexpected) are
    turned into that URL's error result and never affect the rest of the batch.
    """

    def __init__(
        self,
        cfg: DetectorConfig | None = None,
        *,
        fetcher: Optional[PageFetcher] = None,
        executor: Optional[BoundedExecutor] = None,
    ) -> None:
        self.cfg = cfg or DetectorConfig()
        self._owns_fetcher = fetcher is None
        self._owns_executor = executor is None
        self.fetcher = fetcher if fetcher is not None else PageFetcher(self.cfg)
        self.executor = (
            executor
            if executor is not None
            else BoundedExecutor(
                self.cfg.max_workers,
                self.cfg.queue_capacity,
                block_when_full=self.cfg.block_when_full,
            )
        )

    def detect_one(self, url: str) -> DetectionResult:
        normalized = normalize_url(url)
        if not normalized:
            logger.warning("Skipping empty URL input")
            return DetectionResult.failure(url, NO_STATUS, "Empty URL")
        if normalized != url:
            logger.debug("Normalized URL: %r -> %r", url, normalized)

        outcome = self.fetcher.fetch(normalized)
        if not outcome.ok:
            logger.warning("Fetch failed for %r: %s", normalized, outcome.message)
            return DetectionResult.failure(url, outcome.status_code, outcome.message)

        logger.debug("Fetched %d chars from %r (HTTP %s)", len(outcome.body), normalized, outcome.status_code)
        found = classify_html(outcome.body)
        if found.platforms:
            logger.debug("Detected %s for %r", sorted(p.name for p in found.platforms), url)
        else:
            logger.debug("No platform detected for %r", url)
        return DetectionResult.success(url, found.platforms, found.evidence, status_code=outcome.status_code)

    def _detect_guarded(self, url: str) -> DetectionResult:
        try:
            return self.detect_one(url)
        except Exception as e:
            logger.warning("Unexpected failure for %r: %r", url, e)
            return _unexpected(url, e)

    def detect_urls(self, urls: Sequence[str], *, on_result: Optional[ResultCallback] = None) -> List[DetectionResult]:
        """
        Detect platforms for every URL and block until all are done.

        `on_result(index, result)` is called on the calling thread, in input order,
        as results are joined. An exception from the callback is logged and the
        batch carries on.
        """
        if not urls:
            logger.info("No URLs provided for detection")
            return []

        logger.info(
            "Starting platform detection for %d URL(s) with max concurrency %d",
            len(urls),
            self.executor.max_workers,
        )

        pending: List[Union[Future, DetectionResult]] = []
        for url in urls:
            try:
                pending.append(self.executor.submit(self._detect_guarded, url))
            except Exception as e:
                logger.warning("Could not schedule %r: %s", url, e)
                pending.append(_unexpected(url, e))

        results: List[DetectionResult] = []
        for i, (url, item) in enumerate(zip(urls, pending)):
            if isinstance(item, DetectionResult):
                result = item
            else:
                try:
                    result = item.result()
                except Exception as e:
                    logger.warning("Unexpected failure for %r: %r", url, e)
                    result = _unexpected(url, e)
            results.append(result)
            if on_result is not None:
                try:
                    on_result(i, result)
                except Exception:
                    logger.exception("on_result callback failed for %r", url)

        ok_count = sum(1 for r in results if r.ok)
        logger.info("Finished platform detection: %d succeeded, %d failed", ok_count, len(results) - ok_count)
        return results

    def detect_urls_csv(self, urls: Sequence[str]) -> str:
        return results_to_csv(self.detect_urls(urls))

    def close(self) -> None:
        if self._owns_executor:
            self.executor.shutdown(wait=True)
        if self._owns_fetcher:
            self.fetcher.close()

    def __enter__(self) -> "PlatformDetector":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
