__all__ = [
    "BoundedExecutor",
    "DetectionResult",
    "DetectorConfig",
    "PageFetcher",
    "Platform",
    "PlatformDetector",
    "RedirectPolicy",
    "TaskRejectedError",
    "classify_html",
    "config_from_env",
    "normalize_url",
    "results_to_csv",
]

from .config import DetectorConfig, RedirectPolicy, config_from_env
from .detector import PlatformDetector
from .export import results_to_csv
from .fetcher import PageFetcher
from .fingerprinting import classify_html
from .models import DetectionResult
from .platforms import Platform
from .pool import BoundedExecutor, TaskRejectedError
from .urls import normalize_url
