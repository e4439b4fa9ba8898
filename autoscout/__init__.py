"""
AutoScout24 Listing Crawler Package
"""
from .models import CrawlJob, ListingCandidate, VehicleRecord, CascadeResult
from .cancellation import CancellationToken, CancellationRegistry
from .config import CrawlSettings
from .events import (
    CrawlEvent,
    LogEvent,
    ProgressEvent,
    ResultEvent,
    ErrorEvent,
    CompleteEvent,
    encode_ndjson,
    encode_sse
)
from .exceptions import NavigationError, JobAlreadyStartedError
from .orchestrator import CrawlOrchestrator, new_job
from .rate_limit import RateLimiter
from .export import save_vehicles, save_logs, vehicles_to_frame
from .utils import init_logger, now_iso, normalize_price, normalize_phone

__version__ = "1.0.0"

__all__ = [
    "CrawlJob",
    "ListingCandidate",
    "VehicleRecord",
    "CascadeResult",
    "CancellationToken",
    "CancellationRegistry",
    "CrawlSettings",
    "CrawlEvent",
    "LogEvent",
    "ProgressEvent",
    "ResultEvent",
    "ErrorEvent",
    "CompleteEvent",
    "encode_ndjson",
    "encode_sse",
    "NavigationError",
    "JobAlreadyStartedError",
    "CrawlOrchestrator",
    "new_job",
    "RateLimiter",
    "save_vehicles",
    "save_logs",
    "vehicles_to_frame",
    "init_logger",
    "now_iso",
    "normalize_price",
    "normalize_phone"
]
