"""
Cooperative cancellation for crawl jobs.
"""
import logging
import threading
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class CancellationToken:
    """Per-job stop signal, set from outside and polled at loop boundaries."""

    def __init__(self, event_factory=threading.Event):
        self._event = event_factory()

    def request(self) -> None:
        self._event.set()

    def is_requested(self) -> bool:
        return self._event.is_set()


class CancellationRegistry:
    """Tokens of the currently active jobs, keyed by job id."""

    def __init__(self, token_factory=CancellationToken):
        self._token_factory = token_factory
        self._tokens: Dict[str, CancellationToken] = {}
        self._lock = threading.Lock()

    def create(self, job_id: str) -> CancellationToken:
        token = self._token_factory()
        with self._lock:
            self._tokens[job_id] = token
        return token

    def get(self, job_id: str) -> Optional[CancellationToken]:
        with self._lock:
            return self._tokens.get(job_id)

    def active_ids(self) -> List[str]:
        with self._lock:
            return list(self._tokens)

    def request_cancel(self, job_id: str) -> bool:
        token = self.get(job_id)
        if token is None:
            return False
        logger.info("Cancellation requested for job %s", job_id)
        token.request()
        return True

    def request_cancel_all(self) -> int:
        with self._lock:
            tokens = list(self._tokens.values())
        for token in tokens:
            token.request()
        logger.info("Cancellation requested for %d active job(s)", len(tokens))
        return len(tokens)

    def cleanup(self, job_id: str) -> None:
        with self._lock:
            self._tokens.pop(job_id, None)
