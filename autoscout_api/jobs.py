"""
Registry of the crawl jobs currently streaming.
"""
import logging
from typing import Dict, List, Optional

from autoscout import CancellationRegistry, CrawlJob

logger = logging.getLogger(__name__)


class JobManager:
    """Active jobs and their cancellation tokens; one token per job."""

    def __init__(self):
        self.cancellations = CancellationRegistry()
        self._jobs: Dict[str, CrawlJob] = {}

    def register(self, job: CrawlJob) -> None:
        job.cancel_token = self.cancellations.create(job.job_id)
        self._jobs[job.job_id] = job
        logger.info("Job %s registered for %s", job.job_id, job.base_search_url)

    def get(self, job_id: str) -> Optional[CrawlJob]:
        return self._jobs.get(job_id)

    def active_ids(self) -> List[str]:
        return list(self._jobs)

    def stop(self, job_id: str) -> bool:
        return self.cancellations.request_cancel(job_id)

    def stop_all(self) -> int:
        return self.cancellations.request_cancel_all()

    def release(self, job_id: str) -> None:
        self._jobs.pop(job_id, None)
        self.cancellations.cleanup(job_id)
        logger.info("Job %s released", job_id)


job_manager = JobManager()


def get_job_manager() -> JobManager:
    return job_manager
