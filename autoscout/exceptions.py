"""Custom exceptions for the crawl engine."""


class NavigationError(Exception):
    """Raised when a page cannot be loaded even after the fallback attempt."""

    def __init__(self, url: str, original: Exception):
        self.url = url
        self.original = original
        super().__init__(f"Navigation failed for {url}: {original}")


class JobAlreadyStartedError(RuntimeError):
    """Raised when a crawl job's event stream is requested a second time."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Crawl job '{job_id}' has already been started")
