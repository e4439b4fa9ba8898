"""
API route handlers for starting, following and stopping crawls.
"""
import logging
from typing import AsyncIterator, List

from fastapi import APIRouter, Query, HTTPException, Depends
from fastapi.responses import StreamingResponse

from autoscout import CrawlOrchestrator, CrawlSettings, CrawlEvent, CrawlJob, encode_sse
from ..config import config
from ..jobs import JobManager, get_job_manager
from ..models import VehicleOut, JobsResponse, StopResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/crawl", tags=["crawl"])


def get_orchestrator() -> CrawlOrchestrator:
    """Dependency building an orchestrator from environment settings."""
    return CrawlOrchestrator(CrawlSettings.from_env())


async def _sse_stream(job: CrawlJob, events: AsyncIterator[CrawlEvent], jobs: JobManager):
    try:
        async for event in events:
            yield encode_sse(event)
    finally:
        # Closing the event stream releases the browser on client disconnect
        await events.aclose()
        jobs.release(job.job_id)


@router.get("/scrape")
async def start_crawl(
    url: str = Query(..., min_length=1, description="Search results URL"),
    multi_page: bool = Query(False, alias="multiPage"),
    orchestrator: CrawlOrchestrator = Depends(get_orchestrator),
    jobs: JobManager = Depends(get_job_manager),
):
    """Start a crawl and stream its events as server-sent events."""
    if len(jobs.active_ids()) >= config.MAX_CONCURRENT_JOBS:
        raise HTTPException(status_code=429, detail="Too many crawls running")

    job, events = orchestrator.start_crawl(url, multi_page)
    jobs.register(job)
    logger.info(f"Starting crawl {job.job_id}: url={url} multi_page={multi_page}")

    return StreamingResponse(
        _sse_stream(job, events, jobs),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Crawl-Id": job.job_id,
        },
    )


@router.get("/jobs", response_model=JobsResponse)
async def list_jobs(jobs: JobManager = Depends(get_job_manager)):
    """List the crawls currently running."""
    return JobsResponse(jobs=jobs.active_ids())


@router.post("/stop", response_model=StopResponse)
async def stop_all_crawls(jobs: JobManager = Depends(get_job_manager)):
    """Request cancellation of every running crawl."""
    count = jobs.stop_all()
    return StopResponse(success=True, message="Extraction cancelled", cancelled=count)


@router.post("/{job_id}/stop", response_model=StopResponse)
async def stop_crawl(job_id: str, jobs: JobManager = Depends(get_job_manager)):
    """Request cancellation of one crawl; acknowledged by its final complete event."""
    if not jobs.stop(job_id):
        raise HTTPException(status_code=404, detail="Crawl not found")
    return StopResponse(success=True, message="Extraction cancelled", cancelled=1)


@router.get("/{job_id}/vehicles", response_model=List[VehicleOut])
async def get_job_vehicles(job_id: str, jobs: JobManager = Depends(get_job_manager)):
    """Snapshot of the vehicles a running crawl has collected so far."""
    job = jobs.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Crawl not found")
    return [VehicleOut(**v.to_dict()) for v in list(job.collected_vehicles)]
