"""
Tests for the crawl API using FastAPI's TestClient and a scripted page context.
"""
import importlib
import json

import pytest
from fastapi.testclient import TestClient

from autoscout import CrawlOrchestrator, VehicleRecord
from autoscout.testing import FakePageContext, SEARCH_URL, build_site, fast_settings
from autoscout.orchestrator import new_job

from .config import config
from .jobs import JobManager, get_job_manager
from .main import app
from .routes.crawl import get_orchestrator


@pytest.fixture
def jobs():
    return JobManager()


@pytest.fixture
def site_context():
    return FakePageContext(build_site([2]))


@pytest.fixture
def client(jobs, site_context):
    async def factory():
        return site_context

    app.dependency_overrides[get_job_manager] = lambda: jobs
    app.dependency_overrides[get_orchestrator] = lambda: CrawlOrchestrator(
        fast_settings(max_pages=3), context_factory=factory
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def _sse_events(body: str):
    return [json.loads(line[len("data: "):]) for line in body.splitlines() if line.startswith("data: ")]


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["active_crawls"] == 0
    assert data["max_concurrent_crawls"] >= 1


def test_scrape_streams_events_until_complete(client, jobs, site_context):
    response = client.get("/api/crawl/scrape", params={"url": SEARCH_URL, "multiPage": "true"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["x-crawl-id"]

    events = _sse_events(response.text)
    types = [e["type"] for e in events]
    assert types[0] == "log"
    assert types[-1] == "complete"
    assert types.count("complete") + types.count("error") == 1

    results = [e for e in events if e["type"] == "result"]
    assert [len(r["vehicles"]) for r in results] == [1, 2]
    assert results[-1]["vehicles"][0]["phone"] == "32498123456"
    assert [e["value"] for e in events if e["type"] == "progress"][-1] == 100

    # finished jobs are released and their browser closed
    assert jobs.active_ids() == []
    assert site_context.close_calls == 1


def test_scrape_single_page_by_default(client, site_context):
    response = client.get("/api/crawl/scrape", params={"url": SEARCH_URL})
    assert response.status_code == 200
    assert len(site_context.search_navigations()) == 1


def test_scrape_requires_url(client):
    assert client.get("/api/crawl/scrape").status_code == 422


def test_scrape_rejected_when_at_job_limit(client, jobs):
    for _ in range(config.MAX_CONCURRENT_JOBS):
        jobs.register(new_job(SEARCH_URL, True))
    response = client.get("/api/crawl/scrape", params={"url": SEARCH_URL})
    assert response.status_code == 429


def test_jobs_list(client, jobs):
    job = new_job(SEARCH_URL, True, job_id="job-1")
    jobs.register(job)
    assert client.get("/api/crawl/jobs").json() == {"jobs": ["job-1"]}


def test_stop_one_job(client, jobs):
    first = new_job(SEARCH_URL, True, job_id="first")
    second = new_job(SEARCH_URL, True, job_id="second")
    jobs.register(first)
    jobs.register(second)

    response = client.post("/api/crawl/first/stop")
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Extraction cancelled", "cancelled": 1}
    assert first.cancelled
    assert not second.cancelled


def test_stop_unknown_job_is_404(client):
    assert client.post("/api/crawl/nope/stop").status_code == 404


def test_stop_all(client, jobs):
    running = [new_job(SEARCH_URL, True) for _ in range(2)]
    for job in running:
        jobs.register(job)

    response = client.post("/api/crawl/stop")
    assert response.status_code == 200
    assert response.json()["cancelled"] == 2
    assert all(job.cancelled for job in running)


def test_stop_all_without_jobs(client):
    data = client.post("/api/crawl/stop").json()
    assert data["success"] is True
    assert data["cancelled"] == 0


def test_job_vehicles_snapshot(client, jobs):
    job = new_job(SEARCH_URL, True, job_id="job-1")
    job.collected_vehicles.append(
        VehicleRecord(url="https://x/offres/1", page=1, title="Audi A3", price="€ 9 990")
    )
    jobs.register(job)

    data = client.get("/api/crawl/job-1/vehicles").json()
    assert len(data) == 1
    assert data[0]["title"] == "Audi A3"
    assert data[0]["price"] == "€ 9 990"
    assert client.get("/api/crawl/unknown/vehicles").status_code == 404


def test_malformed_job_limit_falls_back_to_default(monkeypatch):
    from . import config as config_module

    monkeypatch.setenv("AUTOSCOUT_MAX_CONCURRENT_JOBS", "lots")
    try:
        reloaded = importlib.reload(config_module)
        assert reloaded.Config.MAX_CONCURRENT_JOBS == 2
        reloaded.Config.validate()
    finally:
        monkeypatch.delenv("AUTOSCOUT_MAX_CONCURRENT_JOBS")
        importlib.reload(config_module)
