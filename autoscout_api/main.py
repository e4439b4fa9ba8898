"""
AutoScout24 Crawl API - application entry point.

Wires the crawl router, CORS and error handlers around the engine in `autoscout`.
"""
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from autoscout import CrawlSettings, JobAlreadyStartedError, __version__ as engine_version
from .config import config
from .jobs import job_manager
from .routes import crawl_router

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate API and engine settings on startup, cancel running crawls on shutdown."""
    logger.info("Starting AutoScout24 Crawl API...")
    try:
        config.validate()
        settings = CrawlSettings.from_env()
        settings.validate()
        logger.info(
            f"Crawl defaults: max_pages={settings.max_pages}, headless={settings.headless}, "
            f"max concurrent crawls={config.MAX_CONCURRENT_JOBS}"
        )
        yield
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise
    finally:
        stopped = job_manager.stop_all()
        logger.info(f"Shutting down, {stopped} running crawl(s) asked to stop")


app = FastAPI(
    title=config.API_TITLE,
    version=config.API_VERSION,
    description=config.API_DESCRIPTION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Browser clients read the job id from X-Crawl-Id to address stop requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=config.CORS_ALLOW_CREDENTIALS,
    allow_methods=config.CORS_ALLOW_METHODS,
    allow_headers=config.CORS_ALLOW_HEADERS,
    expose_headers=["X-Crawl-Id"],
)


@app.exception_handler(JobAlreadyStartedError)
async def job_already_started_handler(request: Request, exc: JobAlreadyStartedError):
    logger.warning(f"Rejected restart of crawl {exc.job_id}")
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Last-resort handler for errors raised outside a crawl's event stream."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


@app.get("/health")
async def health_check():
    """Liveness plus the number of crawls currently streaming."""
    return {
        "status": "healthy",
        "version": config.API_VERSION,
        "engine_version": engine_version,
        "active_crawls": len(job_manager.active_ids()),
        "max_concurrent_crawls": config.MAX_CONCURRENT_JOBS,
    }


app.include_router(crawl_router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "autoscout_api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=False,
        log_level=config.LOG_LEVEL.lower()
    )
