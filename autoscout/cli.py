"""
Command line entry point: run one crawl job and export its results.
"""
import argparse
import asyncio
import os
import signal
import sys
from typing import List, Optional

from .config import CrawlSettings
from .events import CompleteEvent, LogEvent, ProgressEvent, ResultEvent, ErrorEvent, encode_ndjson
from .export import save_vehicles, save_logs
from .orchestrator import CrawlOrchestrator
from .utils import init_logger, now_iso


def parse_args(argv: Optional[List[str]] = None):
    ap = argparse.ArgumentParser(description="AutoScout24 listing crawler (multi-page, with phone reveal)")
    ap.add_argument("--url", type=str, required=True, help="AutoScout24 search results URL")
    ap.add_argument("--multi-page", action="store_true", help="Follow result pages up to --max-pages")
    ap.add_argument("--max-pages", type=int, default=None, help="Maximum result pages (default from env or 20)")
    ap.add_argument("--headed", action="store_true", help="Show the browser window")
    ap.add_argument("--out", type=str, default="autoscout_results.csv", help="CSV/XLSX to export")
    ap.add_argument("--log-out", type=str, default="", help="Also save the run's log messages to this file")
    ap.add_argument("--events", action="store_true", help="Print raw events as JSON lines on stdout")
    # Logging
    lvl_choices = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    ap.add_argument("--log-level", choices=lvl_choices, default=None,
                    help="Global log level for both console and file (overrides --log-console/--log-file).")
    ap.add_argument("--log-console", choices=lvl_choices, default=os.getenv("LOG_CONSOLE", "INFO"),
                    help="Console log level (default from env LOG_CONSOLE or INFO).")
    ap.add_argument("--log-file", choices=lvl_choices, default=os.getenv("LOG_FILE", "DEBUG"),
                    help="File log level (default from env LOG_FILE or DEBUG).")
    ap.add_argument("--log-file-path", default=os.getenv("LOG_FILE_PATH", "autoscout.log"),
                    help="Path to log file (default from env LOG_FILE_PATH or autoscout.log).")
    ap.add_argument("--no-file-log", action="store_true",
                    help="Disable file logging (only console output).")
    return ap.parse_args(argv)


async def run_cli(args, logger) -> int:
    overrides = {}
    if args.max_pages is not None:
        overrides["max_pages"] = args.max_pages
    if args.headed:
        overrides["headless"] = False
    settings = CrawlSettings.from_env(**overrides)

    orchestrator = CrawlOrchestrator(settings)
    job, events = orchestrator.start_crawl(args.url, args.multi_page)

    # Ctrl+C stops after the listing in progress instead of killing the browser
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, job.request_cancel)
    except (NotImplementedError, RuntimeError):
        pass

    log_lines: List[str] = []
    exit_code = 0
    async for event in events:
        if args.events:
            sys.stdout.write(encode_ndjson(event))
            sys.stdout.flush()
        if isinstance(event, LogEvent):
            log_lines.append(event.message)
        elif isinstance(event, ProgressEvent):
            logger.debug(">>> Progress: %d%%", event.value)
        elif isinstance(event, ResultEvent):
            logger.debug(">>> %d vehicles collected", len(event.vehicles))
        elif isinstance(event, ErrorEvent):
            logger.error(event.message)
            exit_code = 1
        elif isinstance(event, CompleteEvent):
            logger.info(">>> Job %s complete", job.job_id)

    if job.collected_vehicles:
        save_vehicles(job.collected_vehicles, args.out, settings.phone_country_prefix)
    if args.log_out:
        save_logs(log_lines, args.log_out)
    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    eff_console = args.log_level or args.log_console
    eff_file = args.log_level or args.log_file
    logger = init_logger(
        console_level=eff_console,
        file_level=eff_file,
        log_file=None if args.no_file_log else args.log_file_path
    )
    logger.info(
        f"Logger initialized: console={eff_console}, "
        f"file={'DISABLED' if args.no_file_log else eff_file}, "
        f"path={'N/A' if args.no_file_log else args.log_file_path}"
    )
    logger.info(f">>> Run started at {now_iso()}")
    return asyncio.run(run_cli(args, logger))
