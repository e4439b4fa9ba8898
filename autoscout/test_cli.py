"""
Tests for the command line entry point with the browser replaced by a scripted page.
"""
import json

import pandas as pd
import pytest

from . import orchestrator
from .cli import main, parse_args
from .testing import FakePageContext, SEARCH_URL, build_site


@pytest.fixture
def fake_browser(monkeypatch):
    ctx = FakePageContext(build_site([2, 1]))

    async def launch(settings=None):
        return ctx

    monkeypatch.setattr(orchestrator, "launch_page_context", launch)
    for name in ("PRIMARY_SETTLE_MS", "CONSENT_TIMEOUT_MS", "PHONE_REVEAL_SETTLE_MS",
                 "MIN_LISTING_DELAY_MS", "MAX_LISTING_DELAY_MS", "PAGE_DELAY_MS"):
        monkeypatch.setenv(f"AUTOSCOUT_{name}", "0")
    return ctx


def test_parse_args_defaults():
    args = parse_args(["--url", SEARCH_URL])
    assert args.url == SEARCH_URL
    assert args.multi_page is False
    assert args.max_pages is None
    assert args.out == "autoscout_results.csv"


def test_parse_args_requires_url():
    with pytest.raises(SystemExit):
        parse_args([])


def test_multi_page_run_exports_csv_and_logs(fake_browser, tmp_path):
    out = tmp_path / "vehicles.csv"
    log_out = tmp_path / "run.txt"
    code = main(["--url", SEARCH_URL, "--multi-page", "--max-pages", "5",
                 "--out", str(out), "--log-out", str(log_out), "--no-file-log"])

    assert code == 0
    df = pd.read_csv(out, dtype={"phone": str})
    assert len(df) == 3
    assert list(df["page"]) == [1, 1, 2]
    assert set(df["phone"]) == {"32498123456"}

    lines = log_out.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "Starting extraction..."
    assert lines[-1].startswith("=== Scraping complete ===")
    assert fake_browser.closed


def test_events_flag_prints_ndjson(fake_browser, tmp_path, capsys):
    code = main(["--url", SEARCH_URL, "--events", "--out", str(tmp_path / "v.csv"), "--no-file-log"])
    assert code == 0

    events = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.startswith("{")]
    assert events[-1] == {"type": "complete"}
    assert len(fake_browser.search_navigations()) == 1


def test_failed_run_exits_non_zero(monkeypatch, tmp_path):
    async def launch(settings=None):
        raise RuntimeError("Executable doesn't exist")

    monkeypatch.setattr(orchestrator, "launch_page_context", launch)
    out = tmp_path / "v.csv"
    assert main(["--url", SEARCH_URL, "--out", str(out), "--no-file-log"]) == 1
    assert not out.exists()
