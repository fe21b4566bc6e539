#!/usr/bin/env python3
"""
Tests for the run report.
"""

import sys
from pathlib import Path

import pytest

# Add the src directory to the path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from vestige.core.report import RunReport
from vestige.utils.storage import StoragePathBuilder
from vestige.utils.targets import RunClock


CLOCK = RunClock(date="2026-10-18", timestamp=1792310400)


def test_entries_serialized_in_order(tmp_path):
    report = RunReport(StoragePathBuilder(str(tmp_path)), CLOCK)
    report.add("archive/dept/one.txt")
    report.add("No data for dept/two")

    path = report.finalize()

    assert path == str(tmp_path / "reports" / "2026-10-18" / "1792310400" / "report.txt")
    assert Path(path).read_text(encoding="utf-8") == "archive/dept/one.txt,\nNo data for dept/two,\n"


def test_empty_report_is_still_written(tmp_path):
    path = RunReport(StoragePathBuilder(str(tmp_path)), CLOCK).finalize()
    assert Path(path).read_bytes() == b""


def test_finalize_only_once(tmp_path):
    report = RunReport(StoragePathBuilder(str(tmp_path)), CLOCK)
    report.finalize()
    with pytest.raises(RuntimeError):
        report.finalize()
    with pytest.raises(RuntimeError):
        report.add("late")


def test_write_failure_returns_fallback(tmp_path):
    storage = StoragePathBuilder(str(tmp_path))
    report = RunReport(storage, CLOCK)
    # A directory where the report file should go makes the write fail
    (report.location / "report.txt").mkdir(parents=True)
    assert report.finalize() == "No data for reports"
