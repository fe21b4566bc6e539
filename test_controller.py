#!/usr/bin/env python3
"""
End-to-end tests for the orchestrator with a stubbed HTTP session.
"""

import sys
from pathlib import Path

import pytest

# Add the src directory to the path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from vestige.core.controller import VestigeController, RunSettings
from vestige.core.retriever import PageRetriever
from vestige.utils.config import PathRoles
from vestige.utils.targets import Target, RunClock
from conftest import FakeSession, FakeResponse


CLOCK = RunClock(date="2026-10-18", timestamp=1792310400)

PAGE = (b'<div id="content"><a href="/sites/default/files/doc.pdf">x</a></div>'
        b'<div class="layout-csun--footer">')


def make_controller(tmp_path, session, **settings):
    paths = PathRoles(
        departments_root=str(tmp_path / "archive"),
        targets_file=str(tmp_path / "targets.txt"),
        base_url="https://example.org/",
        reports_root=str(tmp_path),
    )
    sleeps = []
    controller = VestigeController(paths, RunSettings(**settings), retriever=PageRetriever(session=session),
                                   sleep=sleeps.append)
    return controller, sleeps


def run_dir(tmp_path, *parts):
    return tmp_path.joinpath("archive", *parts, CLOCK.date, str(CLOCK.timestamp))


def test_page_and_linked_file_are_archived(tmp_path):
    session = FakeSession({
        "https://example.org/dept/page": PAGE,
        "https://example.org/sites/default/files/doc.pdf": b"%PDF-1.4",
    })
    controller, _ = make_controller(tmp_path, session)

    summary = controller.run([Target("dept", ("page",))], CLOCK)

    location = run_dir(tmp_path, "dept", "page")
    assert (location / "page.txt").read_bytes() == PAGE
    assert (location / "assets" / "doc.pdf").read_bytes() == b"%PDF-1.4"
    assert summary.stored == 1 and summary.assets_downloaded == 1

    report = Path(summary.report_path)
    assert report == tmp_path / "reports" / CLOCK.date / str(CLOCK.timestamp) / "report.txt"
    assert report.read_text(encoding="utf-8") == f"{location / 'page.txt'},\n"


def test_not_found_target_is_skipped(tmp_path):
    session = FakeSession({"https://example.org/dept/good": b"<p>no region</p>"})
    controller, _ = make_controller(tmp_path, session)

    summary = controller.run([Target("dept", ("missing",)), Target("dept", ("good",))], CLOCK)

    assert not (tmp_path / "archive" / "dept" / "missing").exists()
    assert summary.skipped == 1
    assert summary.skipped_urls == ["https://example.org/dept/missing"]
    lines = Path(summary.report_path).read_text(encoding="utf-8").splitlines()
    assert lines == [f"{run_dir(tmp_path, 'dept', 'good') / 'good.txt'},"]


def test_all_targets_failing_still_produces_report(tmp_path, connection_error):
    session = FakeSession({"https://example.org/dept/down": connection_error})
    controller, _ = make_controller(tmp_path, session)

    summary = controller.run([Target("dept", ("down",)), Target("dept", ("gone",))], CLOCK)

    assert summary.skipped == 2
    assert Path(summary.report_path).read_bytes() == b""


def test_targets_share_one_run_directory(tmp_path):
    session = FakeSession({
        "https://example.org/dept/one": b"one",
        "https://example.org/art/two": b"two",
    })
    controller, _ = make_controller(tmp_path, session)

    controller.run([Target("dept", ("one",)), Target("art", ("two",))])

    stamps = {p.parent.relative_to(p.parents[2]) for p in (tmp_path / "archive").rglob("*.txt")}
    assert len(stamps) == 1


def test_asset_failure_does_not_affect_target(tmp_path):
    page = (b'<div id="content"><img src="/sites/default/files/a.png">'
            b'<img src="/sites/default/files/b.png"></div>')
    session = FakeSession({
        "https://example.org/dept/page": page,
        "https://example.org/sites/default/files/a.png": b"png-a",
        "https://example.org/sites/default/files/b.png": FakeResponse(503),
    })
    controller, _ = make_controller(tmp_path, session)

    summary = controller.run([Target("dept", ("page",))], CLOCK)

    assert summary.stored == 1
    assert summary.assets_downloaded == 1
    assert summary.assets_failed == 1
    assert (run_dir(tmp_path, "dept", "page") / "page.txt").exists()


def test_storage_failure_records_fallback(tmp_path):
    session = FakeSession({"https://example.org/dept/page": b"body"})
    controller, _ = make_controller(tmp_path, session)
    # A file in place of the target directory makes directory creation fail
    (tmp_path / "archive" / "dept").mkdir(parents=True)
    (tmp_path / "archive" / "dept" / "page").write_text("in the way")

    summary = controller.run([Target("dept", ("page",))], CLOCK)

    assert summary.store_failed == 1
    assert Path(summary.report_path).read_text(encoding="utf-8") == "No data for dept/page,\n"


def test_fifo_and_lifo_order(tmp_path):
    targets = [Target("dept", ("a",)), Target("dept", ("b",)), Target("dept", ("c",))]

    session = FakeSession()
    controller, _ = make_controller(tmp_path, session)
    controller.run(targets, CLOCK)
    assert session.requested == [f"https://example.org/dept/{x}" for x in "abc"]

    session = FakeSession()
    controller, _ = make_controller(tmp_path, session, queue_order="lifo")
    controller.run(targets, CLOCK)
    assert session.requested == [f"https://example.org/dept/{x}" for x in "cba"]


def test_unknown_queue_order_rejected(tmp_path):
    with pytest.raises(ValueError):
        make_controller(tmp_path, FakeSession(), queue_order="random")


def test_throttle_pauses_after_each_batch(tmp_path):
    targets = [Target("dept", (str(i),)) for i in range(7)]
    controller, sleeps = make_controller(tmp_path, FakeSession(), batch_size=3, batch_delay_secs=0.5)

    controller.run(targets, CLOCK)

    assert sleeps == [0.5, 0.5]


def test_asset_failures_counted_per_run(tmp_path):
    page = b'<div id="content"><img src="/sites/default/files/gone.png"></div>'
    session = FakeSession({"https://example.org/dept/page": page})
    controller, _ = make_controller(tmp_path, session)

    first = controller.run([Target("dept", ("page",))], CLOCK)
    second = controller.run([Target("dept", ("page",))], RunClock(date=CLOCK.date, timestamp=CLOCK.timestamp + 1))

    assert first.assets_failed == 1
    assert second.assets_failed == 1
