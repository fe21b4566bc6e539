"""
Vestige Orchestrator: runs the archive pipeline for one run.

Each target is resolved completely (fetched, scanned, assets downloaded,
stored) before the next one is dispatched. Failures are contained per target
and per asset; only configuration problems stop a run.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, Iterable, Optional

from .assets import AssetResolver, AssetDownloader, origin_of
from .errors import FilesystemError, HttpStatusError, TransportError
from .report import RunReport, no_data
from .retriever import PageRetriever, DEFAULT_TIMEOUT_SECS
from .scanner import (
    ContentScanner,
    DEFAULT_REGION_START,
    DEFAULT_REGION_END,
    DEFAULT_VALUE_FILTER,
    DEFAULT_OPENING_DELIMITER,
    DEFAULT_VALUE_TERMINATOR,
)
from ..utils.config import PathRoles
from ..utils.rate_limiter import FixedWindowLimiter
from ..utils.storage import StoragePathBuilder, ASSETS_DIRNAME
from ..utils.targets import Target, RunClock


@dataclass
class RunSettings:
    batch_size: int = 3
    batch_delay_secs: float = 1.0
    timeout_secs: float = DEFAULT_TIMEOUT_SECS
    region_start: str = DEFAULT_REGION_START
    region_end: str = DEFAULT_REGION_END
    value_filter: str = DEFAULT_VALUE_FILTER
    opening_delimiter: str = DEFAULT_OPENING_DELIMITER
    value_terminator: str = DEFAULT_VALUE_TERMINATOR
    space_replacement: str = " "
    fallback_asset_name: str = "asset"
    assets_dirname: str = ASSETS_DIRNAME
    queue_order: str = "fifo"  # fifo | lifo


@dataclass
class RunSummary:
    targets: int = 0
    fetched: int = 0
    skipped: int = 0
    stored: int = 0
    store_failed: int = 0
    assets_downloaded: int = 0
    assets_failed: int = 0
    report_path: str = ""
    skipped_urls: list = field(default_factory=list)


class VestigeController:
    def __init__(self, paths: PathRoles, settings: Optional[RunSettings] = None,
                 retriever: Optional[PageRetriever] = None,
                 sleep: Optional[Callable[[float], None]] = None,
                 logger: Optional[logging.Logger] = None):
        self.paths = paths
        self.settings = settings or RunSettings()
        if self.settings.queue_order not in ("fifo", "lifo"):
            raise ValueError(f"Unknown queue order: {self.settings.queue_order}")
        self.logger = logger or logging.getLogger(__name__)

        self.retriever = retriever or PageRetriever(timeout=self.settings.timeout_secs)
        limiter_kwargs = {"sleep": sleep} if sleep is not None else {}
        self.limiter = FixedWindowLimiter(self.settings.batch_size, self.settings.batch_delay_secs,
                                          **limiter_kwargs)
        self.scanner = ContentScanner(
            region_start=self.settings.region_start,
            region_end=self.settings.region_end,
            value_filter=self.settings.value_filter,
            opening_delimiter=self.settings.opening_delimiter,
            value_terminator=self.settings.value_terminator,
        )
        self.resolver = AssetResolver(
            origin_of(paths.base_url),
            space_replacement=self.settings.space_replacement,
            fallback_name=self.settings.fallback_asset_name,
        )
        self.downloader = AssetDownloader(self.retriever, self.resolver)
        self.pages = StoragePathBuilder(paths.departments_root, assets_dirname=self.settings.assets_dirname)
        self.reports = StoragePathBuilder(paths.reports_root)

    def page_url(self, target: Target) -> str:
        return self.paths.base_url + target.url()

    def _queue(self, targets: Iterable[Target]) -> Deque[Target]:
        queue: Deque[Target] = deque(targets)
        if self.settings.queue_order == "lifo":
            queue.reverse()
        return queue

    def run(self, targets: Iterable[Target], clock: Optional[RunClock] = None) -> RunSummary:
        """Drain the target queue and write the run report."""
        clock = clock or RunClock.now()
        queue = self._queue(targets)
        summary = RunSummary(targets=len(queue))
        report = RunReport(self.reports, clock)
        self.downloader.failed = 0

        self.logger.info(f"Archiving {summary.targets} targets into {clock.date}/{clock.timestamp}")

        while queue:
            target = queue.popleft()
            self.process_one(target, clock, report, summary)

        summary.assets_failed = self.downloader.failed
        summary.report_path = report.finalize()
        self.logger.info(
            f"Run complete: {summary.stored} stored, {summary.skipped} skipped, "
            f"{summary.store_failed} storage failures, {summary.assets_downloaded} assets"
        )
        return summary

    def process_one(self, target: Target, clock: RunClock, report: RunReport, summary: RunSummary) -> None:
        url = self.page_url(target)

        # Fetching
        self.logger.info(f"Fetching {url}")
        try:
            content = self.retriever.fetch(url)
        except HttpStatusError as e:
            self.logger.warning(f"Skipping {url}: HTTP {e.status_code}")
            summary.skipped += 1
            summary.skipped_urls.append(url)
            return
        except TransportError as e:
            self.logger.warning(f"Skipping {url}: {e}")
            summary.skipped += 1
            summary.skipped_urls.append(url)
            return
        finally:
            self.limiter.record_dispatch()
        summary.fetched += 1

        # Scanning
        links, images = self.scanner.scan_all(content)
        self.logger.debug(f"{url}: {len(links)} link(s), {len(images)} image(s) in content region")

        try:
            # DownloadingAssets
            matches = links | images
            if matches:
                asset_dir = self.pages.ensure_asset_dir(target, clock)
                mapping: Dict[str, str] = self.downloader.download(matches, str(asset_dir))
                summary.assets_downloaded += len(mapping)

            # Stored
            self.pages.ensure_exists(target, clock)
            stored = self.pages.write_bytes(self.pages.file_path(target, clock), content)
        except FilesystemError as e:
            self.logger.error(f"Failed to store {url}: {e}")
            summary.store_failed += 1
            report.add(no_data(target.url()))
            return

        summary.stored += 1
        report.add(stored)
        self.logger.info(f"Stored {url} -> {stored}")
