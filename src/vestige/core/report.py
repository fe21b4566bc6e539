"""
Run report: one line per stored page, written once at the end of a run.

Entries are the stored file paths, or ``No data for <url>`` when a page
could not be stored. Each entry is terminated by ``",\\n"``.
"""

import logging
from typing import List

from ..utils.storage import StoragePathBuilder
from ..utils.targets import Target, RunClock
from .errors import FilesystemError


REPORT_TARGET = Target(base="reports")
REPORT_FILENAME = "report.txt"
ENTRY_TERMINATOR = ",\n"


def no_data(label: str) -> str:
    return f"No data for {label}"


class RunReport:
    def __init__(self, storage: StoragePathBuilder, clock: RunClock):
        self.storage = storage
        self.clock = clock
        self.entries: List[str] = []
        self.finalized = False
        self.logger = logging.getLogger(__name__)

    @property
    def location(self):
        return self.storage.location(REPORT_TARGET, self.clock)

    def add(self, result: str) -> None:
        if self.finalized:
            raise RuntimeError("report already finalized")
        self.entries.append(result)

    def serialize(self) -> bytes:
        return "".join(entry + ENTRY_TERMINATOR for entry in self.entries).encode('utf-8')

    def finalize(self) -> str:
        """
        Write the report and return its path, or the no-data fallback when
        the write fails.

        Raises:
            FilesystemError: If the report directory cannot be created
            RuntimeError: If called twice
        """
        if self.finalized:
            raise RuntimeError("report already finalized")
        self.finalized = True

        self.storage.ensure_exists(REPORT_TARGET, self.clock)
        path = self.storage.file_path(REPORT_TARGET, self.clock, REPORT_FILENAME)
        try:
            written = self.storage.write_bytes(path, self.serialize())
        except FilesystemError as e:
            self.logger.error(f"Failed to write report: {e}")
            return no_data(REPORT_TARGET.base)

        self.logger.info(f"Report with {len(self.entries)} entries written to {written}")
        return written
