"""
Storage Path Utilities

This module computes where a target's artifacts live for a run and creates
those directories on demand. Layout::

    <root>/<target.base>/<target.extension...>/<date>/<timestamp>/<store name>
    <root>/<target.base>/<target.extension...>/<date>/<timestamp>/assets/<file>
"""

import os
import logging
from pathlib import Path
from typing import Callable, Optional, Set

from .targets import Target, RunClock
from ..core.errors import FilesystemError


ASSETS_DIRNAME = "assets"


def _mkdir(path: Path, parents: bool):
    path.mkdir(parents=parents, exist_ok=True)


class StoragePathBuilder:
    """
    Resolves storage locations under one root and creates them lazily.

    Directories verified or created during the run are remembered, so a path
    already known to exist is never created twice.
    """

    def __init__(self, root: str, make_dir: Optional[Callable[[Path, bool], None]] = None,
                 assets_dirname: str = ASSETS_DIRNAME):
        """
        Initialize the builder.

        Args:
            root: Storage root (departments root or reports root)
            make_dir: Directory-creating function ``(path, parents)``,
                replaceable in tests
            assets_dirname: Name of the per-target asset subdirectory
        """
        self.root = Path(root)
        self.make_dir = make_dir or _mkdir
        self.assets_dirname = assets_dirname
        self.logger = logging.getLogger(__name__)
        self._known: Set[Path] = set()

    def target_root(self, target: Target) -> Path:
        return self.root.joinpath(target.base, *target.extension)

    def date_dir(self, target: Target, clock: RunClock) -> Path:
        return self.target_root(target) / clock.date

    def location(self, target: Target, clock: RunClock) -> Path:
        """Return ``root/base/extension.../date/timestamp``."""
        return self.date_dir(target, clock) / str(clock.timestamp)

    def file_path(self, target: Target, clock: RunClock, filename: Optional[str] = None) -> Path:
        return self.location(target, clock) / (filename or target.store_name())

    def asset_dir(self, target: Target, clock: RunClock) -> Path:
        return self.location(target, clock) / self.assets_dirname

    def ensure_exists(self, target: Target, clock: RunClock) -> Path:
        """
        Create the target root, its date directory and its timestamp
        directory, in that order, skipping any that already exist.

        Args:
            target: Target being stored
            clock: Clock of the current run

        Returns:
            The storage location

        Raises:
            FilesystemError: If any step fails; later steps are not attempted
        """
        steps = [
            (self.target_root(target), True),
            (self.date_dir(target, clock), False),
            (self.location(target, clock), False),
        ]
        for path, parents in steps:
            self._ensure_dir(path, parents)
        return self.location(target, clock)

    def ensure_asset_dir(self, target: Target, clock: RunClock) -> Path:
        self.ensure_exists(target, clock)
        path = self.asset_dir(target, clock)
        self._ensure_dir(path, False)
        return path

    def _ensure_dir(self, path: Path, parents: bool):
        if path in self._known:
            return
        if not path.is_dir():
            try:
                self.make_dir(path, parents)
            except OSError as e:
                raise FilesystemError(f"Cannot create directory {path}: {e}", path=str(path)) from e
            self.logger.debug(f"Created directory: {path}")
        self._known.add(path)

    def write_bytes(self, path: Path, data: bytes) -> str:
        """
        Write a blob to disk.

        Args:
            path: Destination file
            data: Raw bytes

        Returns:
            The written path as a string

        Raises:
            FilesystemError: If the file cannot be written
        """
        try:
            with open(path, 'wb') as f:
                f.write(data)
        except OSError as e:
            raise FilesystemError(f"Cannot write {path}: {e}", path=str(path)) from e

        self.logger.debug(f"Saved {len(data)} bytes: {os.path.basename(path)}")
        return str(path)
