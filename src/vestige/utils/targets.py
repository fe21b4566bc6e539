"""
Crawl targets and the per-run clock.

A target is one page under the configured origin, written in the target list
as ``base/extension/...``. The run clock namespaces every artifact of a run
under a single ``<date>/<timestamp>`` directory pair.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

from ..core.errors import ConfigurationError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Target:
    base: str
    extension: Tuple[str, ...] = ()

    @classmethod
    def from_segments(cls, segments: List[str]) -> "Target":
        if not segments:
            raise ValueError("a target needs at least a base segment")
        return cls(base=segments[0], extension=tuple(segments[1:]))

    @classmethod
    def parse(cls, line: str) -> Optional["Target"]:
        """Build a target from one ``/``-delimited line, or None for blanks and comments."""
        line = line.strip()
        if not line or line.startswith('#'):
            return None
        segments = [s.strip() for s in line.split('/')]
        # Tolerate leading/trailing slashes
        segments = [s for s in segments if s]
        if not segments:
            return None
        return cls.from_segments(segments)

    def url(self) -> str:
        return self.base + "/" + "/".join(self.extension)

    def store_name(self) -> str:
        return "-".join(self.extension) + ".txt"

    def __str__(self) -> str:
        return self.url()


@dataclass(frozen=True)
class RunClock:
    date: str
    timestamp: int

    @classmethod
    def now(cls) -> "RunClock":
        """Capture the clock once at the start of a run (UTC)."""
        current = datetime.now(timezone.utc)
        return cls(date=current.date().isoformat(), timestamp=int(current.timestamp()))


def load_targets(targets_file: str) -> List[Target]:
    """
    Read the target list, one target per line, in file order.

    Args:
        targets_file: Path of the target list

    Returns:
        Targets in the order they appear in the file

    Raises:
        ConfigurationError: If the file cannot be read
    """
    path = Path(targets_file)
    try:
        text = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Cannot read target list {targets_file}: {e}") from e

    targets: List[Target] = []
    for lineno, line in enumerate(text.splitlines(), 1):
        target = Target.parse(line)
        if target is None:
            continue
        targets.append(target)
        logger.debug(f"Target {lineno}: {target.url()}")

    logger.info(f"Loaded {len(targets)} targets from {targets_file}")
    return targets
