"""
Configuration Loading

Reads ``config/config.txt`` under the base path and resolves the four path
roles used by a run: where department pages are stored, where the target
list lives, the remote origin, and where reports are written.

Each line is split on ``;`` or ``,`` with spaces dropped. The first segment
names the role, the remaining segments are concatenated into its value::

    Departments; archive/
    Targets; config/targets.txt
    BaseUrl; https://www.example.org/
    Reports; archive/
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..core.errors import ConfigurationError


CONFIG_RELATIVE_PATH = os.path.join("config", "config.txt")

SEGMENT_SEPARATORS = re.compile(r"[;,]")

logger = logging.getLogger(__name__)


class PathRole(Enum):
    DEPARTMENTS = "Departments"
    TARGETS = "Targets"
    BASE_URL = "BaseUrl"
    REPORTS = "Reports"
    UNRESOLVED = None

    @classmethod
    def from_tag(cls, tag: str) -> "PathRole":
        for role in cls:
            if role.value == tag:
                return role
        return cls.UNRESOLVED

    @property
    def is_filesystem(self) -> bool:
        return self in (PathRole.DEPARTMENTS, PathRole.TARGETS, PathRole.REPORTS)


@dataclass(frozen=True)
class PathRoles:
    departments_root: str
    targets_file: str
    base_url: str
    reports_root: str


def tokenize_line(line: str) -> List[str]:
    """Split a config line into segments, dropping spaces."""
    return [segment.replace(' ', '') for segment in SEGMENT_SEPARATORS.split(line.rstrip('\r\n'))]


def parse_line(line: str, base_path: str) -> Tuple[PathRole, str]:
    """
    Resolve one config line into its role and value.

    Args:
        line: Raw config line
        base_path: Directory that filesystem roles are resolved under

    Returns:
        Tuple of (role, resolved value). Unknown tags give
        ``PathRole.UNRESOLVED`` with an empty value.
    """
    segments = tokenize_line(line)
    role = PathRole.from_tag(segments[0])
    if role is PathRole.UNRESOLVED:
        return role, ""

    value = "".join(segments[1:])
    if role.is_filesystem:
        value = os.path.join(base_path, value)
    return role, value


def load_path_roles(base_path: str, config_path: Optional[str] = None) -> PathRoles:
    """
    Load and resolve the path roles for a run.

    Args:
        base_path: Existing base directory of the installation
        config_path: Explicit config file (defaults to ``<base_path>/config/config.txt``)

    Returns:
        Resolved PathRoles

    Raises:
        ConfigurationError: If the file is missing or a required role is absent
    """
    path = Path(config_path) if config_path else Path(base_path) / CONFIG_RELATIVE_PATH
    try:
        lines = path.read_text(encoding='utf-8').splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(
            f"Missing config file {path}. Make sure config.txt exists in config/ "
            f"and lists Departments, Targets and BaseUrl."
        ) from e

    resolved: Dict[PathRole, str] = {}
    for lineno, line in enumerate(lines, 1):
        if not line.strip():
            continue
        role, value = parse_line(line, base_path)
        if role is PathRole.UNRESOLVED:
            logger.warning(f"Ignoring unresolved config role on line {lineno}: {line.strip()!r}")
            continue
        if role in resolved:
            logger.warning(f"Duplicate {role.value} on line {lineno}; keeping the first value")
            continue
        resolved[role] = value

    missing = [r.value for r in (PathRole.DEPARTMENTS, PathRole.TARGETS, PathRole.BASE_URL)
               if not resolved.get(r)]
    if missing:
        raise ConfigurationError(f"Config file {path} is missing roles: {', '.join(missing)}")

    roles = PathRoles(
        departments_root=resolved[PathRole.DEPARTMENTS],
        targets_file=resolved[PathRole.TARGETS],
        base_url=resolved[PathRole.BASE_URL],
        reports_root=resolved.get(PathRole.REPORTS) or base_path,
    )
    logger.debug(f"Resolved path roles: {roles}")
    return roles
