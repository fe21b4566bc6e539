"""
Content Region Scanner

Extracts attribute values (link targets, image sources) from raw page bytes
without a markup parser. Scanning is restricted to the content region that
starts at a marker such as ``id="content"`` and ends at the footer marker,
and only values containing a filter substring are kept.

The scanner works on substrings, not on a grammar: it moves a cursor forward
through the bytes exactly once and never re-examines what lies behind it.
Malformed markup is tolerated rather than understood. In particular:

* a value without a closing terminator before end-of-input is dropped;
* attributes must be written ``name="value"`` (the opening delimiter is
  configurable); unquoted and single-quoted values produce no match.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Set, Tuple, Union


BytesLike = Union[bytes, bytearray, memoryview]
Marker = Union[str, bytes]

DEFAULT_REGION_START = 'id="content"'
DEFAULT_REGION_END = 'class="layout-csun--footer"'
DEFAULT_VALUE_FILTER = '/sites/default/files'
DEFAULT_OPENING_DELIMITER = '="'
DEFAULT_VALUE_TERMINATOR = '"'


def _as_bytes(marker: Marker) -> bytes:
    if isinstance(marker, str):
        return marker.encode('utf-8')
    return bytes(marker)


def _find_attribute_value(page: bytes, attribute: bytes, delimiter: bytes, pos: int, stop: int) -> int:
    """
    Find the start of the next ``attribute<delimiter>`` value in ``page[pos:stop]``.

    Occurrences of the attribute name not followed by the delimiter (e.g.
    ``srcset`` when looking for ``src``, or ``href=/path``) are stepped over.

    Returns:
        Offset of the first value byte, or -1 when the search is exhausted
    """
    while True:
        hit = page.find(attribute, pos, stop)
        if hit < 0:
            return -1
        after = hit + len(attribute)
        if page.startswith(delimiter, after):
            return after + len(delimiter)
        pos = after


def scan(page: BytesLike,
         region_start: Marker,
         region_end: Marker,
         tag_marker: Marker,
         attribute_marker: Marker,
         value_filter: Marker,
         value_terminator: Marker = DEFAULT_VALUE_TERMINATOR,
         opening_delimiter: Marker = DEFAULT_OPENING_DELIMITER) -> Set[bytes]:
    """
    Collect the values of ``attribute_marker`` on ``tag_marker`` tags inside
    the content region, keeping those that contain ``value_filter``.

    Args:
        page: Raw page bytes
        region_start: Marker opening the content region
        region_end: Marker closing the content region
        tag_marker: Tag opening, e.g. ``<img``
        attribute_marker: Attribute name, e.g. ``src``
        value_filter: Substring every returned value must contain
        value_terminator: Byte sequence closing a value
        opening_delimiter: Byte sequence between the attribute name and its value

    Returns:
        Set of distinct matching values. Empty when the region start is
        absent.

    Raises:
        ValueError: If the tag, attribute or terminator marker is empty
    """
    for label, marker in (('tag_marker', tag_marker), ('attribute_marker', attribute_marker),
                          ('value_terminator', value_terminator)):
        if not marker:
            raise ValueError(f"{label} must not be empty")

    data = bytes(page)
    region_start = _as_bytes(region_start)
    region_end = _as_bytes(region_end)
    tag = _as_bytes(tag_marker)
    attribute = _as_bytes(attribute_marker)
    needle = _as_bytes(value_filter)
    terminator = _as_bytes(value_terminator)
    delimiter = _as_bytes(opening_delimiter)

    matches: Set[bytes] = set()

    start = data.find(region_start)
    if start < 0:
        return matches
    cursor = start + len(region_start)

    stop = data.find(region_end, cursor)
    if stop < 0:
        stop = len(data)

    while cursor + len(tag) <= stop:
        hit = data.find(tag, cursor, stop)
        if hit < 0:
            break
        cursor = hit + len(tag)

        value_start = _find_attribute_value(data, attribute, delimiter, cursor, stop)
        if value_start < 0:
            # Attribute search ran into the end of the region
            break

        value_end = data.find(terminator, value_start)
        if value_end < 0:
            # Unterminated value: nothing further can be extracted
            break

        value = data[value_start:value_end]
        if needle in value:
            matches.add(value)
        cursor = value_end + len(terminator)

    return matches


@dataclass(frozen=True)
class ScanProfile:
    """A tag/attribute pair to extract."""
    name: str
    tag_marker: str
    attribute_marker: str


LINKS = ScanProfile(name='links', tag_marker='<a', attribute_marker='href')
IMAGES = ScanProfile(name='images', tag_marker='<img', attribute_marker='src')


class ContentScanner:
    """
    Scanner bound to one content region, filter and quoting convention.

    The same instance is used for every page of a run; it keeps no state
    between calls.
    """

    def __init__(self,
                 region_start: str = DEFAULT_REGION_START,
                 region_end: str = DEFAULT_REGION_END,
                 value_filter: str = DEFAULT_VALUE_FILTER,
                 opening_delimiter: str = DEFAULT_OPENING_DELIMITER,
                 value_terminator: str = DEFAULT_VALUE_TERMINATOR,
                 link_profile: ScanProfile = LINKS,
                 image_profile: ScanProfile = IMAGES):
        self.region_start = region_start
        self.region_end = region_end
        self.value_filter = value_filter
        self.opening_delimiter = opening_delimiter
        self.value_terminator = value_terminator
        self.link_profile = link_profile
        self.image_profile = image_profile
        self.logger = logging.getLogger(__name__)

    def scan(self, page: BytesLike, profile: ScanProfile) -> Set[bytes]:
        found = scan(
            page,
            self.region_start,
            self.region_end,
            profile.tag_marker,
            profile.attribute_marker,
            self.value_filter,
            value_terminator=self.value_terminator,
            opening_delimiter=self.opening_delimiter,
        )
        self.logger.debug(f"Scan for {profile.name}: {len(found)} match(es)")
        return found

    def scan_all(self, page: BytesLike) -> Tuple[Set[bytes], Set[bytes]]:
        """Run the link scan and the image scan over the same page."""
        return self.scan(page, self.link_profile), self.scan(page, self.image_profile)
