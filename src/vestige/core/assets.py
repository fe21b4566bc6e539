"""
Asset resolution and download.

Scan matches are raw attribute values taken from a page. This module turns
them into absolute URLs on the configured origin, derives a local filename
for each, and downloads them into the target's asset directory.
"""

from __future__ import annotations

import os
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional
from urllib.parse import urlparse

from .errors import AssetError, VestigeError
from .retriever import PageRetriever


FALLBACK_ASSET_NAME = "asset"


def origin_of(base_url: str) -> str:
    """Return ``scheme://host`` of a base URL, without a trailing slash."""
    parsed = urlparse(base_url)
    if parsed.scheme and parsed.netloc:
        return f"{parsed.scheme}://{parsed.netloc}"
    return base_url.rstrip('/')


@dataclass
class Asset:
    match: bytes          # Raw value as found in the page
    url: str              # Resolved absolute URL
    filename: str         # Local file name
    local_path: Optional[str] = None


class AssetResolver:
    def __init__(self, origin_host: str, space_replacement: str = " ",
                 fallback_name: str = FALLBACK_ASSET_NAME):
        self.origin_host = origin_host.rstrip('/')
        self.space_replacement = space_replacement
        self.fallback_name = fallback_name

    def resolve(self, match: bytes) -> str:
        """Root-relative matches are prefixed with the origin; anything else is taken as absolute."""
        value = match.decode('utf-8', errors='replace') if isinstance(match, (bytes, bytearray)) else match
        if value.startswith('/'):
            return self.origin_host + value
        return value

    def derive_local_name(self, url: str) -> str:
        name = urlparse(url).path.rsplit('/', 1)[-1]
        name = name.replace('%20', self.space_replacement)
        return name or self.fallback_name

    def to_asset(self, match: bytes) -> Asset:
        url = self.resolve(match)
        return Asset(match=match, url=url, filename=self.derive_local_name(url))


class AssetDownloader:
    def __init__(self, retriever: PageRetriever, resolver: AssetResolver):
        self.logger = logging.getLogger(__name__)
        self.retriever = retriever
        self.resolver = resolver
        self.failed = 0

    def download(self, matches: Iterable[bytes], dest_dir: str) -> Dict[str, str]:
        """
        Download every match into ``dest_dir``.

        Returns a mapping of resolved URL -> local file path for the assets
        that were written. Failures are logged and skipped.
        """
        mapping: Dict[str, str] = {}
        # Sorted so runs over the same page download in a stable order
        for match in sorted(matches):
            asset = self.resolver.to_asset(match)
            try:
                asset.local_path = self._fetch_one(asset, dest_dir)
            except AssetError as e:
                self.failed += 1
                self.logger.warning(f"Failed to download asset: {asset.url} ({e})")
                continue
            if asset.local_path in mapping.values():
                self.logger.warning(f"Asset {asset.url} overwrote an earlier download: {asset.local_path}")
            mapping[asset.url] = asset.local_path
        return mapping

    def _fetch_one(self, asset: Asset, dest_dir: str) -> str:
        try:
            body = self.retriever.fetch(asset.url)
        except VestigeError as e:
            raise AssetError(str(e), url=asset.url) from e

        local_path = os.path.join(dest_dir, asset.filename)
        try:
            with open(local_path, 'wb') as f:
                f.write(body)
        except OSError as e:
            raise AssetError(f"Cannot write {local_path}: {e}", url=asset.url) from e

        self.logger.info(f"Saved asset ({len(body)} bytes): {asset.filename}")
        return local_path
