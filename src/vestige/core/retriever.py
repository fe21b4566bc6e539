"""
Page Retrieval Module

Issues GET requests for pages and assets over a shared ``requests`` session
and classifies failures: requests that never produced a response become
``TransportError``, responses outside 2xx become ``HttpStatusError``.
"""

import logging
from typing import Optional

import requests

from .errors import TransportError, HttpStatusError


DEFAULT_TIMEOUT_SECS = 60

USER_AGENT = 'Vestige/1.0 (Department Page Archiver)'


class PageRetriever:
    """
    Thin GET client with a blanket per-request timeout.

    There are no retries: a failed target is skipped for the rest of the run.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECS, session: Optional[requests.Session] = None):
        """
        Initialize the retriever.

        Args:
            timeout: Per-request timeout in seconds
            session: Session to reuse (a new one is created when omitted)
        """
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

        self.session = session if session is not None else requests.Session()
        self.session.headers.update({
            'User-Agent': USER_AGENT,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
        })

    def fetch(self, url: str) -> bytes:
        """
        Download a URL and return its body.

        Args:
            url: Absolute URL

        Returns:
            The raw response body

        Raises:
            TransportError: If the request could not be completed
            HttpStatusError: If the status is not 2xx
        """
        self.logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Timeout after {self.timeout}s", url=url) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(str(e), url=url) from e

        if not 200 <= response.status_code < 300:
            raise HttpStatusError(response.status_code, url=url)

        try:
            body = response.content
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Failed reading body: {e}", url=url) from e

        self.logger.debug(f"Retrieved {len(body)} bytes from {url}")
        return body

    def close(self):
        """Close the HTTP session."""
        self.session.close()
