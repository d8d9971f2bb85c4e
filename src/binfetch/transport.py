"""
HTTP transport for release downloads.

Opens a streaming GET for the release URL and hands the body iterator, the
Content-Length hint and the declared encoding to the collector. Connection
timeouts are retried here; once the body starts streaming nothing is retried.
"""
from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass
from typing import Iterator, Optional

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .collector import CompletedBuffer, collect, parse_size_hint
from .errors import DownloadError
from .settings import Settings

__all__ = ["USER_AGENT", "ResponseStream", "HttpFetcher"]

logger = logging.getLogger(__name__)

USER_AGENT = "binfetch/0.1.0"

# Failures worth another attempt before any body byte was read
RETRYABLE_ERRORS = (httpx.ConnectTimeout, httpx.ReadTimeout, httpx.ConnectError)


@dataclass(frozen=True)
class ResponseStream:
    """An established response: body fragments plus what the headers declared."""
    chunks: Iterator[bytes]
    size_hint: Optional[int]
    encoding: Optional[str]


class HttpFetcher:
    """
    Streaming HTTP client for release archives.

    Follows redirects (release hosts usually redirect to a CDN) and maps
    request-level failures to DownloadError. Body-level failures surface from
    the collector as StreamError.
    """

    retry_wait = wait_exponential(multiplier=1, min=1, max=10)

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None):
        """
        Initialize the fetcher.

        Args:
            settings: binfetch settings (timeout, retry count, TLS verification)
            client: Preconfigured client, e.g. one with a MockTransport in tests
        """
        self.settings = settings
        self._owns_client = client is None
        self.client = client or httpx.Client(
            timeout=httpx.Timeout(settings.http_timeout_s, connect=min(5.0, settings.http_timeout_s)),
            follow_redirects=True,
            verify=not settings.insecure,
            headers={"User-Agent": USER_AGENT},
        )

    def _send_once(self, url: str) -> httpx.Response:
        request = self.client.build_request("GET", url)
        response = self.client.send(request, stream=True)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError:
            response.close()
            raise
        return response

    def _send(self, url: str) -> httpx.Response:
        retrying = Retrying(
            stop=stop_after_attempt(self.settings.http_retry + 1),
            wait=self.retry_wait,
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            reraise=True,
        )
        return retrying(self._send_once, url)

    @contextlib.contextmanager
    def open_stream(self, url: str) -> Iterator[ResponseStream]:
        """
        Open a streaming response for `url`.

        Raises:
            DownloadError: On HTTP status errors or if the request cannot be made
        """
        logger.debug(f"GET {url}")
        try:
            response = self._send(url)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise DownloadError(f"Release not found: {url}", url=url, status_code=status) from e
            raise DownloadError(f"HTTP {status} downloading {url}", url=url, status_code=status) from e
        except httpx.RequestError as e:
            raise DownloadError(f"Network error downloading {url}: {e}", url=url) from e

        try:
            size_hint = parse_size_hint(response.headers.get("Content-Length"))
            logger.debug(f"Response {response.status_code} from {response.url}, size hint {size_hint}")
            yield ResponseStream(
                chunks=response.iter_bytes(),
                size_hint=size_hint,
                encoding=response.encoding,
            )
        finally:
            response.close()

    def download(self, url: str) -> CompletedBuffer:
        """
        Download `url` fully into memory.

        Raises:
            DownloadError: If the request fails
            StreamError: If the body fails mid-transfer
        """
        with self.open_stream(url) as stream:
            buffer = collect(stream.chunks, stream.size_hint, encoding=stream.encoding)
        logger.info(f"Downloaded {len(buffer)} bytes from {url}")
        return buffer

    def close(self):
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
