"""Single-request HTML fetching with a hard deadline."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Iterator, Optional

import requests

from .config import BROWSER_HEADERS, REQUEST_TIMEOUT_SECONDS
from .models import ErrorCode, ScraperError

logger = logging.getLogger("medbook")

CHUNK_BYTES = 64 * 1024


def _interrupt(resp: requests.Response, expired: threading.Event) -> None:
    """Shut the response socket down so a blocked read returns."""
    expired.set()
    shutdown = getattr(resp.raw, "shutdown", None)
    if shutdown is None:
        return
    try:
        shutdown()
    except (OSError, RuntimeError, ValueError) as exc:
        logger.debug("Could not interrupt %s: %s", resp.url, exc)


def iter_body(resp: requests.Response, deadline: float) -> Iterator[bytes]:
    """Yield body chunks until EOF, raising TIMEOUT once ``deadline`` passes.

    ``requests`` only bounds each socket read, so a server dripping bytes
    could hold the read open forever. A watchdog timer shuts the socket down
    at the deadline; the interrupted read then surfaces here as TIMEOUT.
    """
    expired = threading.Event()

    def past_deadline() -> bool:
        return expired.is_set() or time.monotonic() >= deadline

    watchdog = threading.Timer(
        max(deadline - time.monotonic(), 0.0), _interrupt, args=(resp, expired)
    )
    watchdog.daemon = True
    watchdog.start()
    try:
        for chunk in resp.iter_content(chunk_size=CHUNK_BYTES):
            if past_deadline():
                raise ScraperError(ErrorCode.TIMEOUT)
            yield chunk
    except requests.RequestException as exc:
        if past_deadline():
            raise ScraperError(ErrorCode.TIMEOUT) from exc
        raise
    finally:
        watchdog.cancel()
    # An interrupted read can look like a clean EOF
    if past_deadline():
        raise ScraperError(ErrorCode.TIMEOUT)


def get_html(
    url: str,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
    session: Optional[requests.Session] = None,
) -> str:
    """Issue one GET and return the body, mapping failures to ScraperError.

    The whole exchange, body included, finishes within ``timeout`` seconds.
    """
    deadline = time.monotonic() + timeout
    client = session or requests
    try:
        resp = client.get(url, headers=BROWSER_HEADERS, timeout=timeout, stream=True)
    except requests.Timeout as exc:
        logger.error("Timeout while loading %s: %s", url, exc)
        raise ScraperError(ErrorCode.TIMEOUT) from exc
    except requests.RequestException as exc:
        logger.error("Network error while loading %s: %s", url, exc)
        raise ScraperError(ErrorCode.NETWORK_ERROR) from exc

    try:
        if resp.status_code == 404:
            raise ScraperError(ErrorCode.NOT_FOUND)
        if not resp.ok:
            logger.error("Unexpected status %s for %s", resp.status_code, url)
            raise ScraperError(ErrorCode.NETWORK_ERROR)
        body = b"".join(iter_body(resp, deadline))
    except requests.RequestException as exc:
        logger.error("Network error while reading %s: %s", url, exc)
        raise ScraperError(ErrorCode.NETWORK_ERROR) from exc
    finally:
        resp.close()
    return body.decode(resp.encoding or "utf-8", errors="replace")


async def fetch_page(
    url: str,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
    session: Optional[requests.Session] = None,
) -> str:
    """Fetch a page in a worker thread, bounded by a single overall deadline."""
    logger.info("Loading %s", url)
    loop = asyncio.get_running_loop()
    try:
        return await asyncio.wait_for(
            loop.run_in_executor(None, get_html, url, timeout, session),
            timeout=timeout,
        )
    except asyncio.TimeoutError as exc:
        logger.error("Timeout while loading %s after %.1fs", url, timeout)
        raise ScraperError(ErrorCode.TIMEOUT) from exc
