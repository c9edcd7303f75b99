"""Image downloading and validation utilities."""

from __future__ import annotations

import asyncio
import base64
import logging
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from contextlib import closing
from typing import Dict, Iterable, List, Optional, Sequence

import requests
from filetype import guess
from requests.adapters import HTTPAdapter

from .config import DEFAULT_CONFIG, IMAGE_HEADERS, ScrapeConfig
from .fetcher import iter_body
from .models import ArticleImage, ImageCandidate, ScraperError

logger = logging.getLogger("medbook")

DEFAULT_CONTENT_TYPE = "image/jpeg"


def detect_image_mime(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns the MIME type."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        return kind.mime
    return None


def _declared_length(resp: requests.Response) -> Optional[int]:
    value = resp.headers.get("Content-Length")
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _read_data_uri(
    url: str, resp: requests.Response, config: ScrapeConfig, deadline: float
) -> Optional[str]:
    header_type = resp.headers.get("Content-Type")
    content_type = header_type or DEFAULT_CONTENT_TYPE
    if not content_type.startswith("image/"):
        logger.warning("Skipping %s: unsupported Content-Type %s", url, content_type)
        return None

    declared = _declared_length(resp)
    if declared is not None and declared > config.max_image_bytes:
        logger.warning(
            "Skipping %s: declared size %d exceeds %d bytes",
            url,
            declared,
            config.max_image_bytes,
        )
        return None

    data = bytearray()
    with closing(iter_body(resp, deadline)) as chunks:
        for chunk in chunks:
            data.extend(chunk)
            if len(data) > config.max_image_bytes:
                logger.warning(
                    "Skipping %s: image larger than %s bytes", url, config.max_image_bytes
                )
                return None

    if not header_type:
        content_type = detect_image_mime(bytes(data)) or DEFAULT_CONTENT_TYPE
    encoded = base64.b64encode(bytes(data)).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def download_image(
    url: str,
    config: ScrapeConfig = DEFAULT_CONFIG,
    session: Optional[requests.Session] = None,
) -> Optional[str]:
    """Download an image as a base64 data URI; returns None on any failure."""
    deadline = time.monotonic() + config.request_timeout
    client = session or requests
    try:
        resp = client.get(
            url, headers=IMAGE_HEADERS, timeout=config.request_timeout, stream=True
        )
    except requests.RequestException as exc:
        logger.warning("Failed to fetch image %s: %s", url, exc)
        return None

    try:
        resp.raise_for_status()
        return _read_data_uri(url, resp, config, deadline)
    except requests.RequestException as exc:
        logger.warning("Failed to fetch image %s: %s", url, exc)
        return None
    except ScraperError:
        logger.warning(
            "Timed out reading image %s after %.1fs", url, config.request_timeout
        )
        return None
    finally:
        resp.close()


async def _download_candidate(
    candidate: ImageCandidate,
    executor: Executor,
    config: ScrapeConfig,
    session: Optional[requests.Session],
) -> ArticleImage:
    loop = asyncio.get_running_loop()
    try:
        data_uri = await asyncio.wait_for(
            loop.run_in_executor(executor, download_image, candidate.url, config, session),
            timeout=config.request_timeout,
        )
    except asyncio.TimeoutError:
        logger.warning(
            "Timed out fetching image %s after %.1fs",
            candidate.url,
            config.request_timeout,
        )
        data_uri = None
    except Exception:  # pylint: disable=broad-except
        logger.exception("Unexpected error fetching image %s", candidate.url)
        data_uri = None
    return ArticleImage(original_url=candidate.url, base64=data_uri, alt=candidate.alt)


def _build_session(pool_size: int) -> requests.Session:
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


async def download_all_images(
    candidates: Sequence[ImageCandidate],
    config: ScrapeConfig = DEFAULT_CONFIG,
    session: Optional[requests.Session] = None,
) -> List[ArticleImage]:
    """Download the first ``config.max_images`` candidates concurrently.

    Every candidate yields an entry; failed downloads keep their URL and alt
    text with ``base64`` left as None.
    """
    batch = list(candidates[: config.max_images])
    if not batch:
        return []
    if len(candidates) > len(batch):
        logger.info(
            "Limiting image downloads to the first %d of %d", len(batch), len(candidates)
        )

    owned_session = session is None
    client = _build_session(len(batch)) if owned_session else session
    executor = ThreadPoolExecutor(
        max_workers=len(batch), thread_name_prefix="medbook-image"
    )
    try:
        results = await asyncio.gather(
            *(
                _download_candidate(candidate, executor, config, client)
                for candidate in batch
            )
        )
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
        if owned_session:
            client.close()

    embedded = sum(1 for image in results if image.base64)
    logger.debug("Embedded %d of %d images", embedded, len(results))
    return list(results)


def embedded_sources(images: Iterable[ArticleImage]) -> Dict[str, str]:
    """Map original image URLs to data URIs for successful downloads."""
    return {image.original_url: image.base64 for image in images if image.base64}
