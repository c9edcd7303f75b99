"""High-level orchestration for scraping one article into an Article value."""

from __future__ import annotations

import logging
import time
from typing import Optional

import requests

from .config import DEFAULT_CONFIG, ScrapeConfig
from .content import clean_html, extract_images, resolve_content_selector
from .document import ParsedDocument, parse_html
from .fetcher import fetch_page
from .images import download_all_images, embedded_sources
from .metadata import extract_metadata
from .models import (
    Article,
    ErrorCode,
    ScrapeFailure,
    ScrapeResult,
    ScrapeStage,
    ScrapeSuccess,
    ScraperError,
)
from .paywall import check_paywall
from .validation import validate_url

logger = logging.getLogger("medbook")


class _Progress:
    """Tracks the last pipeline stage reached for failure reporting."""

    def __init__(self, url: str) -> None:
        self.url = url
        self.stage = ScrapeStage.IDLE

    def advance(self, stage: ScrapeStage) -> None:
        self.stage = stage
        logger.debug("%s -> %s", self.url, stage.value)


def _parse(html: str) -> ParsedDocument:
    try:
        return parse_html(html)
    except Exception as exc:  # pylint: disable=broad-except
        logger.error("Failed to parse HTML: %s", exc)
        raise ScraperError(ErrorCode.PARSE_ERROR) from exc


async def _scrape(
    url: str,
    config: ScrapeConfig,
    session: Optional[requests.Session],
    progress: _Progress,
) -> Article:
    validate_url(url, config.allowed_domains)
    progress.advance(ScrapeStage.VALIDATED)

    html = await fetch_page(url, config.request_timeout, session)
    progress.advance(ScrapeStage.FETCHED)

    doc = _parse(html)
    progress.advance(ScrapeStage.PARSED)

    policy = config.selectors
    check_paywall(doc, policy)
    progress.advance(ScrapeStage.PAYWALL_CHECKED)

    metadata = extract_metadata(doc, url, policy)
    progress.advance(ScrapeStage.METADATA_EXTRACTED)

    content_selector = resolve_content_selector(doc, policy)
    candidates = extract_images(doc, content_selector)
    images = await download_all_images(candidates, config, session)
    progress.advance(ScrapeStage.IMAGES_RESOLVED)

    content = clean_html(doc, content_selector, embedded_sources(images), policy)
    if not content:
        raise ScraperError(ErrorCode.PARSE_ERROR)
    progress.advance(ScrapeStage.SANITIZED)

    return Article.from_metadata(metadata, content, tuple(images))


async def scrape_article(
    url: str,
    config: ScrapeConfig = DEFAULT_CONFIG,
    session: Optional[requests.Session] = None,
) -> ScrapeResult:
    """Scrape a single article, returning a success or a typed failure."""
    start = time.perf_counter()
    progress = _Progress(url)
    try:
        article = await _scrape(url, config, session, progress)
    except ScraperError as exc:
        logger.warning(
            "Scrape of %s failed after %s: %s (%s)",
            url,
            progress.stage.value,
            exc.code.value,
            exc.message,
        )
        return ScrapeFailure(error=exc, stage=progress.stage)

    progress.advance(ScrapeStage.DONE)
    logger.info(
        "Scraped %s in %.2fs (%d images)",
        url,
        time.perf_counter() - start,
        len(article.images),
    )
    return ScrapeSuccess(article=article)
