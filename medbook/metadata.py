"""Article metadata extraction driven by ordered selector chains."""

from __future__ import annotations

import datetime as dt
import re
from typing import Iterable, List, Optional, Tuple

from .config import DEFAULT_SELECTORS, UNKNOWN_AUTHOR, FieldSelector, SelectorPolicy
from .document import ParsedDocument
from .models import ArticleMetadata, ErrorCode, ScraperError

READING_TIME_PATTERN = re.compile(r"\d+\s*min")
MAX_TAG_CHARS = 50


def extract_field(
    doc: ParsedDocument, chain: Iterable[FieldSelector]
) -> Optional[str]:
    """Return the first non-empty value produced by the chain, in order."""
    for selector in chain:
        element = doc.select_one(selector.css)
        if element is None:
            continue
        if selector.attribute:
            value = element.attr(selector.attribute) or ""
        else:
            value = element.text()
        value = value.strip()
        if value:
            return value
    return None


def extract_reading_time(doc: ParsedDocument, policy: SelectorPolicy) -> Optional[str]:
    text = extract_field(doc, policy.reading_time)
    if not text:
        return None
    match = READING_TIME_PATTERN.search(text)
    return match.group(0) if match else None


def extract_tags(doc: ParsedDocument, selectors: Iterable[str]) -> Optional[Tuple[str, ...]]:
    """Collect unique lower-case tags in encounter order."""
    tags: List[str] = []
    seen = set()
    for selector in selectors:
        for element in doc.select(selector):
            tag = element.text().strip().lower()
            if not tag or len(tag) >= MAX_TAG_CHARS or tag in seen:
                continue
            seen.add(tag)
            tags.append(tag)
    return tuple(tags) if tags else None


def utc_now_iso() -> str:
    return (
        dt.datetime.now(dt.timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def extract_metadata(
    doc: ParsedDocument,
    url: str,
    policy: SelectorPolicy = DEFAULT_SELECTORS,
) -> ArticleMetadata:
    """Extract title, byline, dates and tags from a parsed article page."""
    title = extract_field(doc, policy.title)
    if not title:
        raise ScraperError(ErrorCode.PARSE_ERROR, "Could not extract article title")

    return ArticleMetadata(
        url=url,
        title=title,
        subtitle=extract_field(doc, policy.subtitle),
        author=extract_field(doc, policy.author) or UNKNOWN_AUTHOR,
        published_date=extract_field(doc, policy.published_date) or utc_now_iso(),
        reading_time=extract_reading_time(doc, policy),
        tags=extract_tags(doc, policy.tags),
    )
