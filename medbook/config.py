"""Configuration objects and policy constants for the scraper."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

REQUEST_TIMEOUT_SECONDS = 30.0
MAX_IMAGE_BYTES = 5 * 1024 * 1024
MAX_IMAGES_PER_ARTICLE = 50
UNKNOWN_AUTHOR = "Unknown Author"

MEDIUM_DOMAINS: Tuple[str, ...] = (
    "medium.com",
    # Publications served from their own domains
    "towardsdatascience.com",
    "betterprogramming.pub",
    "levelup.gitconnected.com",
    "javascript.plainenglish.io",
    "blog.devgenius.io",
    "uxdesign.cc",
    "betterhumans.pub",
    "entrepreneurshandbook.co",
    "writingcooperative.com",
    "psiloveyou.xyz",
    "codeburst.io",
    "hackernoon.com",
    "itnext.io",
    "blog.bitsrc.io",
    "bootcamp.uxdesign.cc",
)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

IMAGE_HEADERS = {"User-Agent": "Mozilla/5.0 (compatible; MedBook/1.0)"}


@dataclass(frozen=True)
class FieldSelector:
    """One step of a metadata fallback chain.

    When ``attribute`` is set the value is read from that attribute of the
    first matching element, otherwise from its text.
    """

    css: str
    attribute: Optional[str] = None


@dataclass(frozen=True)
class SelectorPolicy:
    """Markup-coupled selector lists for the target publishing platform."""

    title: Tuple[FieldSelector, ...] = (
        FieldSelector("h1"),
        FieldSelector('[data-testid="storyTitle"]'),
    )
    subtitle: Tuple[FieldSelector, ...] = (
        FieldSelector("h2"),
        FieldSelector('[data-testid="storySubtitle"]'),
        FieldSelector('meta[name="description"]', "content"),
    )
    author: Tuple[FieldSelector, ...] = (
        FieldSelector('[data-testid="authorName"]'),
        FieldSelector('meta[name="author"]', "content"),
        FieldSelector('[rel="author"]'),
    )
    published_date: Tuple[FieldSelector, ...] = (
        FieldSelector("time[datetime]", "datetime"),
        FieldSelector('meta[property="article:published_time"]', "content"),
    )
    reading_time: Tuple[FieldSelector, ...] = (
        FieldSelector('[data-testid="storyReadTime"]'),
    )
    tags: Tuple[str, ...] = ('[data-testid="tag"]', 'a[href*="/tag/"]')
    content: Tuple[str, ...] = ("article section", '[data-field="body"]', "article")
    default_content: str = "article"
    paywall: Tuple[str, ...] = (
        '[data-testid="paywall"]',
        ".meteredContent",
        '[id*="paywall"]',
    )
    paywall_phrases: Tuple[str, ...] = ("member-only story", "become a member")
    paywall_container: str = "article"
    paywall_min_content_chars: int = 500
    removed_elements: Tuple[str, ...] = (
        "nav",
        "header",
        "footer",
        "aside",
        "script",
        "style",
        "noscript",
        "iframe",
        "svg",
        "button",
        "form",
        "input",
        '[data-testid="headerNav"]',
        '[data-testid="footerNav"]',
        '[role="banner"]',
        '[role="navigation"]',
        '[role="complementary"]',
        '[class*="share"]',
        '[class*="social"]',
        '[class*="comment"]',
        '[class*="related"]',
        '[class*="recommend"]',
        '[class*="follow"]',
        '[class*="subscribe"]',
        '[class*="newsletter"]',
        '[class*="ad-"]',
        '[class*="ads-"]',
        '[class*="promo"]',
    )


DEFAULT_SELECTORS = SelectorPolicy()


@dataclass(frozen=True)
class ScrapeConfig:
    """Top-level settings that bound fetching and image retrieval."""

    request_timeout: float = REQUEST_TIMEOUT_SECONDS
    max_image_bytes: int = MAX_IMAGE_BYTES
    max_images: int = MAX_IMAGES_PER_ARTICLE
    allowed_domains: Tuple[str, ...] = MEDIUM_DOMAINS
    selectors: SelectorPolicy = field(default_factory=SelectorPolicy)


DEFAULT_CONFIG = ScrapeConfig()
