"""Paywall detection for member-only stories."""

from __future__ import annotations

import logging

from .config import DEFAULT_SELECTORS, SelectorPolicy
from .document import ParsedDocument
from .models import ErrorCode, ScraperError

logger = logging.getLogger("medbook")


def is_paywalled(doc: ParsedDocument, policy: SelectorPolicy = DEFAULT_SELECTORS) -> bool:
    """Return True when the page is gated behind a membership wall.

    Marketing phrases alone are not enough because they also show up in the
    footer of free stories; they only count when the article body is short.
    """
    for selector in policy.paywall:
        if doc.select(selector):
            logger.debug("Paywall marker %s matched", selector)
            return True

    page_text = doc.visible_text().lower()
    if not any(phrase in page_text for phrase in policy.paywall_phrases):
        return False
    article_text = "".join(element.text() for element in doc.select(policy.paywall_container))
    article_chars = len(article_text.strip())
    return article_chars < policy.paywall_min_content_chars


def check_paywall(doc: ParsedDocument, policy: SelectorPolicy = DEFAULT_SELECTORS) -> None:
    if is_paywalled(doc, policy):
        raise ScraperError(ErrorCode.PAYWALL)
