"""Article body sanitization and image discovery."""

from __future__ import annotations

import re
from typing import List, Mapping, Optional

from .config import DEFAULT_SELECTORS, SelectorPolicy
from .document import Element, ParsedDocument
from .models import ImageCandidate

# Tags that are legitimately empty and must survive the empty-element sweep
_VOID_TAGS = {
    "img",
    "br",
    "hr",
    "input",
    "meta",
    "link",
    "source",
    "picture",
    "video",
    "audio",
}
_LINK_ATTRS = {"href", "title"}
_IMAGE_ATTRS = {"src", "alt"}

_WHITESPACE = re.compile(r"\s+")
_INTER_TAG_WHITESPACE = re.compile(r">\s+<")


def resolve_content_selector(
    doc: ParsedDocument, policy: SelectorPolicy = DEFAULT_SELECTORS
) -> str:
    """Pick the first content selector that matches anything."""
    for selector in policy.content:
        if doc.select(selector):
            return selector
    return policy.default_content


def normalize_image_src(src: str) -> Optional[str]:
    """Return an absolute https URL for the source, or None if unusable."""
    if src.startswith("//"):
        return f"https:{src}"
    if src.startswith(("http://", "https://")):
        return src
    return None


def extract_images(doc: ParsedDocument, content_selector: str = "article") -> List[ImageCandidate]:
    """Collect absolute image URLs from the content subtree.

    Duplicates are detected on the raw attribute value, so ``//host/a.png`` and
    ``https://host/a.png`` stay separate entries.
    """
    root = doc.select_one(content_selector)
    if root is None:
        return []

    candidates: List[ImageCandidate] = []
    seen = set()
    for img in root.select("img"):
        src = img.attr("src") or img.attr("data-src")
        if not src or src in seen:
            continue
        seen.add(src)
        url = normalize_image_src(src)
        if url is None:
            continue
        candidates.append(ImageCandidate(src, url, img.attr("alt") or None))
    return candidates


def _remove_unwanted_elements(container: Element, policy: SelectorPolicy) -> None:
    for selector in policy.removed_elements:
        for element in container.select(selector):
            if not element.removed:
                element.remove()

    for element in container.descendants():
        if element.removed or element.name in _VOID_TAGS:
            continue
        if not element.text().strip() and not element.select("img"):
            element.remove()


def _keep_only(element: Element, allowed: set) -> None:
    for attr in element.attr_names():
        if attr not in allowed:
            element.remove_attr(attr)


def _clean_attributes(container: Element, replacements: Mapping[str, str]) -> None:
    for element in container.descendants():
        if element.name == "a":
            _keep_only(element, _LINK_ATTRS)
        elif element.name == "img":
            # Read the lazy-load source before data-* attributes are dropped
            src = element.attr("src") or element.attr("data-src")
            _keep_only(element, _IMAGE_ATTRS)
            if src:
                element.set_attr("src", _embedded_source(src, replacements))
        else:
            for attr in element.attr_names():
                if attr.startswith("data-") and attr != "data-testid":
                    element.remove_attr(attr)
                elif attr.startswith(("aria-", "on")):
                    element.remove_attr(attr)


def _embedded_source(src: str, replacements: Mapping[str, str]) -> str:
    if src in replacements:
        return replacements[src]
    url = normalize_image_src(src)
    if url is not None and url in replacements:
        return replacements[url]
    return src


def collapse_whitespace(html: str) -> str:
    html = _WHITESPACE.sub(" ", html)
    html = _INTER_TAG_WHITESPACE.sub("><", html)
    return html.strip()


def clean_html(
    doc: ParsedDocument,
    content_selector: str = "article",
    replacements: Optional[Mapping[str, str]] = None,
    policy: SelectorPolicy = DEFAULT_SELECTORS,
) -> str:
    """Return sanitized inner HTML of the first content match.

    ``replacements`` maps image URLs to data URIs that should replace them.
    Returns an empty string when the selector matches nothing.
    """
    source = doc.select_one(content_selector)
    if source is None:
        return ""

    container = source.clone()
    _remove_unwanted_elements(container, policy)
    _clean_attributes(container, replacements or {})
    return collapse_whitespace(container.inner_html())
