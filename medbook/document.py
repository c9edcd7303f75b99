"""Minimal query/mutation interface over parsed HTML.

The pipeline only talks to :class:`ParsedDocument` and :class:`Element`, so
the selector logic stays independent of the parsing library. The default
implementation is backed by BeautifulSoup with the stdlib ``html.parser``.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from bs4 import BeautifulSoup, Tag

_INVISIBLE_TAGS = ("script", "style", "noscript", "template")


class Element(Protocol):
    """A single element of a parsed document."""

    @property
    def name(self) -> str: ...

    @property
    def removed(self) -> bool: ...

    def text(self) -> str: ...

    def attr(self, name: str) -> Optional[str]: ...

    def attr_names(self) -> List[str]: ...

    def set_attr(self, name: str, value: str) -> None: ...

    def remove_attr(self, name: str) -> None: ...

    def select(self, selector: str) -> List["Element"]: ...

    def select_one(self, selector: str) -> Optional["Element"]: ...

    def descendants(self) -> List["Element"]: ...

    def clone(self) -> "Element": ...

    def remove(self) -> None: ...

    def inner_html(self) -> str: ...


class ParsedDocument(Protocol):
    """Document-level queries used by the extraction stages."""

    def select(self, selector: str) -> List[Element]: ...

    def select_one(self, selector: str) -> Optional[Element]: ...

    def visible_text(self) -> str: ...


class SoupElement:
    """Element backed by a BeautifulSoup tag."""

    __slots__ = ("_tag",)

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    def __repr__(self) -> str:
        return f"SoupElement(<{self.name}>)"

    @property
    def name(self) -> str:
        return (self._tag.name or "").lower()

    @property
    def removed(self) -> bool:
        return bool(getattr(self._tag, "decomposed", False))

    def text(self) -> str:
        return self._tag.get_text()

    def attr(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def attr_names(self) -> List[str]:
        return list(self._tag.attrs)

    def set_attr(self, name: str, value: str) -> None:
        self._tag[name] = value

    def remove_attr(self, name: str) -> None:
        if name in self._tag.attrs:
            del self._tag[name]

    def select(self, selector: str) -> List[SoupElement]:
        return [SoupElement(tag) for tag in self._tag.select(selector)]

    def select_one(self, selector: str) -> Optional[SoupElement]:
        tag = self._tag.select_one(selector)
        return SoupElement(tag) if tag is not None else None

    def descendants(self) -> List[SoupElement]:
        return [SoupElement(tag) for tag in self._tag.find_all(True)]

    def clone(self) -> SoupElement:
        """Re-parse the subtree so mutations never touch the source tree."""
        fragment = BeautifulSoup(str(self._tag), "html.parser")
        return SoupElement(fragment.find(True))

    def remove(self) -> None:
        self._tag.decompose()

    def inner_html(self) -> str:
        return self._tag.decode_contents()


class SoupDocument:
    """ParsedDocument implementation for a full HTML page."""

    def __init__(self, soup: BeautifulSoup) -> None:
        self._soup = soup

    def select(self, selector: str) -> List[SoupElement]:
        return [SoupElement(tag) for tag in self._soup.select(selector)]

    def select_one(self, selector: str) -> Optional[SoupElement]:
        tag = self._soup.select_one(selector)
        return SoupElement(tag) if tag is not None else None

    def visible_text(self) -> str:
        """Text of the page body, ignoring script-like containers."""
        root = self._soup.body or self._soup
        fragment = BeautifulSoup(str(root), "html.parser")
        for tag in fragment(_INVISIBLE_TAGS):
            tag.decompose()
        return fragment.get_text()


def parse_html(html: str) -> SoupDocument:
    """Parse raw markup into a queryable document."""
    return SoupDocument(BeautifulSoup(html, "html.parser"))
