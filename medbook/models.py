"""Data models used throughout the scraper pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class ErrorCode(str, Enum):
    """Failure classes surfaced to callers."""

    INVALID_URL = "INVALID_URL"
    TIMEOUT = "TIMEOUT"
    NOT_FOUND = "NOT_FOUND"
    PAYWALL = "PAYWALL"
    NETWORK_ERROR = "NETWORK_ERROR"
    PARSE_ERROR = "PARSE_ERROR"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS.get(self, 500)


_HTTP_STATUS = {
    ErrorCode.INVALID_URL: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.PAYWALL: 403,
    ErrorCode.TIMEOUT: 504,
}

ERROR_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.INVALID_URL: "The provided URL is not a valid Medium article URL",
    ErrorCode.TIMEOUT: "Request timed out after 30 seconds",
    ErrorCode.NOT_FOUND: "Article not found",
    ErrorCode.PAYWALL: "This article is behind Medium's paywall",
    ErrorCode.NETWORK_ERROR: "Failed to fetch the article due to a network error",
    ErrorCode.PARSE_ERROR: "Failed to parse the article content",
}


class ScraperError(Exception):
    """Typed pipeline failure carrying an error code and display message."""

    def __init__(self, code: ErrorCode, message: Optional[str] = None) -> None:
        self.code = ErrorCode(code)
        self.message = message or ERROR_MESSAGES[self.code]
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"ScraperError({self.code.value}, {self.message!r})"

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code.value, "message": self.message}


class ScrapeStage(str, Enum):
    """Linear states of a single scrape call."""

    IDLE = "idle"
    VALIDATED = "validated"
    FETCHED = "fetched"
    PARSED = "parsed"
    PAYWALL_CHECKED = "paywall_checked"
    METADATA_EXTRACTED = "metadata_extracted"
    IMAGES_RESOLVED = "images_resolved"
    SANITIZED = "sanitized"
    DONE = "done"


@dataclass(frozen=True)
class ImageCandidate:
    """Raw image reference discovered while parsing article content."""

    original_src: str
    url: str
    alt: Optional[str] = None


@dataclass(frozen=True)
class ArticleImage:
    """Image referenced by the article, embedded as a data URI when downloaded."""

    original_url: str
    base64: Optional[str] = None
    alt: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        data = {"originalUrl": self.original_url}
        if self.base64 is not None:
            data["base64"] = self.base64
        if self.alt is not None:
            data["alt"] = self.alt
        return data


@dataclass(frozen=True)
class ArticleMetadata:
    """Fields extracted from the page before content sanitization."""

    url: str
    title: str
    author: str
    published_date: str
    subtitle: Optional[str] = None
    reading_time: Optional[str] = None
    tags: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class Article:
    """Structured article produced by a successful scrape."""

    url: str
    title: str
    author: str
    published_date: str
    content: str
    images: Tuple[ArticleImage, ...] = ()
    subtitle: Optional[str] = None
    reading_time: Optional[str] = None
    tags: Optional[Tuple[str, ...]] = None

    @classmethod
    def from_metadata(
        cls,
        metadata: ArticleMetadata,
        content: str,
        images: Tuple[ArticleImage, ...],
    ) -> "Article":
        return cls(
            url=metadata.url,
            title=metadata.title,
            author=metadata.author,
            published_date=metadata.published_date,
            content=content,
            images=images,
            subtitle=metadata.subtitle,
            reading_time=metadata.reading_time,
            tags=metadata.tags,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the camelCase keys of the public JSON API."""
        data: Dict[str, Any] = {"url": self.url, "title": self.title}
        if self.subtitle is not None:
            data["subtitle"] = self.subtitle
        data["author"] = self.author
        data["publishedDate"] = self.published_date
        if self.reading_time is not None:
            data["readingTime"] = self.reading_time
        data["content"] = self.content
        data["images"] = [image.to_dict() for image in self.images]
        if self.tags is not None:
            data["tags"] = list(self.tags)
        return data


@dataclass(frozen=True)
class ScrapeSuccess:
    article: Article

    @property
    def ok(self) -> bool:
        return True

    def to_response(self) -> Tuple[Dict[str, Any], int]:
        return {"success": True, "data": self.article.to_dict()}, 200


@dataclass(frozen=True)
class ScrapeFailure:
    error: ScraperError
    stage: ScrapeStage = ScrapeStage.IDLE

    @property
    def ok(self) -> bool:
        return False

    def to_response(self) -> Tuple[Dict[str, Any], int]:
        payload = {"success": False, "error": self.error.to_dict()}
        return payload, self.error.code.http_status


ScrapeResult = Union[ScrapeSuccess, ScrapeFailure]
