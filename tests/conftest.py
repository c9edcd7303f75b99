"""Shared fixtures and HTTP fakes for scraper tests."""

from __future__ import annotations

import io
import threading
import time
from typing import Dict, Optional, Union
from unittest.mock import MagicMock

import pytest
import requests
from requests.structures import CaseInsensitiveDict

ARTICLE_URL = "https://medium.com/@writer/a-story-123abc"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def make_response(
    url: str,
    status: int = 200,
    body: Union[bytes, str] = b"",
    headers: Optional[Dict[str, str]] = None,
) -> requests.Response:
    """Build a real Response whose body streams from memory."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    resp.headers = CaseInsensitiveDict(headers or {})
    resp.raw = io.BytesIO(body)
    resp.encoding = "utf-8"
    return resp


class FakeSession:
    """Routes GET requests to canned responses, errors or delays by URL."""

    def __init__(self) -> None:
        self._routes: Dict[str, dict] = {}
        self.get = MagicMock(side_effect=self._dispatch)

    def add(
        self,
        url: str,
        status: int = 200,
        body: Union[bytes, str] = b"",
        headers: Optional[Dict[str, str]] = None,
        delay: float = 0.0,
    ) -> None:
        self._routes[url] = {
            "status": status,
            "body": body,
            "headers": headers,
            "delay": delay,
        }

    def add_image(self, url: str, data: bytes = PNG_BYTES, content_type: str = "image/png") -> None:
        self.add(url, body=data, headers={"Content-Type": content_type})

    def add_stream(
        self, url: str, raw: io.RawIOBase, headers: Optional[Dict[str, str]] = None
    ) -> None:
        self._routes[url] = {"raw": raw, "headers": headers}

    def fail(self, url: str, exc: Exception) -> None:
        self._routes[url] = {"error": exc}

    def requested_urls(self):
        return [call.args[0] for call in self.get.call_args_list]

    def _dispatch(self, url: str, **kwargs) -> requests.Response:
        route = self._routes.get(url)
        if route is None:
            raise requests.ConnectionError(f"no route for {url}")
        if "error" in route:
            raise route["error"]
        if "raw" in route:
            resp = make_response(url, headers=route["headers"])
            resp.raw = route["raw"]
            return resp
        if route["delay"]:
            time.sleep(route["delay"])
        return make_response(url, route["status"], route["body"], route["headers"])


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


def article_page(body: str, head: str = "") -> str:
    """Wrap article markup in a minimal HTML page."""
    return f"<html><head>{head}</head><body>{body}</body></html>"


class DripStream(io.RawIOBase):
    """Body that yields one byte per read, pausing before each."""

    def __init__(self, pause: float = 0.05, size: int = 10_000) -> None:
        self.pause = pause
        self.remaining = size

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if not self.remaining:
            return 0
        time.sleep(self.pause)
        buffer[0:1] = b"x"
        self.remaining -= 1
        return 1


class StalledStream(io.RawIOBase):
    """Body whose first read blocks until ``shutdown`` is called."""

    def __init__(self, limit: float = 5.0) -> None:
        self.limit = limit
        self.interrupted = threading.Event()

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        self.interrupted.wait(self.limit)
        return 0

    def shutdown(self) -> None:
        self.interrupted.set()
