"""Utility helpers for string normalization and path handling."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")
MAX_SLUG_CHARS = 80


def slugify(value: str, fallback: str = "article") -> str:
    """Generate a filesystem-friendly slug using ASCII characters only."""
    normalized = value.encode("ascii", "ignore").decode("ascii")
    normalized = normalized.lower()
    normalized = SLUG_PATTERN.sub("-", normalized).strip("-")
    return normalized[:MAX_SLUG_CHARS].rstrip("-") or fallback


def build_output_path(output_root: Path, url: str, title: Optional[str] = None) -> Path:
    """Return ``<root>/<domain>/<title>.json`` for a scraped URL."""
    parsed = urlparse(url)
    domain = slugify(parsed.hostname or "site", fallback="site")
    name = slugify(title or parsed.path or "article")
    return output_root / domain / f"{name}.json"
