"""MCP server exposing the article scraper as a tool."""

from __future__ import annotations

import logging
from typing import Any, Dict

from mcp.server.fastmcp import FastMCP

from .models import ScrapeFailure
from .scraper import scrape_article

logger = logging.getLogger("medbook.mcp")

mcp = FastMCP(name="medbook")


@mcp.tool()
async def scrape(url: str) -> Dict[str, Any]:
    """Scrape a Medium article and return its metadata, content and images."""
    result = await scrape_article(url)
    if isinstance(result, ScrapeFailure):
        error = result.error
        raise RuntimeError(f"{error.code.value}: {error.message}")
    return result.article.to_dict()


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
