"""Command-line entry point for the article scraper."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, Sequence

from .models import ScrapeResult, ScrapeSuccess
from .scraper import scrape_article
from .utils import build_output_path

logger = logging.getLogger("medbook.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Scrape Medium articles into structured JSON with inline images."
        ),
    )
    parser.add_argument("urls", nargs="+", help="One or more article URLs to scrape")
    parser.add_argument(
        "--output",
        default=None,
        type=Path,
        help="Directory where JSON documents should be written (default: stdout)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


async def scrape_all(urls: Sequence[str]) -> List[ScrapeResult]:
    """Scrape each URL in turn; one failure does not stop the rest."""
    results: List[ScrapeResult] = []
    for url in urls:
        results.append(await scrape_article(url))
    return results


def write_result(url: str, result: ScrapeResult, output_root: Optional[Path]) -> None:
    payload, status = result.to_response()
    text = json.dumps(payload, ensure_ascii=False, indent=2) + "\n"
    if output_root is None:
        sys.stdout.write(text)
        sys.stdout.flush()
        return

    title = result.article.title if isinstance(result, ScrapeSuccess) else None
    output_path = build_output_path(output_root, url, title)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text, encoding="utf-8")
    logger.info("Saved %s (status %d) to %s", url, status, output_path)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    output_root = Path(args.output).resolve() if args.output else None
    overall_start = time.perf_counter()
    results = asyncio.run(scrape_all(args.urls))
    total_elapsed = time.perf_counter() - overall_start

    for url, result in zip(args.urls, results):
        write_result(url, result, output_root)

    successes = sum(1 for result in results if result.ok)
    failures = len(results) - successes
    logger.info(
        "Finished in %.2fs (%d/%d succeeded, %d failed)",
        total_elapsed,
        successes,
        len(results),
        failures,
    )
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
