"""End-to-end tests for the article scraping pipeline."""

import datetime as dt
from unittest.mock import patch

import pytest
import requests

from medbook.config import ScrapeConfig
from medbook.models import ErrorCode, ScrapeFailure, ScrapeStage, ScrapeSuccess
from medbook.scraper import scrape_article

from conftest import ARTICLE_URL, PNG_BYTES, article_page

FULL_PAGE = article_page(
    body=(
        "<nav>Medium</nav>"
        "<article>"
        '<h1 data-testid="storyTitle">Writing Fast Python</h1>'
        "<h2>Profiling before optimizing</h2>"
        '<span data-testid="authorName">Ada Lovelace</span>'
        '<span data-testid="storyReadTime">7 min read</span>'
        '<time datetime="2024-05-02T08:00:00.000Z">May 2</time>'
        "<section>"
        "<p>Measure first.</p>"
        '<figure><img src="https://miro.medium.com/a.png" alt="Flame graph"></figure>'
        '<img data-src="//miro.medium.com/b.png" alt="Lazy">'
        '<img src="https://miro.medium.com/huge.png" alt="Huge">'
        '<div class="share-bar"><button>Share</button></div>'
        "<script>track()</script>"
        "</section>"
        "</article>"
        '<a href="/tag/python">Python</a><a href="/tag/Performance">Performance</a>'
        "<footer>Help</footer>"
    ),
    head='<meta name="description" content="ignored">',
)


def serve_full_page(session):
    session.add(ARTICLE_URL, body=FULL_PAGE)
    session.add_image("https://miro.medium.com/a.png")
    session.add_image("https://miro.medium.com/b.png", content_type="image/gif")
    session.add_image("https://miro.medium.com/huge.png", data=b"\x00" * (6 * 1024 * 1024))


class TestSuccessfulScrape:
    @pytest.mark.asyncio
    async def test_full_article(self, session):
        serve_full_page(session)

        result = await scrape_article(ARTICLE_URL, session=session)

        assert isinstance(result, ScrapeSuccess)
        assert result.ok
        article = result.article
        assert article.url == ARTICLE_URL
        assert article.title == "Writing Fast Python"
        assert article.subtitle == "Profiling before optimizing"
        assert article.author == "Ada Lovelace"
        assert article.published_date == "2024-05-02T08:00:00.000Z"
        assert article.reading_time == "7 min"
        assert article.tags == ("python", "performance")

        assert [image.original_url for image in article.images] == [
            "https://miro.medium.com/a.png",
            "https://miro.medium.com/b.png",
            "https://miro.medium.com/huge.png",
        ]
        assert article.images[0].base64.startswith("data:image/png;base64,")
        assert article.images[1].base64.startswith("data:image/gif;base64,")
        assert article.images[2].base64 is None
        assert article.images[2].alt == "Huge"

        content = article.content
        assert content.startswith("<p>Measure first.</p>")
        assert article.images[0].base64 in content
        assert article.images[1].base64 in content
        assert 'src="https://miro.medium.com/huge.png"' in content
        assert "Share" not in content
        assert "<script" not in content

    @pytest.mark.asyncio
    async def test_title_only_page_uses_defaults(self, session):
        session.add(ARTICLE_URL, body=article_page("<article><h1>Title</h1></article>"))
        before = dt.datetime.now(dt.timezone.utc) - dt.timedelta(seconds=1)

        result = await scrape_article(ARTICLE_URL, session=session)

        assert isinstance(result, ScrapeSuccess)
        article = result.article
        assert article.title == "Title"
        assert article.author == "Unknown Author"
        assert article.content == "<h1>Title</h1>"
        assert article.images == ()
        assert article.tags is None
        published = dt.datetime.fromisoformat(article.published_date.replace("Z", "+00:00"))
        assert published >= before

    @pytest.mark.asyncio
    async def test_oversized_image_does_not_fail_scrape(self, session):
        serve_full_page(session)
        result = await scrape_article(ARTICLE_URL, session=session)
        assert result.ok
        assert sum(1 for image in result.article.images if image.base64) == 2


class TestFailures:
    @pytest.mark.asyncio
    async def test_private_host_fails_without_network(self, session):
        result = await scrape_article("https://127.0.0.1/anything", session=session)

        assert isinstance(result, ScrapeFailure)
        assert result.error.code is ErrorCode.INVALID_URL
        assert result.stage is ScrapeStage.IDLE
        session.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_paywall(self, session):
        session.add(
            ARTICLE_URL,
            body=article_page(
                '<div data-testid="paywall">Member-only story</div>'
                "<article><h1>Locked</h1><p>Teaser</p></article>"
            ),
        )

        result = await scrape_article(ARTICLE_URL, session=session)

        assert result.error.code is ErrorCode.PAYWALL
        assert result.stage is ScrapeStage.PARSED

    @pytest.mark.asyncio
    async def test_not_found(self, session):
        session.add(ARTICLE_URL, status=404)
        result = await scrape_article(ARTICLE_URL, session=session)
        assert result.error.code is ErrorCode.NOT_FOUND
        assert result.stage is ScrapeStage.VALIDATED

    @pytest.mark.asyncio
    async def test_timeout(self, session):
        session.add(ARTICLE_URL, body="<article><h1>T</h1></article>", delay=0.5)
        result = await scrape_article(
            ARTICLE_URL, ScrapeConfig(request_timeout=0.05), session=session
        )
        assert result.error.code is ErrorCode.TIMEOUT

    @pytest.mark.asyncio
    async def test_network_error(self, session):
        session.fail(ARTICLE_URL, requests.ConnectionError("dns"))
        result = await scrape_article(ARTICLE_URL, session=session)
        assert result.error.code is ErrorCode.NETWORK_ERROR

    @pytest.mark.asyncio
    async def test_missing_title(self, session):
        session.add(ARTICLE_URL, body=article_page("<article><p>No title</p></article>"))
        result = await scrape_article(ARTICLE_URL, session=session)
        assert result.error.code is ErrorCode.PARSE_ERROR
        assert result.stage is ScrapeStage.PAYWALL_CHECKED

    @pytest.mark.asyncio
    async def test_empty_content_is_parse_error(self, session):
        session.add(ARTICLE_URL, body=article_page("<h1>Title</h1><div>Loose text</div>"))
        result = await scrape_article(ARTICLE_URL, session=session)
        assert result.error.code is ErrorCode.PARSE_ERROR
        assert result.stage is ScrapeStage.IMAGES_RESOLVED

    @pytest.mark.asyncio
    async def test_images_not_fetched_after_paywall(self, session):
        session.add(
            ARTICLE_URL,
            body=article_page(
                '<div class="meteredContent"></div>'
                '<article><h1>T</h1><img src="https://cdn.example/x.png"></article>'
            ),
        )
        session.add("https://cdn.example/x.png", body=PNG_BYTES)

        await scrape_article(ARTICLE_URL, session=session)

        assert session.requested_urls() == [ARTICLE_URL]

    @pytest.mark.asyncio
    async def test_parser_crash_is_parse_error(self, session):
        session.add(ARTICLE_URL, body=article_page("<article><h1>T</h1></article>"))
        with patch("medbook.scraper.parse_html", side_effect=ValueError("bad markup")):
            result = await scrape_article(ARTICLE_URL, session=session)
        assert result.error.code is ErrorCode.PARSE_ERROR
        assert result.stage is ScrapeStage.FETCHED
        assert "bad markup" not in result.error.message
