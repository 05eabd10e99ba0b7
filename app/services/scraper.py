"""Homepage scraper: fetch a website and extract readable text.

The scrape never raises for upstream problems; callers get a
ScrapeResult with ``success=False`` and a user-facing ``error``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup, Comment

from app.config import get_settings

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; CleverKitBot/1.0; +https://thecleverkit.com/bot)"
REQUEST_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}
MIN_CONTENT_LENGTH = 100
# Matches brands.source_url
MAX_URL_LENGTH = 2048
TRUNCATION_MARKER = "\n\n[Content truncated...]"

# Removed entirely; header and footer are kept because they often carry the
# business name and contact details.
STRIP_TAGS = ["script", "style", "svg", "noscript", "nav", "iframe", "template"]
BLOCK_TAGS = [
    "p", "div", "section", "article", "main", "header", "footer", "aside",
    "h1", "h2", "h3", "h4", "h5", "h6", "li", "ul", "ol", "tr", "table",
    "blockquote", "br", "hr", "form", "figure", "figcaption",
]

_DNS_ERROR_MARKERS = ("name or service not known", "nodename nor servname", "getaddrinfo", "name resolution")


@dataclass
class ScrapeMetadata:
    url: str
    title: str | None = None
    description: str | None = None
    fetched_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


@dataclass
class ScrapeResult:
    success: bool
    content: str | None = None
    metadata: ScrapeMetadata | None = None
    error: str | None = None


# ── URL helpers ──────────────────────────────────────────────


def ensure_protocol(url: str) -> str:
    url = url.strip()
    if not re.match(r"^https?://", url, re.IGNORECASE):
        return f"https://{url}"
    return url


def is_valid_url(url: str) -> bool:
    if len(url) > MAX_URL_LENGTH:
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False
    host = parsed.hostname
    return "." in host or host == "localhost"


# ── HTML extraction ──────────────────────────────────────────


def _clean_text(value: str | None) -> str | None:
    if not value:
        return None
    cleaned = re.sub(r"\s+", " ", value).strip()
    return cleaned or None


def extract_metadata(soup: BeautifulSoup, url: str) -> ScrapeMetadata:
    title = _clean_text(soup.title.get_text()) if soup.title else None
    if not title:
        og_title = soup.find("meta", attrs={"property": "og:title"})
        title = _clean_text(og_title.get("content")) if og_title else None

    desc_tag = soup.find("meta", attrs={"name": "description"})
    description = _clean_text(desc_tag.get("content")) if desc_tag else None
    if not description:
        og_desc = soup.find("meta", attrs={"property": "og:description"})
        description = _clean_text(og_desc.get("content")) if og_desc else None

    return ScrapeMetadata(url=url, title=title, description=description)


def extract_text_content(soup: BeautifulSoup) -> str:
    """Readable text from a parsed page, one block element per line."""
    for tag in soup(STRIP_TAGS):
        tag.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    if soup.head:
        soup.head.decompose()

    for tag in soup.find_all(BLOCK_TAGS):
        tag.insert_before("\n")
        tag.append("\n")

    lines = (
        re.sub(r"[ \t\r\f\v\xa0]+", " ", line).strip()
        for line in soup.get_text().split("\n")
    )
    return "\n".join(line for line in lines if line)


# ── Scrape ───────────────────────────────────────────────────


async def scrape_homepage(url: str) -> ScrapeResult:
    """Fetch ``url`` and return its text content and metadata."""
    settings = get_settings()
    normalized_url = ensure_protocol(url)
    logger.info("Starting web scrape: %s", normalized_url)

    try:
        async with httpx.AsyncClient(
            timeout=settings.scrape_timeout_seconds,
            follow_redirects=True,
            headers=REQUEST_HEADERS,
        ) as client:
            response = await client.get(normalized_url)
    except httpx.TimeoutException:
        logger.error("Scrape timeout: %s", normalized_url)
        return ScrapeResult(success=False, error="Website took too long to respond. Please try again.")
    except httpx.ConnectError as e:
        if any(marker in str(e).lower() for marker in _DNS_ERROR_MARKERS):
            logger.error("Invalid domain: %s", normalized_url)
            return ScrapeResult(success=False, error="Could not find this website. Please check the URL.")
        logger.error("Scrape connection error for %s: %s", normalized_url, e)
        return ScrapeResult(success=False, error=f"Failed to scrape website: {e}")
    except httpx.HTTPError as e:
        logger.error("Scrape error for %s: %s", normalized_url, e)
        return ScrapeResult(success=False, error=f"Failed to scrape website: {e}")

    if not response.is_success:
        logger.error("Scrape failed - bad response %s for %s", response.status_code, normalized_url)
        return ScrapeResult(
            success=False,
            error=f"Failed to fetch: {response.status_code} {response.reason_phrase}",
        )

    html = response.text
    if not html:
        logger.warning("Scrape returned empty content: %s", normalized_url)
        return ScrapeResult(success=False, error="Website returned empty content")

    soup = BeautifulSoup(html, "html.parser")
    metadata = extract_metadata(soup, str(response.url))
    text = extract_text_content(soup)

    if len(text) < MIN_CONTENT_LENGTH:
        logger.warning("Scraped content too short: %d chars", len(text))
        return ScrapeResult(success=False, error="Could not extract meaningful content from website")

    max_length = settings.scrape_max_content_length
    if len(text) > max_length:
        text = text[:max_length] + TRUNCATION_MARKER

    logger.info("Scrape complete: %s (%d chars)", normalized_url, len(text))
    return ScrapeResult(success=True, content=text, metadata=metadata)
