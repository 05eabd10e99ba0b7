"""Google Docs client and markdown → batchUpdate conversion."""

import logging
import re
from dataclasses import dataclass

from app.integrations.google.constants import GOOGLE_DOC_EDIT_URL, GOOGLE_DOCS_API_URL, HORIZONTAL_RULE
from app.integrations.google.errors import GoogleAPIError, GoogleTokenExpired
from app.integrations.google.http import google_request

logger = logging.getLogger("cleverkit.google.docs")

_HEADING_RE = re.compile(r"^(#{1,3}) (.+)$")
_EMPHASIS_RE = re.compile(r"\*\*(.+?)\*\*|\*(.+?)\*")
_HEADING_STYLES = {1: "HEADING_1", 2: "HEADING_2", 3: "HEADING_3"}


@dataclass
class GoogleDocCreateResult:
    document_id: str
    document_url: str
    title: str


@dataclass
class _FormatRange:
    start: int
    end: int
    style: str  # HEADING_1..3, BOLD, ITALIC


def _strip_emphasis(line: str, offset: int, ranges: list[_FormatRange]) -> str:
    """Drop ``**``/``*`` markers from ``line``, recording where the text landed."""
    out: list[str] = []
    pos = 0
    length = 0
    for match in _EMPHASIS_RE.finditer(line):
        before = line[pos:match.start()]
        out.append(before)
        length += len(before)

        bold, italic = match.group(1), match.group(2)
        text = bold if bold is not None else italic
        start = offset + length
        ranges.append(_FormatRange(start, start + len(text), "BOLD" if bold is not None else "ITALIC"))
        out.append(text)
        length += len(text)
        pos = match.end()
    out.append(line[pos:])
    return "".join(out)


def markdown_to_doc_requests(markdown: str) -> list[dict]:
    """Convert simple markdown into Docs API batchUpdate requests.

    All text goes in with a single insertText at index 1. Style requests
    follow in descending start order so earlier ranges stay valid.
    """
    plain = ""
    ranges: list[_FormatRange] = []

    for line in markdown.split("\n"):
        trimmed = line.strip()

        if not trimmed:
            plain += "\n"
            continue

        if trimmed == "---":
            plain += HORIZONTAL_RULE + "\n\n"
            continue

        heading = _HEADING_RE.match(trimmed)
        if heading:
            text = heading.group(2)
            start = len(plain)
            ranges.append(_FormatRange(start, start + len(text), _HEADING_STYLES[len(heading.group(1))]))
            plain += text + "\n\n"
            continue

        plain += _strip_emphasis(trimmed, len(plain), ranges) + "\n\n"

    plain = plain.rstrip() + "\n"

    requests: list[dict] = [{"insertText": {"location": {"index": 1}, "text": plain}}]

    for r in sorted(ranges, key=lambda r: r.start, reverse=True):
        doc_range = {"startIndex": r.start + 1, "endIndex": r.end + 1}
        if r.style.startswith("HEADING"):
            requests.append({"updateParagraphStyle": {
                "range": doc_range,
                "paragraphStyle": {"namedStyleType": r.style},
                "fields": "namedStyleType",
            }})
        elif r.style == "BOLD":
            requests.append({"updateTextStyle": {
                "range": doc_range,
                "textStyle": {"bold": True},
                "fields": "bold",
            }})
        else:
            requests.append({"updateTextStyle": {
                "range": doc_range,
                "textStyle": {"italic": True},
                "fields": "italic",
            }})

    return requests


def _auth_headers(access_token: str) -> dict:
    return {"Authorization": f"Bearer {access_token}", "Content-Type": "application/json"}


def _check(response, action: str) -> None:
    if response.status_code == 401:
        raise GoogleTokenExpired("Google connection expired. Please reconnect.")
    if not response.is_success:
        logger.error("Failed to %s: %s %s", action, response.status_code, response.text)
        raise GoogleAPIError(f"Failed to {action}")


async def create_google_doc(access_token: str, title: str, markdown_content: str) -> GoogleDocCreateResult:
    """Create a blank doc titled ``title`` and fill it from markdown."""
    logger.info("Creating Google Doc: %s", title)
    response = await google_request(
        "POST", GOOGLE_DOCS_API_URL, headers=_auth_headers(access_token), json={"title": title},
    )
    _check(response, "create Google Doc")

    document_id = response.json().get("documentId")
    if not document_id:
        raise GoogleAPIError("No document ID returned from Google")

    requests = markdown_to_doc_requests(markdown_content)
    response = await google_request(
        "POST",
        f"{GOOGLE_DOCS_API_URL}/{document_id}:batchUpdate",
        headers=_auth_headers(access_token),
        json={"requests": requests},
    )
    _check(response, "insert content into Google Doc")

    logger.info("Google Doc created: %s", document_id)
    return GoogleDocCreateResult(
        document_id=document_id,
        document_url=GOOGLE_DOC_EDIT_URL.format(document_id=document_id),
        title=title,
    )
