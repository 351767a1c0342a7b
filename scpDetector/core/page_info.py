"""Current-page description: article number, display title and tags."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Mapping, Optional
from urllib.parse import urlsplit

from scpDetector.config import SiteInfo
from scpDetector.core.models import PageType
from scpDetector.core.page_classifier import classify_page
from scpDetector.document.base import DocumentSource

TITLE_SELECTORS = (
    "#page-title",
    "h1",
    ".page-title",
    ".title",
    "#page-title h1",
    "h1.title",
    ".content h1",
    "title",
)

TAG_SELECTORS = (
    ".page-tags a",
    ".page-tags-list a",
    ".tags a",
    "#page-tags a",
)

BLOCKED_PREFIXES = (
    "system:",
    "forum:",
    "user:",
    "fragment:",
    "component:",
    "sandbox:",
    "theme:",
    "nav:",
    "admin:",
)

BLOCKED_SLUGS = frozenset(
    {
        "main", "forum", "login", "logout", "start", "about", "help", "guide",
        "contact", "license", "image-license", "image-licensing", "policy",
        "tags", "page-tags", "list-all-pages", "recent-changes", "random",
        "history", "edit", "notify", "search", "site-manager", "members",
        "join", "signup", "profile",
    }
)

SCP_SLUG_RE = re.compile(r"^scp-([0-9]{1,4})$", re.IGNORECASE)
SCP_PREFIX_RE = re.compile(r"^scp-[0-9]+", re.IGNORECASE)
SERIES_SLUG_RE = re.compile(r"^series-([ivx]+)$", re.IGNORECASE)
SCP_SEGMENT_RE = re.compile(r"(?:^|/)scp-([0-9]{1,4})(?:\b|$)", re.IGNORECASE)
SLUG_RE = re.compile(r"^[a-z0-9-]+$", re.IGNORECASE)


@dataclass(frozen=True)
class PageInfo:
    number: str
    title: str
    type: str
    url: str

    def to_dict(self) -> dict:
        return {"number": self.number, "title": self.title, "type": self.type, "url": self.url}


def is_valid_tale_slug(slug: Optional[str]) -> bool:
    """True when ``slug`` can be a tale page rather than a wiki system page."""

    if not slug or "/" in slug:
        return False
    value = slug.lower()
    if value.startswith(BLOCKED_PREFIXES) or value in BLOCKED_SLUGS:
        return False
    if SCP_PREFIX_RE.match(value) or SERIES_SLUG_RE.match(value):
        return False
    return bool(SLUG_RE.match(value))


def extract_page_title(document: DocumentSource, default: str = "") -> str:
    for selector in TITLE_SELECTORS:
        for text in document.query_text(selector):
            text = text.strip()
            if text and (not default or text != default):
                return text
            break
    return default or ""


def extract_tags(document: DocumentSource) -> List[str]:
    tags = set()
    for selector in TAG_SELECTORS:
        for text in document.query_text(selector):
            value = text.strip().lower()
            if value:
                tags.add(value)
    return sorted(tags)


def describe_current_page(
    document: DocumentSource,
    domain_map: Mapping[str, SiteInfo] | None = None,
) -> Optional[PageInfo]:
    """Identify the article, series or tale the document shows, if any."""

    href = document.location or ""
    try:
        path = (urlsplit(href).path or "/").lstrip("/").lower()
    except ValueError:
        return None

    match = SCP_SLUG_RE.match(path)
    if match:
        number = match.group(1)
        return PageInfo(number, extract_page_title(document, f"SCP-{number}"), "scp", href)

    match = SERIES_SLUG_RE.match(path)
    if match:
        roman = match.group(1)
        return PageInfo(roman, extract_page_title(document, f"Series {roman.upper()}"), "series", href)

    if is_valid_tale_slug(path):
        return PageInfo(path, extract_page_title(document, path), "tale", href)

    classification = classify_page(href, document.title, domain_map)
    if classification.type is PageType.SCP_ARTICLE:
        match = SCP_SEGMENT_RE.search(path)
        if match:
            number = match.group(1)
            return PageInfo(number, extract_page_title(document, f"SCP-{number}"), "scp", href)
    return None


__all__ = [
    "PageInfo",
    "describe_current_page",
    "extract_page_title",
    "extract_tags",
    "is_valid_tale_slug",
]
