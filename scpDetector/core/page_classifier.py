"""URL and title heuristics that place a page in the SCP page taxonomy."""

from __future__ import annotations

import re
from typing import Mapping, NamedTuple, Optional
from urllib.parse import urlsplit

from scpDetector.config import DEFAULT_DOMAIN_MAP, KNOWN_SITE, SiteInfo
from scpDetector.core.models import PageClassification, PageType
from scpDetector.transforms.canonical import unify_dashes

UNKNOWN = "unknown"

ARTICLE_PATH_RE = re.compile(r"/(?:scp-)?[0-9]{1,4}(?:-[a-z0-9]+)*(?=/|$)")
PROPOSAL_PATH_RE = re.compile(r"/scp-?001(?![0-9])")
ARTICLE_TITLE_RE = re.compile(r"\bscp-[0-9]{1,4}\b")
SERIES_PATH_RE = re.compile(r"\bseries\b")
SERIES_TITLE_RE = re.compile(r"series [ivx]+")
HUB_PATH_RE = re.compile(r"\bhub\b")
TALE_PATH_RE = re.compile(r"\btale\b")


class _Rule(NamedTuple):
    type: PageType
    confidence: float


PROPOSAL = _Rule(PageType.PROPOSAL_OR_INDEX, 0.6)
ARTICLE_BY_PATH = _Rule(PageType.SCP_ARTICLE, 0.9)
ARTICLE_BY_TITLE = _Rule(PageType.SCP_ARTICLE, 0.6)
SERIES = _Rule(PageType.SERIES, 0.6)
HUB = _Rule(PageType.HUB, 0.5)
TALE = _Rule(PageType.TALE, 0.4)
NON_SCP = _Rule(PageType.NON_SCP, 0.3)
FALLBACK = _Rule(PageType.UNKNOWN, 0.1)


def lookup_site(hostname: str, domain_map: Mapping[str, SiteInfo] | None = None) -> SiteInfo:
    mapping = DEFAULT_DOMAIN_MAP if domain_map is None else domain_map
    return mapping.get((hostname or "").lower(), SiteInfo(UNKNOWN, UNKNOWN))


def _split(url: str) -> tuple[str, str]:
    try:
        parts = urlsplit(url or "")
        hostname = parts.hostname or ""
    except ValueError:
        return "", "/"
    return hostname.lower(), (parts.path or "/").lower()


def _match_rule(path: str, title: str, site: str) -> _Rule:
    if PROPOSAL_PATH_RE.search(path):
        return PROPOSAL
    if ARTICLE_PATH_RE.search(path):
        return ARTICLE_BY_PATH
    if ARTICLE_TITLE_RE.search(title):
        return ARTICLE_BY_TITLE
    if SERIES_PATH_RE.search(path) or SERIES_TITLE_RE.search(title):
        return SERIES
    if HUB_PATH_RE.search(path) or "hub" in title:
        return HUB
    if TALE_PATH_RE.search(path) or "tale" in title:
        return TALE
    return NON_SCP if site == KNOWN_SITE else FALLBACK


def classify_page(
    url: str,
    title: Optional[str] = None,
    domain_map: Mapping[str, SiteInfo] | None = None,
) -> PageClassification:
    """Classify the page at ``url`` with document ``title``.

    Rules are checked in a fixed order and the first hit wins, so a page
    whose path names ``scp-001`` is a proposal index even though the same
    path also looks like a numbered article. Malformed URLs are treated as
    empty rather than raising.
    """

    hostname, path = _split(url)
    info = lookup_site(hostname, domain_map)
    rule = _match_rule(unify_dashes(path), unify_dashes((title or "").lower()), info.site)
    return PageClassification(
        type=rule.type,
        site=info.site,
        locale=info.locale,
        canonical_url=url or "",
        confidence=rule.confidence,
    )


__all__ = ["classify_page", "lookup_site"]
