"""Mention scanning over link targets and prose with bounded cost."""
from __future__ import annotations

import re
from itertools import islice
from typing import List, Optional
from urllib.parse import urljoin, urlsplit

from scpDetector.config import DetectorConfig
from scpDetector.core.models import Confidence, Entity, MentionContext, make_element_ref
from scpDetector.document.base import DocumentSource, LinkCandidate
from scpDetector.transforms.canonical import (
    DASH_CHARS,
    REDACTION_TOKEN,
    NormalizedId,
    id_from_path,
    normalize_identifier,
)

_DASHES = re.escape(DASH_CHARS)

# SCP-173, SCP 173, SCP–173, SCP-049-J, SCP-3000-1, SCP-████
INLINE_ID_RE = re.compile(
    rf"(?:^|[^A-Za-z0-9])(SCP[ \u00a0{_DASHES}]*(?:[0-9]{{1,4}}(?![0-9])|{REDACTION_TOKEN})"
    rf"(?:[{_DASHES}][0-9A-Za-z]+)*)",
    re.IGNORECASE,
)

_RESOLVABLE_SCHEMES = {"http", "https", "file"}


def resolve_url(href: Optional[str], base: str) -> Optional[str]:
    """Resolve ``href`` against ``base``; ``None`` when it cannot be resolved."""

    if href is None:
        return None
    href = href.strip()
    if not href:
        return None
    try:
        resolved = urljoin(base or "", href)
        parts = urlsplit(resolved)
    except ValueError:
        return None
    if parts.scheme.lower() not in _RESOLVABLE_SCHEMES:
        return None
    return resolved


class MentionScanner:
    """Produce unscored mention candidates from a document."""

    def __init__(self, config: DetectorConfig | None = None) -> None:
        self.config = config or DetectorConfig()

    # ------------------------------------------------------------------
    # Public helpers

    def scan(self, document: DocumentSource, base_url: str) -> List[Entity]:
        return self.scan_links(document, base_url) + self.scan_inline(document)

    def scan_links(self, document: DocumentSource, base_url: str) -> List[Entity]:
        """Return link-context candidates.

        An id in the resolved path yields ``high`` confidence; otherwise the
        visible text is normalized and yields ``medium``.
        """

        out: List[Entity] = []
        for link in document.enumerate_links(self.config.exclude_selectors):
            if link.excluded:
                continue
            url = resolve_url(link.href, base_url)
            if url is None:
                continue
            entity = self._from_path(link, url) or self._from_text(link, url)
            if entity is not None:
                out.append(entity)
        return out

    def scan_inline(self, document: DocumentSource) -> List[Entity]:
        """Return inline candidates from at most ``max_nodes`` elements."""

        out: List[Entity] = []
        candidates = document.enumerate_text_candidates(
            self.config.include_selectors, self.config.exclude_selectors
        )
        for candidate in islice(candidates, self.config.max_nodes):
            if candidate.excluded:
                continue
            text = (candidate.text or "").strip()
            if not text:
                continue
            for raw in self.find_identifiers(text):
                norm = normalize_identifier(raw)
                if norm is None:
                    continue
                out.append(
                    self._entity(
                        norm,
                        context=MentionContext.INLINE,
                        confidence=Confidence.LOW,
                        url=None,
                        display_text=raw,
                        element=candidate.element,
                    )
                )
        return out

    def find_identifiers(self, text: str) -> List[str]:
        """Return identifier-shaped substrings of ``text``, capped per element."""

        limit = self.config.max_matches_per_node
        return [m.group(1) for m in islice(INLINE_ID_RE.finditer(text), limit)]

    # ------------------------------------------------------------------
    # Internals

    def _from_path(self, link: LinkCandidate, url: str) -> Optional[Entity]:
        norm = id_from_path(urlsplit(url).path)
        if norm is None:
            return None
        return self._entity(
            norm,
            context=MentionContext.LINK,
            confidence=Confidence.HIGH,
            url=url,
            display_text=link.text,
            element=link.element,
        )

    def _from_text(self, link: LinkCandidate, url: str) -> Optional[Entity]:
        text = (link.text or "").strip()
        if not text:
            return None
        norm = normalize_identifier(text)
        if norm is None:
            return None
        return self._entity(
            norm,
            context=MentionContext.LINK,
            confidence=Confidence.MEDIUM,
            url=url,
            display_text=text,
            element=link.element,
        )

    @staticmethod
    def _entity(
        norm: NormalizedId,
        *,
        context: MentionContext,
        confidence: Confidence,
        url: Optional[str],
        display_text: Optional[str],
        element: object,
    ) -> Entity:
        return Entity(
            id=norm.id,
            kind=norm.kind,
            context=context,
            confidence=confidence,
            url=url,
            display_text=display_text or None,
            element_ref=make_element_ref(element),
        )


__all__ = ["INLINE_ID_RE", "MentionScanner", "resolve_url"]
