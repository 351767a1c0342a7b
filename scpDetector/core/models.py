"""Value objects produced by the detector."""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple


class EntityKind(str, Enum):
    """Coarse classification of a mention."""

    SCP = "scp"
    SCP_VARIANT = "scp_variant"
    PROPOSAL_OR_ARTICLE = "proposal_or_article"


class MentionContext(str, Enum):
    LINK = "link"
    INLINE = "inline"


class Confidence(str, Enum):
    """How reliable the detection method was."""

    HIGH = "high"  # id taken from a link path
    MEDIUM = "medium"  # id taken from a link's visible text
    LOW = "low"  # id taken from prose

    @property
    def tier(self) -> int:
        return _TIERS[self]


_TIERS = {Confidence.HIGH: 3, Confidence.MEDIUM: 2, Confidence.LOW: 1}


class PageType(str, Enum):
    SCP_ARTICLE = "scp_article"
    PROPOSAL_OR_INDEX = "proposal_or_index"
    SERIES = "series"
    HUB = "hub"
    TALE = "tale"
    NON_SCP = "non_scp"
    UNKNOWN = "unknown"


def make_element_ref(element: Any) -> Optional[weakref.ReferenceType]:
    """Return a weak reference to ``element`` or ``None`` when unsupported."""

    if element is None:
        return None
    try:
        return weakref.ref(element)
    except TypeError:
        return None


@dataclass(frozen=True)
class Entity:
    """A detected mention of a canonical id."""

    id: str
    kind: EntityKind
    context: MentionContext
    confidence: Confidence
    url: Optional[str] = None
    display_text: Optional[str] = None
    element_ref: Optional[weakref.ReferenceType] = field(
        default=None, compare=False, hash=False, repr=False
    )

    @property
    def key(self) -> str:
        return f"{self.id}|{self.url or ''}"

    @property
    def element(self) -> Any:
        """The originating node, if it is still alive."""
        return self.element_ref() if self.element_ref is not None else None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "context": self.context.value,
            "confidence": self.confidence.value,
            "url": self.url,
            "displayText": self.display_text,
        }


@dataclass(frozen=True)
class PageClassification:
    type: PageType
    site: str
    locale: str
    canonical_url: str
    confidence: float

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "site": self.site,
            "locale": self.locale,
            "canonicalUrl": self.canonical_url,
            "confidence": self.confidence,
        }


EMPTY_PAGE = PageClassification(
    type=PageType.UNKNOWN,
    site="unknown",
    locale="unknown",
    canonical_url="",
    confidence=0.0,
)


@dataclass(frozen=True)
class DetectorResults:
    """Snapshot of the detector state; also the ``update`` event payload."""

    page: PageClassification = EMPTY_PAGE
    entities: Tuple[Entity, ...] = ()
    last_updated_at: float = 0.0

    def to_dict(self) -> dict:
        return {
            "page": self.page.to_dict(),
            "entities": [entity.to_dict() for entity in self.entities],
            "lastUpdatedAt": self.last_updated_at,
        }


# The controller's internal state and the snapshot handed out share a shape.
DetectorState = DetectorResults


__all__ = [
    "Confidence",
    "DetectorResults",
    "DetectorState",
    "EMPTY_PAGE",
    "Entity",
    "EntityKind",
    "MentionContext",
    "PageClassification",
    "PageType",
    "make_element_ref",
]
