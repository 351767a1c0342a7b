"""Document sources the detector can scan."""

from .base import (  # noqa: F401
    ChangeNotifier,
    ChangeSubscription,
    DocumentSource,
    LinkCandidate,
    TextCandidate,
)
from .html import HtmlDocument  # noqa: F401
from .memory import StaticDocument, StaticNode  # noqa: F401

__all__ = [
    "ChangeNotifier",
    "ChangeSubscription",
    "DocumentSource",
    "HtmlDocument",
    "LinkCandidate",
    "StaticDocument",
    "StaticNode",
    "TextCandidate",
]
