"""Canonicalization of SCP identifiers found in text and link targets."""

from __future__ import annotations

import re
from typing import NamedTuple, Optional

from scpDetector.core.models import EntityKind

# Hyphen-like code points treated as a plain ASCII hyphen.
DASH_CHARS = "\u2010\u2011\u2012\u2013\u2014\u2015-"
REDACTION_TOKEN = "\u2588" * 4
UNKNOWN_ID = "scp-unknown"
VARIANT_TAGS = frozenset({"j", "ex", "arc", "d"})

_DASH_RE = re.compile(f"[{re.escape(DASH_CHARS)}]")
_HYPHEN_SPACING_RE = re.compile(r"\s*-\s*")
_ID_RE = re.compile(
    rf"^SCP\s*-?\s*([0-9]{{1,4}}(?![0-9])|{REDACTION_TOKEN})((?:-[0-9A-Za-z]+)*)",
    re.IGNORECASE,
)
_PATH_ID_RE = re.compile(r"(?:^|/)scp-([0-9]{1,4}(?:-[0-9a-z]+)*)\b")


class NormalizedId(NamedTuple):
    id: str
    kind: EntityKind


def unify_dashes(text: str) -> str:
    if not text:
        return text
    return _DASH_RE.sub("-", text)


def _classify(body: str, suffixes: list[str]) -> EntityKind:
    if any(part in VARIANT_TAGS for part in suffixes):
        return EntityKind.SCP_VARIANT
    if body != REDACTION_TOKEN and int(body) == 1:
        return EntityKind.PROPOSAL_OR_ARTICLE
    return EntityKind.SCP


def normalize_identifier(raw: str | None) -> Optional[NormalizedId]:
    """Map ``raw`` to its canonical id and kind.

    Returns ``None`` when ``raw`` does not start with an SCP identifier;
    callers treat that as "no mention", never as an error.

    >>> normalize_identifier("SCP 049 - J")
    NormalizedId(id='scp-49-j', kind=<EntityKind.SCP_VARIANT: 'scp_variant'>)
    """

    if not raw:
        return None
    text = unify_dashes(str(raw).strip())
    text = _HYPHEN_SPACING_RE.sub("-", text)
    match = _ID_RE.match(text)
    if not match:
        return None
    body, rest = match.group(1), match.group(2)
    suffixes = [part.lower() for part in rest.split("-") if part]
    if body == REDACTION_TOKEN:
        canonical = UNKNOWN_ID
    else:
        canonical = f"scp-{int(body)}"
    if suffixes:
        canonical = "-".join([canonical, *suffixes])
    return NormalizedId(canonical, _classify(body, suffixes))


def id_from_path(path: str | None) -> Optional[NormalizedId]:
    """Extract a canonical id from a URL path such as ``/scp-173``."""

    if not path:
        return None
    match = _PATH_ID_RE.search(unify_dashes(path.lower()))
    if not match:
        return None
    return normalize_identifier(f"SCP-{match.group(1)}")


__all__ = [
    "DASH_CHARS",
    "NormalizedId",
    "REDACTION_TOKEN",
    "UNKNOWN_ID",
    "VARIANT_TAGS",
    "id_from_path",
    "normalize_identifier",
    "unify_dashes",
]
