"""Identifier canonicalization, mention scanning and de-duplication."""

from .canonical import NormalizedId, id_from_path, normalize_identifier, unify_dashes  # noqa: F401
from .dedupe import dedupe_entities, score_entity  # noqa: F401
from .mentions import MentionScanner, resolve_url  # noqa: F401

__all__ = [
    "MentionScanner",
    "NormalizedId",
    "dedupe_entities",
    "id_from_path",
    "normalize_identifier",
    "resolve_url",
    "score_entity",
    "unify_dashes",
]
