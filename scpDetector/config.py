from __future__ import annotations

"""Detector configuration: defaults, merging and YAML loading."""

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Tuple

import yaml

CONFIG_ENV = "SCP_DETECTOR_CONFIG"

KNOWN_SITE = "scp-wiki"


@dataclass(frozen=True, slots=True)
class SiteInfo:
    """Site and locale a hostname belongs to."""

    site: str
    locale: str


DEFAULT_DOMAIN_MAP: Mapping[str, SiteInfo] = MappingProxyType({
    "scp-wiki.wikidot.com": SiteInfo(KNOWN_SITE, "en"),
    "www.scp-wiki.wikidot.com": SiteInfo(KNOWN_SITE, "en"),
    "scpwiki.com": SiteInfo(KNOWN_SITE, "en"),
    "www.scpwiki.com": SiteInfo(KNOWN_SITE, "en"),
    # International branches and mirrors
    "scp-wiki-cn.wikidot.com": SiteInfo(KNOWN_SITE, "zh-cn"),
    "scp-ru.wikidot.com": SiteInfo(KNOWN_SITE, "ru"),
    "scpko.wikidot.com": SiteInfo(KNOWN_SITE, "ko"),
    "scp-th.wikidot.com": SiteInfo(KNOWN_SITE, "th"),
    "scp-pl.wikidot.com": SiteInfo(KNOWN_SITE, "pl"),
    "scp-jp.wikidot.com": SiteInfo(KNOWN_SITE, "ja"),
    "scp-es.com": SiteInfo(KNOWN_SITE, "es"),
})

DEFAULT_EXCLUDE_SELECTORS = ",".join(
    [
        "script",
        "style",
        "pre",
        "code",
        "textarea",
        "input",
        "select",
        "button",
        '[contenteditable="true"]',
        "[data-scp-detector-exclude]",
    ]
)

DEFAULT_INCLUDE_SELECTORS = ",".join(
    [
        "a[href]",
        "p",
        "li",
        "span",
        "div",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "blockquote",
        "strong",
        "em",
        "small",
        "figcaption",
        "caption",
        "td",
        "th",
    ]
)


@dataclass(frozen=True, slots=True)
class DetectorConfig:
    """Runtime options for a detector instance.

    ``strict`` and ``scan_iframes`` are accepted for compatibility with
    existing option sets and are not consulted by the scanners.
    """

    observe: bool = True
    debounce_ms: int = 120
    include_selectors: str = DEFAULT_INCLUDE_SELECTORS
    exclude_selectors: str = DEFAULT_EXCLUDE_SELECTORS
    domain_map: Mapping[str, SiteInfo] = field(default_factory=lambda: DEFAULT_DOMAIN_MAP)
    allowed_domains: Tuple[str, ...] | None = None
    max_nodes: int = 5000
    max_matches_per_node: int = 20
    autostart: bool = True
    strict: bool = False
    scan_iframes: bool = False

    def __post_init__(self) -> None:
        # Read-only copy; callers never share the table they passed in.
        object.__setattr__(self, "domain_map", MappingProxyType(dict(self.domain_map)))

    @property
    def debounce_seconds(self) -> float:
        return max(0, self.debounce_ms) / 1000.0


CONFIG_FIELDS = frozenset(f.name for f in fields(DetectorConfig))


def _coerce_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _coerce_domain_map(value: Any, default: Mapping[str, SiteInfo]) -> Mapping[str, SiteInfo]:
    if not value:
        return MappingProxyType({})
    try:
        entries = dict(value)
    except (TypeError, ValueError):
        return default
    mapping: dict[str, SiteInfo] = {}
    for host, info in entries.items():
        if isinstance(info, SiteInfo):
            mapping[str(host).lower()] = info
        elif isinstance(info, Mapping):
            mapping[str(host).lower()] = SiteInfo(
                site=str(info.get("site", "unknown")),
                locale=str(info.get("locale", "unknown")),
            )
    return MappingProxyType(mapping)


def _coerce_domains(value: Any, default: Tuple[str, ...] | None) -> Tuple[str, ...] | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.split(",")
    elif isinstance(value, Mapping) or not isinstance(value, Iterable):
        return default
    return tuple(str(host).strip().lower() for host in value if str(host).strip())


def _coerce_selectors(value: Any, default: str) -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    if not isinstance(value, Iterable):
        return default
    return ",".join(str(part) for part in value)


def _coerce_field(name: str, value: Any, current: DetectorConfig) -> Any:
    if name in {"observe", "autostart", "strict", "scan_iframes"}:
        return bool(value)
    if name in {"debounce_ms", "max_nodes", "max_matches_per_node"}:
        return max(0, _coerce_int(value, getattr(current, name)))
    if name == "domain_map":
        return _coerce_domain_map(value, current.domain_map)
    if name == "allowed_domains":
        return _coerce_domains(value, current.allowed_domains)
    if name in {"include_selectors", "exclude_selectors"}:
        return _coerce_selectors(value, getattr(current, name))
    return value


def merge_config(
    base: DetectorConfig, changes: Mapping[str, Any] | None
) -> tuple[DetectorConfig, list[str]]:
    """Return ``base`` updated with ``changes`` and the list of ignored keys."""

    if not changes:
        return base, []
    accepted: dict[str, Any] = {}
    ignored: list[str] = []
    for key, value in changes.items():
        if key not in CONFIG_FIELDS:
            ignored.append(key)
            continue
        accepted[key] = _coerce_field(key, value, base)
    return replace(base, **accepted), sorted(ignored)


def default_config_path() -> Path | None:
    env = os.getenv(CONFIG_ENV)
    return Path(env) if env else None


def load_detector_config(path: Path | None = None) -> DetectorConfig:
    """Load detector settings from YAML with safe defaults.

    The file holds a top-level ``detector`` mapping (or the option keys at the
    root). A missing file yields the defaults.
    """

    if path is None:
        path = default_config_path()
    if path is None or not Path(path).exists():
        return DetectorConfig()
    raw = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Detector config must be a mapping: {path}")
    section = raw.get("detector", raw)
    config, _ = merge_config(DetectorConfig(), section)
    return config


__all__ = [
    "CONFIG_ENV",
    "CONFIG_FIELDS",
    "DEFAULT_DOMAIN_MAP",
    "DEFAULT_EXCLUDE_SELECTORS",
    "DEFAULT_INCLUDE_SELECTORS",
    "DetectorConfig",
    "KNOWN_SITE",
    "SiteInfo",
    "load_detector_config",
    "merge_config",
]
