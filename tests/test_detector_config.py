from __future__ import annotations

import pytest

from scpDetector.config import (
    CONFIG_ENV,
    DetectorConfig,
    SiteInfo,
    load_detector_config,
    merge_config,
)


def test_defaults():
    config = DetectorConfig()
    assert config.observe and config.autostart
    assert config.debounce_ms == 120
    assert config.debounce_seconds == pytest.approx(0.12)
    assert config.max_nodes == 5000
    assert config.allowed_domains is None
    assert config.domain_map["scp-jp.wikidot.com"] == SiteInfo("scp-wiki", "ja")
    assert "[data-scp-detector-exclude]" in config.exclude_selectors


def test_domain_map_is_not_shared():
    assert DetectorConfig().domain_map is not DetectorConfig().domain_map


def test_merge_config_coerces_and_reports_unknown_keys():
    config, ignored = merge_config(
        DetectorConfig(),
        {
            "debounce_ms": "250",
            "max_nodes": -4,
            "allowed_domains": "SCP-WIKI.wikidot.com, scpwiki.com",
            "exclude_selectors": ["pre", "code"],
            "allow_all_domains": True,
            "colour": "red",
        },
    )
    assert config.debounce_ms == 250
    assert config.max_nodes == 0
    assert config.allowed_domains == ("scp-wiki.wikidot.com", "scpwiki.com")
    assert config.exclude_selectors == "pre,code"
    assert ignored == ["allow_all_domains", "colour"]


def test_merge_config_keeps_base_for_bad_numbers():
    config, _ = merge_config(DetectorConfig(debounce_ms=80), {"debounce_ms": "soon"})
    assert config.debounce_ms == 80


def test_merge_config_without_changes_returns_base():
    base = DetectorConfig()
    assert merge_config(base, None) == (base, [])


def test_load_from_yaml(tmp_path):
    path = tmp_path / "detector.yml"
    path.write_text(
        "detector:\n"
        "  debounce_ms: 40\n"
        "  allowed_domains: [scp-wiki.wikidot.com]\n"
        "  domain_map:\n"
        "    mirror.example: {site: scp-wiki, locale: de}\n",
        encoding="utf-8",
    )
    config = load_detector_config(path)
    assert config.debounce_ms == 40
    assert config.allowed_domains == ("scp-wiki.wikidot.com",)
    assert config.domain_map == {"mirror.example": SiteInfo("scp-wiki", "de")}


def test_load_from_env(tmp_path, monkeypatch):
    path = tmp_path / "root.yml"
    path.write_text("observe: false\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV, str(path))
    assert load_detector_config().observe is False


def test_missing_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    assert load_detector_config() == DetectorConfig()
    assert load_detector_config(tmp_path / "absent.yml") == DetectorConfig()


def test_non_mapping_is_rejected(tmp_path):
    path = tmp_path / "bad.yml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_detector_config(path)


@pytest.mark.parametrize(
    "changes",
    [
        {"allowed_domains": 5},
        {"allowed_domains": {"scp-wiki.wikidot.com": True}},
        {"domain_map": 5},
        {"domain_map": ["not", "pairs"]},
        {"exclude_selectors": 3},
    ],
)
def test_merge_config_keeps_current_value_for_wrong_types(changes):
    base = DetectorConfig(allowed_domains=("scp-wiki.wikidot.com",))
    config, ignored = merge_config(base, changes)
    assert config == base
    assert ignored == []


def test_domain_map_is_read_only_copy():
    table = {"mirror.example": SiteInfo("scp-wiki", "de")}
    config = DetectorConfig(domain_map=table)
    table["mirror.example"] = SiteInfo("other", "xx")
    assert config.domain_map["mirror.example"] == SiteInfo("scp-wiki", "de")
    with pytest.raises(TypeError):
        config.domain_map["scp-wiki.wikidot.com"] = SiteInfo("other", "xx")

    merged, _ = merge_config(config, {"domain_map": {"a.example": {"site": "scp-wiki"}}})
    with pytest.raises(TypeError):
        merged.domain_map["b.example"] = SiteInfo("other", "xx")
