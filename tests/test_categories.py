import pickle

import pytest

from puckvalue.config import (
    GOALIE_CATEGORIES,
    SKATER_CATEGORIES,
    TEAM_CATEGORIES,
    DEFAULT_CONFIG,
    get_category,
    iter_categories,
    load_config,
    resolve_stat_code,
)


def test_category_table_sizes():
    assert len(SKATER_CATEGORIES) == 12
    assert len(GOALIE_CATEGORIES) == 5
    assert len(TEAM_CATEGORIES) == 15
    assert len(list(iter_categories("skater"))) == 12
    assert {definition.code for definition in iter_categories("goalie")} == set(GOALIE_CATEGORIES)


def test_get_category_is_case_insensitive():
    gaa = get_category("gaa")
    assert gaa.invert is True
    assert gaa.role == "goalie"
    assert get_category("G").weight == pytest.approx(1.5)
    assert get_category("HIT").bucket == "grind"


def test_get_category_missing_raises():
    with pytest.raises(KeyError):
        get_category("XYZ")


@pytest.mark.parametrize(
    "name,code",
    [
        ("Power Play Points", "PPP"),
        ("Powerplay Points", "PPP"),
        ("  blocked shots ", "BLK"),
        ("sv%", "SVPCT"),
        ("Save Percentage", "SVPCT"),
        ("+/-", "PM"),
        ("FOW", "FW"),
        ("Games Started", "GS"),
        ("otl", "OTL"),
        ("g", "G"),
    ],
)
def test_resolve_stat_code_aliases(name, code):
    assert resolve_stat_code(name) == code


def test_resolve_stat_code_unknown():
    assert resolve_stat_code("Takeaways") is None
    assert resolve_stat_code("   ") is None


def test_load_config_env_overrides(monkeypatch):
    monkeypatch.setenv("PUCKVALUE_TRADE_BONUS_SHARE", "0.5")
    monkeypatch.setenv("PUCKVALUE_HISTORICAL_WEIGHT", "2.0")
    monkeypatch.setenv("PUCKVALUE_BLEND_STAGE", "Weighted")
    config = load_config()
    assert config.trade_bonus_share == pytest.approx(0.5)
    assert config.historical_weight == pytest.approx(1.0)
    assert config.blend_stage == "weighted"


def test_load_config_invalid_env_keeps_defaults(monkeypatch):
    monkeypatch.setenv("PUCKVALUE_TRADE_BONUS_SHARE", "lots")
    monkeypatch.setenv("PUCKVALUE_BLEND_STAGE", "sideways")
    config = load_config()
    assert config.trade_bonus_share == pytest.approx(DEFAULT_CONFIG.trade_bonus_share)
    assert config.blend_stage == "raw"


def test_with_overrides_rejects_unknown_keys():
    with pytest.raises(KeyError):
        DEFAULT_CONFIG.with_overrides(not_a_setting=1)
    assert DEFAULT_CONFIG.with_overrides(grind_cap=0.3).grind_cap == pytest.approx(0.3)


def test_default_config_mappings_are_read_only():
    with pytest.raises(TypeError):
        DEFAULT_CONFIG.surplus_caps["A"] = 1.0
    with pytest.raises(TypeError):
        DEFAULT_CONFIG.position_multipliers["D"] = 2.0
    assert DEFAULT_CONFIG.surplus_caps["A"] == pytest.approx(25.0)


def test_overridden_mappings_are_copied():
    caps = {"A": 10.0, "B": 20.0, "C": 30.0}
    config = DEFAULT_CONFIG.with_overrides(surplus_caps=caps)
    caps["A"] = 99.0
    assert config.surplus_caps["A"] == pytest.approx(10.0)
    with pytest.raises(TypeError):
        config.surplus_caps["A"] = 1.0


def test_config_survives_pickling():
    config = DEFAULT_CONFIG.with_overrides(grind_cap=0.3)
    restored = pickle.loads(pickle.dumps(config))
    assert restored == config
    assert restored.grind_cap == pytest.approx(0.3)
    with pytest.raises(TypeError):
        restored.tier_bonus_caps["Star"] = 1.0
