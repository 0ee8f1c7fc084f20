import pytest

from calcdex.models.pokemon import CLEARED, Layer, layer_of
from calcdex.services.overrides import (
    clear_override, clear_stat_override, resolve, resolve_base_stats, resolve_boosts,
    resolve_evs, resolve_item, resolve_ivs, set_override, set_stat_override,
)


@pytest.mark.parametrize("name,base_attr,base,dirty", [
    ("ability", "ability", "Sturdy", "Purifying Salt"),
    ("item", "item", "Leftovers", "Heavy-Duty Boots"),
    ("status", "status", "brn", "par"),
    ("types", "types", ["Rock"], ["Water"]),
    ("faint_counter", "faint_counter", 1, 3),
])
def test_override_wins_over_base(make_combatant, name, base_attr, base, dirty):
    c = make_combatant(**{base_attr: base})
    assert resolve(c, name, 9) == base
    c = set_override(c, name, dirty)
    assert resolve(c, name, 9) == dirty


def test_stat_tables_resolve_per_stat(make_combatant):
    c = make_combatant(boosts={"atk": 1, "def": -1})
    c = set_stat_override(c, "boosts", "atk", 4)
    assert resolve_boosts(c) == {"atk": 4, "def": -1, "spa": 0, "spd": 0, "spe": 0}

    c = set_stat_override(c, "base_stats", "spe", 200)
    assert resolve_base_stats(c)["spe"] == 200
    assert resolve_base_stats(c)["hp"] == 100


def test_negative_base_stat_override_is_ignored(make_combatant):
    c = set_stat_override(make_combatant(), "base_stats", "atk", -5)
    assert resolve_base_stats(c)["atk"] == 100


def test_clear_uses_sentinel_and_restores_base(make_combatant):
    c = make_combatant(ability="Sturdy")
    assert layer_of(c, "ability") == (Layer.BASE, "Sturdy")

    c = set_override(c, "ability", "Purifying Salt")
    assert layer_of(c, "ability") == (Layer.OVERRIDDEN, "Purifying Salt")

    c = clear_override(c, "ability")
    assert c.dirty_ability is CLEARED
    assert layer_of(c, "ability") == (Layer.CLEARED, "Sturdy")
    assert resolve(c, "ability", 9) == "Sturdy"


def test_never_set_is_unset(make_combatant):
    c = make_combatant()
    assert layer_of(c, "item") == (Layer.UNSET, None)


def test_clear_stat_override(make_combatant):
    c = make_combatant(boosts={"spe": 2})
    c = set_stat_override(c, "boosts", "spe", -1)
    c = clear_stat_override(c, "boosts", "spe")
    assert layer_of(c, "boosts", "spe") == (Layer.CLEARED, 2)
    assert resolve_boosts(c)["spe"] == 2


def test_clear_whole_stat_table(make_combatant):
    c = set_override(make_combatant(boosts={"atk": 1}), "boosts", {"atk": 6, "spe": 2})
    c = clear_override(c, "boosts")
    assert resolve_boosts(c)["atk"] == 1
    assert resolve_boosts(c)["spe"] == 0


def test_empty_item_override_means_no_item(make_combatant):
    c = set_override(make_combatant(item="Leftovers"), "item", "")
    assert resolve_item(c, 9) is None


def test_gen1_has_no_items(make_combatant):
    assert resolve_item(make_combatant(item="Leftovers"), 1) is None


def test_generation_defaults(make_combatant):
    c = make_combatant()
    assert set(resolve_ivs(c, 9).values()) == {31}
    assert set(resolve_evs(c, 9).values()) == {0}
    assert set(resolve_ivs(c, 1).values()) == {30}
    assert set(resolve_evs(c, 2).values()) == {252}
    assert resolve(c, "level") == 100
    assert resolve(c, "nature", 9) == "Hardy"
    assert resolve(c, "nature", 2) is None


def test_mutators_do_not_touch_the_original(make_combatant):
    c = make_combatant(ability="Sturdy")
    set_override(c, "ability", "Purifying Salt")
    set_stat_override(c, "boosts", "atk", 2)
    assert c.dirty_ability is None
    assert c.dirty_boosts == {}


def test_unknown_field_raises(make_combatant):
    with pytest.raises(KeyError):
        resolve(make_combatant(), "happiness")
