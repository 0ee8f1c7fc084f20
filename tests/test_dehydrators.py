from calcdex.models.pokemon import Field, PlayerSide
from calcdex.parsing.dehydrators import (
    PLACEHOLDER, dehydrate_array, dehydrate_boolean, dehydrate_field, dehydrate_per_side,
    dehydrate_player_side, dehydrate_pokemon, dehydrate_stats_table, dehydrate_value,
)


def test_boolean():
    assert dehydrate_boolean(True) == "y"
    assert dehydrate_boolean(False) == "n"
    assert dehydrate_boolean(None) == "n"


def test_stats_table_fixed_order():
    table = {"spe": 31, "hp": 31, "atk": 0, "def": 31, "spa": 31, "spd": 31}
    assert dehydrate_stats_table(table) == "31/0/31/31/31/31"


def test_stats_table_missing_slots_use_placeholder():
    assert dehydrate_stats_table({"hp": 4}) == "4/?/?/?/?/?"
    assert dehydrate_stats_table(None) == "/".join([PLACEHOLDER] * 6)


def test_per_side_arrays():
    value = {"auth": [], "p1": ["iv", "ev"], "p2": ["iv", "ev"], "p3": ["iv", "ev"], "p4": ["iv", "ev"]}
    assert dehydrate_per_side(value) == "/iv,ev/iv,ev/iv,ev/iv,ev"


def test_per_side_booleans_in_key_order():
    value = {"p2": True, "auth": False, "p1": True, "p4": True, "p3": True}
    assert dehydrate_per_side(value) == "n/y/y/y/y"


def test_player_side_omits_falsy_and_conditions():
    side = PlayerSide(is_sr=True, is_reflect=True, conditions={"stealthrock": ["Stealth Rock", 1, 0, 0]})
    assert dehydrate_player_side(side) == "isSR=y/isReflect=y"
    assert dehydrate_player_side({"spikes": 3, "is_tailwind": False, "isSeeded": True}) == "spikes=3/isSeeded=y"
    assert dehydrate_player_side(None) == ""


def test_reserved_delimiters_are_stripped():
    assert dehydrate_value("Mr. Mime, Jr;|") == "Mr. Mime Jr"
    assert dehydrate_value(",;|") == PLACEHOLDER


def test_unconvertible_values_become_placeholder():
    assert dehydrate_value(None) == PLACEHOLDER
    assert dehydrate_value({"a": 1}) == PLACEHOLDER
    assert dehydrate_value(float("nan")) == PLACEHOLDER
    assert dehydrate_value(4.0) == "4"


def test_array_handles_bad_input():
    assert dehydrate_array(None) == ""
    assert dehydrate_array("abc") == ""
    assert dehydrate_array(["Protect", None, 3]) == "Protect/?/3"


def test_field_sections():
    field = Field(game_type="Doubles", weather="Sun", sides={"p2": PlayerSide(spikes=2), "p1": PlayerSide()})
    encoded = dehydrate_field(field)
    assert encoded.startswith("gameType~Doubles;weather~Sun;")
    assert encoded.endswith(";p1~;p2~spikes=2")
    assert dehydrate_field(None) == ""


def test_pokemon_requires_species(make_combatant):
    assert dehydrate_pokemon(None) == ""
    c = make_combatant(moves=["Salt Cure", "Protect"], ivs={"hp": 31, "atk": 0, "def": 31, "spa": 31, "spd": 31, "spe": 31})
    encoded = dehydrate_pokemon(c)
    assert "species~Garganacl" in encoded
    assert "moves~Salt Cure/Protect" in encoded
    assert "ivs~31/0/31/31/31/31" in encoded
    c.species_forme = None
    assert dehydrate_pokemon(c) == ""


def test_field_keys_share_one_style():
    side = PlayerSide(is_light_screen=True, is_friend_guard=True, fainted_count=2)
    field = Field(sides={"p1": side})
    assert dehydrate_player_side(side) == "isLightScreen=y/isFriendGuard=y/faintedCount=2"
    assert "_" not in dehydrate_field(field)
