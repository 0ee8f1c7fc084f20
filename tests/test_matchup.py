import pytest

from calcdex.models.pokemon import Field, PlayerSide
from calcdex.services.matchup import NEUTRAL_ABILITY, create_calc_pokemon, create_matchup
from calcdex.services.overrides import set_override, set_stat_override


def opts(result):
    assert result is not None
    return result.options


def test_returns_none_without_gen_or_species(make_combatant):
    c = make_combatant()
    assert create_calc_pokemon("randombattle", c) is None
    assert create_calc_pokemon("gen9ou", None) is None
    c.species_forme = None
    assert create_calc_pokemon("gen9ou", c) is None


def test_basic_record(make_combatant):
    c = make_combatant(ability="Purifying Salt", item="Leftovers", nature="Careful",
                       moves=["Salt Cure", "Recover"], hp=50, maxhp=100)
    result = create_calc_pokemon("gen9ou", c)
    assert result.gen == 9
    assert result.species == "Garganacl"
    o = result.options
    assert o["ability"] == "Purifying Salt"
    assert o["item"] == "Leftovers"
    assert o["nature"] == "Careful"
    assert o["moves"] == ["Salt Cure", "Recover"]
    assert o["overrides"]["types"] == ["Rock", None]
    assert result.to_dict()["name"] == "Garganacl"


def test_client_hp_is_a_fraction_of_computed_max(make_combatant):
    # 31 IVs / 0 EVs / nivel 100: HP máxima 341
    c = make_combatant(hp=50, maxhp=100)
    assert opts(create_calc_pokemon("gen9ou", c))["curHP"] == 170


def test_server_hp_is_absolute(make_combatant):
    c = make_combatant(hp=250, maxhp=404, server_sourced=True, spread_stats={"hp": 404})
    assert opts(create_calc_pokemon("gen9ou", c))["curHP"] == 250


def test_fainted_client_pokemon_counts_as_full(make_combatant):
    c = make_combatant(hp=0, maxhp=100)
    assert opts(create_calc_pokemon("gen9ou", c))["curHP"] == 341


def test_multiscale_toggled_at_zero_hp_uses_max(make_combatant):
    c = make_combatant("Dragonite", ability="Multiscale", ability_toggleable=True,
                       ability_toggled=True, server_sourced=True, hp=0, spread_stats={"hp": 323})
    o = opts(create_calc_pokemon("gen9ou", c))
    assert o["curHP"] == 323
    assert o["abilityOn"] is True
    assert o["ability"] == "Multiscale"


def test_untoggled_toggle_ability_is_neutralized(make_combatant):
    c = make_combatant("Dragonite", ability="Multiscale", ability_toggleable=True)
    o = opts(create_calc_pokemon("gen9ou", c))
    assert o["ability"] == NEUTRAL_ABILITY
    assert o["abilityOn"] is False


@pytest.mark.parametrize("status,expected", [("brn", "brn"), ("???", None), (None, None)])
def test_status_mapping(make_combatant, status, expected):
    assert opts(create_calc_pokemon("gen9ou", make_combatant(status=status)))["status"] == expected


def test_status_override_ok_means_healthy(make_combatant):
    c = set_override(make_combatant(status="par"), "status", "ok")
    assert opts(create_calc_pokemon("gen9ou", c))["status"] is None


def test_transform_keeps_original_hp_base(make_combatant):
    ditto = make_combatant(
        "Ditto",
        transformed_forme="Garganacl",
        transformed_base_stats={"hp": 100, "atk": 100, "def": 130, "spa": 45, "spd": 90, "spe": 35},
    )
    stats = opts(create_calc_pokemon("gen9ou", ditto))["overrides"]["baseStats"]
    assert stats["hp"] == 48
    assert stats["def"] == 130


def test_transform_hp_follows_base_stat_override(make_combatant):
    ditto = make_combatant("Ditto", transformed_forme="Garganacl",
                           transformed_base_stats={"hp": 100, "atk": 100, "def": 130})
    ditto = set_stat_override(ditto, "base_stats", "hp", 60)
    assert opts(create_calc_pokemon("gen9ou", ditto))["overrides"]["baseStats"]["hp"] == 60


def test_power_trick_swaps_attack_and_defense(make_combatant):
    c = make_combatant(volatiles={"powertrick"})
    stats = opts(create_calc_pokemon("gen9ou", c))["overrides"]["baseStats"]
    assert stats["atk"] == 130
    assert stats["def"] == 100


def test_gen1_couples_special(make_combatant):
    c = make_combatant(
        "Tauros",
        base_stats={"hp": 75, "atk": 100, "def": 95, "spa": 40, "spd": 70, "spe": 110},
        ivs={"spa": 20, "spd": 2},
        evs={"spa": 100, "spd": 0},
        boosts={"spa": 2, "spd": -1},
        item="Leftovers",
        ability="Intimidate",
        nature="Jolly",
    )
    o = opts(create_calc_pokemon("gen1ou", c))
    assert o["ivs"]["spd"] == o["ivs"]["spa"] == 20
    assert o["evs"]["spd"] == o["evs"]["spa"] == 100
    assert o["boosts"]["spd"] == o["boosts"]["spa"] == 2
    assert o["overrides"]["baseStats"]["spd"] == 40
    assert o["item"] is None
    assert o["ability"] is None
    assert o["nature"] is None


def test_gen2_mirrors_special_dv_only(make_combatant):
    c = make_combatant(base_stats={"hp": 100, "spa": 50, "spd": 60}, ivs={"spa": 10, "spd": 30})
    o = opts(create_calc_pokemon("gen2ou", c))
    assert o["ivs"]["spd"] == 10
    assert o["overrides"]["baseStats"]["spd"] == 60


def test_ruin_cancelled_by_identical_ruin(make_combatant):
    pao = make_combatant("Chien-Pao", ability="Sword of Ruin")
    other = make_combatant("Chien-Pao", calcdex_id="p2chienpao", player_key="p2", ability="Sword of Ruin")
    a, d = create_matchup("gen9ou", pao, other)
    assert a.options["ability"] == NEUTRAL_ABILITY
    assert d.options["ability"] == NEUTRAL_ABILITY


def test_different_ruins_stay(make_combatant):
    pao = make_combatant("Chien-Pao", ability="Sword of Ruin")
    yu = make_combatant("Chi-Yu", player_key="p2", ability="Beads of Ruin")
    a, d = create_matchup("gen9ou", pao, yu)
    assert a.options["ability"] == "Sword of Ruin"
    assert d.options["ability"] == "Beads of Ruin"


def test_protean_without_typechange_sends_original_types(make_combatant):
    c = make_combatant("Greninja", ability="Protean")
    o = opts(create_calc_pokemon("gen9ou", c))
    assert o["ability"] == NEUTRAL_ABILITY
    assert o["overrides"]["types"] == ["Water", "Dark"]


def test_protean_after_typechange_keeps_ability(make_combatant):
    c = make_combatant("Greninja", ability="Protean", volatiles={"typechange"},
                       ability_toggleable=True, ability_toggled=True)
    assert opts(create_calc_pokemon("gen9ou", c))["ability"] == "Protean"


def test_protean_holds_back_type_override_until_typechange(make_combatant):
    c = set_override(make_combatant("Greninja", ability="Protean"), "types", ["Poison"])
    assert opts(create_calc_pokemon("gen9ou", c))["overrides"]["types"] == ["Water", "Dark"]


def test_type_override_forwarded_after_typechange(make_combatant):
    c = set_override(make_combatant("Greninja", ability="Protean", volatiles={"typechange"}), "types", ["Poison"])
    assert opts(create_calc_pokemon("gen9ou", c))["overrides"]["types"] == ["Poison", None]


def test_switch_in_boost_abilities_are_neutralized(make_combatant):
    c = make_combatant(ability="Intrepid Sword", boosts={"atk": 1})
    o = opts(create_calc_pokemon("gen9ou", c))
    assert o["ability"] == NEUTRAL_ABILITY
    assert o["boosts"]["atk"] == 1


def test_allies_fainted_from_side_and_suppressed_by_move_override(make_combatant):
    field = Field(sides={"p1": PlayerSide(fainted_count=3)})
    c = make_combatant(ability="Supreme Overlord")
    assert opts(create_calc_pokemon("gen9ou", c, "Salt Cure", field=field))["alliesFainted"] == 3

    c.move_overrides = {"Salt Cure": {"basePower": 80}}
    assert opts(create_calc_pokemon("gen9ou", c, "Salt Cure", field=field))["alliesFainted"] == 0


def test_faint_counter_override_wins(make_combatant):
    field = Field(sides={"p1": PlayerSide(fainted_count=3)})
    c = set_override(make_combatant(faint_counter=1), "faint_counter", 5)
    assert opts(create_calc_pokemon("gen9ou", c, field=field))["alliesFainted"] == 5


def test_tera_type_only_when_terastallized(make_combatant):
    assert opts(create_calc_pokemon("gen9ou", make_combatant(tera_type="Water")))["teraType"] is None
    c = make_combatant(tera_type="Water", terastallized=True)
    assert opts(create_calc_pokemon("gen9ou", c))["teraType"] == "Water"


def test_matchup_needs_both_sides(make_combatant):
    assert create_matchup("gen9ou", make_combatant(), None) is None
    assert create_matchup("gen9ou", make_combatant(), make_combatant("Dragonite", player_key="p2")) is not None
