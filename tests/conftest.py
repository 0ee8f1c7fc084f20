import pytest

from calcdex.db.base import make_engine, make_session_factory
from calcdex.db.repository import init_db
from calcdex.models.pokemon import Combatant
from calcdex.services.dex import StaticDex

SPECIES = {
    "Garganacl": {
        "baseStats": {"hp": 100, "atk": 100, "def": 130, "spa": 45, "spd": 90, "spe": 35},
        "types": ["Rock"],
        "learnset": ["Salt Cure", "Recover", "Protect", "Stealth Rock", "Body Press", "Hidden Power Fire"],
    },
    "Ditto": {
        "baseStats": {"hp": 48, "atk": 48, "def": 48, "spa": 48, "spd": 48, "spe": 48},
        "types": ["Normal"],
        "learnset": ["Transform"],
    },
    "Chien-Pao": {
        "baseStats": {"hp": 80, "atk": 120, "def": 80, "spa": 90, "spd": 65, "spe": 135},
        "types": ["Dark", "Ice"],
    },
    "Chi-Yu": {
        "baseStats": {"hp": 55, "atk": 80, "def": 80, "spa": 135, "spd": 120, "spe": 100},
        "types": ["Dark", "Fire"],
    },
    "Dragonite": {
        "baseStats": {"hp": 91, "atk": 134, "def": 95, "spa": 100, "spd": 100, "spe": 80},
        "types": ["Dragon", "Flying"],
    },
    "Greninja": {
        "baseStats": {"hp": 72, "atk": 95, "def": 67, "spa": 103, "spd": 71, "spe": 122},
        "types": ["Water", "Dark"],
    },
}

ALL_MOVES = ["Body Press", "Earthquake", "Protect", "Recover", "Salt Cure", "Stealth Rock", "Tackle", "Transform"]


@pytest.fixture
def dex():
    return StaticDex(SPECIES, moves=ALL_MOVES)


@pytest.fixture
def make_combatant():
    def _make(species="Garganacl", **kw):
        base = SPECIES.get(species, {})
        kw.setdefault("calcdex_id", species.lower())
        kw.setdefault("player_key", "p1")
        kw.setdefault("base_stats", dict(base.get("baseStats", {})))
        kw.setdefault("types", list(base.get("types", [])))
        return Combatant(species_forme=species, **kw)
    return _make


@pytest.fixture
def garganacl(make_combatant):
    return make_combatant(
        "Garganacl",
        ability=None,
        dirty_ability="Purifying Salt",
        item=None,
        prev_item="Leftovers",
        prev_item_effect="knocked off",
        nature="Impish",
        moves=["Protect", "Recover", "Stealth Rock", "Salt Cure"],
        ivs={"hp": 31, "atk": 31, "def": 31, "spa": 31, "spd": 31, "spe": 31},
        evs={"hp": 252, "atk": 0, "def": 228, "spa": 0, "spd": 28, "spe": 0},
    )


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://")
    init_db(engine)
    factory = make_session_factory(engine)
    yield factory
    engine.dispose()


@pytest.fixture
def session(session_factory):
    s = session_factory()
    yield s
    s.close()
