from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

STAT_KEYS = ["hp", "atk", "def", "spa", "spd", "spe"]
BOOST_KEYS = ["atk", "def", "spa", "spd", "spe"]


class _Cleared:
    """Centinela: el usuario reseteó el override (distinto de 'nunca se tocó')."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "CLEARED"

    def __bool__(self) -> bool:
        return False


CLEARED = _Cleared()


class Layer(Enum):
    UNSET = "unset"
    BASE = "base"
    OVERRIDDEN = "overridden"
    CLEARED = "cleared"


# campo override -> campo base
OVERRIDE_FIELDS = {
    "ability": ("dirty_ability", "ability"),
    "item": ("dirty_item", "item"),
    "status": ("dirty_status", "status"),
    "types": ("dirty_types", "types"),
    "faint_counter": ("dirty_faint_counter", "faint_counter"),
    "boosts": ("dirty_boosts", "boosts"),
    "base_stats": ("dirty_base_stats", "base_stats"),
}

# tablas por stat (override por cada clave)
STAT_OVERRIDE_FIELDS = {"boosts", "base_stats"}


@dataclass
class Combatant:
    calcdex_id: str
    ident: Optional[str] = None
    player_key: Optional[str] = None
    species_forme: Optional[str] = None
    transformed_forme: Optional[str] = None
    level: Optional[int] = None
    gender: Optional[str] = None
    terastallized: bool = False
    tera_type: Optional[str] = None

    # capa base (servidor / preset)
    ability: Optional[str] = None
    item: Optional[str] = None
    prev_item: Optional[str] = None
    prev_item_effect: Optional[str] = None
    item_effect: Optional[str] = None
    nature: Optional[str] = None
    status: Optional[str] = None
    boosts: Dict[str, int] = field(default_factory=dict)
    ivs: Dict[str, int] = field(default_factory=dict)
    evs: Dict[str, int] = field(default_factory=dict)
    base_stats: Dict[str, int] = field(default_factory=dict)
    transformed_base_stats: Dict[str, int] = field(default_factory=dict)
    types: List[str] = field(default_factory=list)
    moves: List[str] = field(default_factory=list)
    faint_counter: Optional[int] = None
    toxic_counter: int = 0
    hp: int = 0
    maxhp: int = 0
    fainted: bool = False
    server_sourced: bool = False
    spread_stats: Dict[str, int] = field(default_factory=dict)
    boosted_stat: Optional[str] = None
    use_max: bool = False
    move_overrides: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    preset_id: Optional[str] = None

    # capa override ("dirty"): None = nunca, CLEARED = reseteado, otro = valor
    dirty_ability: Any = None
    dirty_item: Any = None
    dirty_status: Any = None
    dirty_boosts: Dict[str, Any] = field(default_factory=dict)
    dirty_base_stats: Dict[str, Any] = field(default_factory=dict)
    dirty_types: Any = None
    dirty_faint_counter: Any = None

    ability_toggleable: bool = False
    ability_toggled: bool = False

    volatiles: Set[str] = field(default_factory=set)

    # información revelada (solo crece)
    revealed_moves: List[str] = field(default_factory=list)
    server_moves: List[str] = field(default_factory=list)
    transformed_moves: List[str] = field(default_factory=list)
    alt_moves: List[Any] = field(default_factory=list)
    revealed_formes: List[str] = field(default_factory=list)


def is_set(value: Any) -> bool:
    return value is not None and value is not CLEARED


def layer_of(combatant: Combatant, name: str, stat: Optional[str] = None) -> Tuple[Layer, Any]:
    """
    Devuelve (Layer, valor) para un campo sobrescribible.
    Para 'boosts' y 'base_stats' hay que indicar la stat.
    """
    dirty_attr, base_attr = OVERRIDE_FIELDS[name]
    dirty = getattr(combatant, dirty_attr)
    base = getattr(combatant, base_attr)
    if name in STAT_OVERRIDE_FIELDS:
        if stat is None:
            raise KeyError(f"'{name}' requiere una stat")
        dirty = (dirty or {}).get(stat)
        base = (base or {}).get(stat)

    if is_set(dirty):
        return Layer.OVERRIDDEN, dirty
    if dirty is CLEARED:
        return Layer.CLEARED, base
    if base is None or base == [] or base == "":
        return Layer.UNSET, None
    return Layer.BASE, base


@dataclass
class PlayerSide:
    spikes: int = 0
    is_sr: bool = False
    is_reflect: bool = False
    is_light_screen: bool = False
    is_aurora_veil: bool = False
    is_tailwind: bool = False
    is_protected: bool = False
    is_seeded: bool = False
    is_friend_guard: bool = False
    is_helping_hand: bool = False
    fainted_count: int = 0
    conditions: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Field:
    game_type: str = "Singles"
    weather: Optional[str] = None
    weather_turns: int = 0
    terrain: Optional[str] = None
    terrain_turns: int = 0
    sides: Dict[str, PlayerSide] = field(default_factory=dict)

    @property
    def doubles(self) -> bool:
        return self.game_type == "Doubles"


@dataclass(frozen=True)
class Preset:
    calcdex_id: str
    name: str
    source: Optional[str] = None
    gen: Optional[int] = None
    format: Optional[str] = None
    species_forme: Optional[str] = None
    ability: Optional[str] = None
    item: Optional[str] = None
    nature: Optional[str] = None
    moves: Tuple[str, ...] = ()
    ivs: Dict[str, int] = field(default_factory=dict)
    evs: Dict[str, int] = field(default_factory=dict)
    tera_types: Tuple[str, ...] = ()
