"""Instantáneas inmutables del estado del cliente de batalla.

El cliente entrega objetos mutables y a veces incompletos; aquí se congelan en
valores explícitos. Cualquier campo ausente o con tipo inesperado queda en None
("sin información").
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from .pokemon import BOOST_KEYS, STAT_KEYS

_RE_BATTLE_ID = re.compile(r"^battle-(gen\d+[a-z0-9]*)-", re.I)


def _str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value == value:
        return int(value)
    return None


def _bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _names(value: Any) -> Optional[Tuple[str, ...]]:
    if not isinstance(value, (list, tuple)):
        return None
    return tuple(v for v in value if isinstance(v, str) and v)


def _alts(value: Any) -> Optional[Tuple[Any, ...]]:
    if not isinstance(value, (list, tuple)):
        return None
    out = []
    for v in value:
        if isinstance(v, str) and v:
            out.append(v)
        elif isinstance(v, (list, tuple)) and len(v) == 2 and isinstance(v[0], str):
            out.append((v[0], v[1]))
    return tuple(out)


def _table(value: Any, keys) -> Optional[Dict[str, int]]:
    if not isinstance(value, Mapping):
        return None
    out = {}
    for k in keys:
        v = _int(value.get(k))
        if v is not None:
            out[k] = v
    return out


def _volatiles(value: Any) -> Optional[frozenset]:
    # el cliente usa un dict {id: [...]}; también aceptamos listas
    if isinstance(value, Mapping):
        return frozenset(k for k in value.keys() if isinstance(k, str))
    if isinstance(value, (list, tuple, set, frozenset)):
        return frozenset(v for v in value if isinstance(v, str))
    return None


@dataclass(frozen=True)
class PokemonSnapshot:
    calcdex_id: Optional[str] = None
    ident: Optional[str] = None
    player_key: Optional[str] = None
    species_forme: Optional[str] = None
    transformed_forme: Optional[str] = None
    level: Optional[int] = None
    gender: Optional[str] = None
    hp: Optional[int] = None
    maxhp: Optional[int] = None
    fainted: Optional[bool] = None
    status: Optional[str] = None
    ability: Optional[str] = None
    item: Optional[str] = None
    prev_item: Optional[str] = None
    prev_item_effect: Optional[str] = None
    item_effect: Optional[str] = None
    nature: Optional[str] = None
    types: Optional[Tuple[str, ...]] = None
    boosts: Optional[Dict[str, int]] = None
    ivs: Optional[Dict[str, int]] = None
    evs: Optional[Dict[str, int]] = None
    base_stats: Optional[Dict[str, int]] = None
    transformed_base_stats: Optional[Dict[str, int]] = None
    spread_stats: Optional[Dict[str, int]] = None
    volatiles: Optional[frozenset] = None
    moves: Optional[Tuple[str, ...]] = None
    server_moves: Optional[Tuple[str, ...]] = None
    transformed_moves: Optional[Tuple[str, ...]] = None
    alt_moves: Optional[Tuple[Any, ...]] = None
    terastallized: Optional[bool] = None
    tera_type: Optional[str] = None
    toxic_counter: Optional[int] = None
    boosted_stat: Optional[str] = None
    server_sourced: Optional[bool] = None

    @classmethod
    def from_client(cls, data: Any) -> Optional["PokemonSnapshot"]:
        if not isinstance(data, Mapping):
            return None
        g = data.get
        volatiles = _volatiles(g("volatiles"))
        transformed = _str(g("transformedForme"))
        tera = g("terastallized")
        # el volátil 'transform' trae la especie copiada
        raw_vol = g("volatiles")
        if not transformed and isinstance(raw_vol, Mapping):
            tv = raw_vol.get("transform")
            if isinstance(tv, (list, tuple)) and len(tv) > 1:
                target = tv[1]
                if isinstance(target, Mapping):
                    transformed = _str(target.get("speciesForme"))
                else:
                    transformed = _str(target)
        return cls(
            calcdex_id=_str(g("calcdexId")),
            ident=_str(g("ident")),
            player_key=_str(g("playerKey")),
            species_forme=_str(g("speciesForme")),
            transformed_forme=transformed,
            level=_int(g("level")),
            gender=_str(g("gender")),
            hp=_int(g("hp")),
            maxhp=_int(g("maxhp")),
            fainted=_bool(g("fainted")),
            status=_str(g("status")),
            ability=_str(g("ability")) or _str(g("baseAbility")),
            item=_str(g("item")),
            prev_item=_str(g("prevItem")),
            prev_item_effect=_str(g("prevItemEffect")),
            item_effect=_str(g("itemEffect")),
            nature=_str(g("nature")),
            types=_names(g("types")),
            boosts=_table(g("boosts"), BOOST_KEYS),
            ivs=_table(g("ivs"), STAT_KEYS),
            evs=_table(g("evs"), STAT_KEYS),
            base_stats=_table(g("baseStats"), STAT_KEYS),
            transformed_base_stats=_table(g("transformedBaseStats"), STAT_KEYS),
            spread_stats=_table(g("stats") or g("spreadStats"), STAT_KEYS),
            volatiles=volatiles,
            moves=_names(g("moves")) or _names(g("moveTrack")),
            server_moves=_names(g("serverMoves")),
            transformed_moves=_names(g("transformedMoves")),
            alt_moves=_alts(g("altMoves")),
            terastallized=bool(tera) if isinstance(tera, str) else _bool(tera),
            tera_type=_str(g("teraType")) or (tera if isinstance(tera, str) and tera else None),
            toxic_counter=_int(g("toxicCounter")),
            boosted_stat=_str(g("boostedStat")),
            server_sourced=_bool(g("serverSourced")),
        )


@dataclass(frozen=True)
class SideSnapshot:
    player_key: str
    pokemon: Tuple[PokemonSnapshot, ...] = ()
    side_conditions: Optional[Dict[str, Any]] = None
    fainted_count: Optional[int] = None

    @classmethod
    def from_client(cls, player_key: str, data: Any) -> Optional["SideSnapshot"]:
        if not isinstance(data, Mapping):
            return None
        raw = data.get("pokemon")
        pokemon = []
        if isinstance(raw, (list, tuple)):
            for p in raw:
                snap = PokemonSnapshot.from_client(p)
                if snap is not None:
                    pokemon.append(snap)
        conds = data.get("sideConditions")
        fainted = _int(data.get("faintedCount"))
        if fainted is None and pokemon:
            fainted = sum(1 for p in pokemon if p.fainted or (p.hp == 0 and p.maxhp))
        return cls(
            player_key=player_key,
            pokemon=tuple(pokemon),
            side_conditions=dict(conds) if isinstance(conds, Mapping) else None,
            fainted_count=fainted,
        )


@dataclass(frozen=True)
class BattleSnapshot:
    battle_id: Optional[str] = None
    format: Optional[str] = None
    game_type: Optional[str] = None
    weather: Optional[str] = None
    weather_turns: Optional[int] = None
    terrain: Optional[str] = None
    terrain_turns: Optional[int] = None
    sides: Tuple[SideSnapshot, ...] = ()

    @classmethod
    def from_client(cls, data: Any) -> Optional["BattleSnapshot"]:
        if not isinstance(data, Mapping):
            return None
        sides = []
        for key in ("p1", "p2", "p3", "p4"):
            side = SideSnapshot.from_client(key, data.get(key))
            if side is not None:
                sides.append(side)
        fmt = _str(data.get("format"))
        battle_id = _str(data.get("id")) or _str(data.get("battleId"))
        if not fmt and battle_id:
            # 'battle-gen9ou-123' -> 'gen9ou'
            m = _RE_BATTLE_ID.match(battle_id)
            fmt = m.group(1) if m else None
        game_type = _str(data.get("gameType"))
        if game_type:
            game_type = game_type.capitalize()
        return cls(
            battle_id=battle_id,
            format=fmt,
            game_type=game_type,
            weather=_str(data.get("weather")),
            weather_turns=_int(data.get("weatherTimeLeft")),
            terrain=_str(data.get("terrain")),
            terrain_turns=_int(data.get("terrainTimeLeft")),
            sides=tuple(sides),
        )

    def side(self, player_key: str) -> Optional[SideSnapshot]:
        for s in self.sides:
            if s.player_key == player_key:
                return s
        return None
