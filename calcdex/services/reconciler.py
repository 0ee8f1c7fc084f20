# calcdex/services/reconciler.py
"""Fusiona una instantánea del cliente con el Combatant persistido.

Reglas:
- lo revelado (movimientos vistos, formas, alternativas) solo se une, nunca se reemplaza;
- lo autoritativo del servidor (HP, fainted, status, boosts) pisa la capa base, nunca la dirty;
- la transformación cambia las base stats río abajo conservando la HP original;
- el toggle de habilidad sobrevive si la habilidad resuelta no cambió.

Nunca falla: campos ausentes = sin información nueva.
"""
from __future__ import annotations
import copy
import logging
from typing import Any, Iterable, List, Optional

from ..models.pokemon import Combatant, Field, PlayerSide
from ..models.snapshot import BattleSnapshot, PokemonSnapshot
from ..utils.abilities import is_toggleable
from ..utils.ids import format_id
from .overrides import resolve_ability

log = logging.getLogger(__name__)

MAX_MOVES = 4


def _union(prev: Iterable[Any], new: Optional[Iterable[Any]]) -> List[Any]:
    out = list(prev or [])
    for v in new or ():
        if v and v not in out:
            out.append(v)
    return out


def _alt_name(alt: Any) -> str:
    return alt[0] if isinstance(alt, (list, tuple)) else alt


def _union_alts(prev: Iterable[Any], new: Optional[Iterable[Any]]) -> List[Any]:
    out = list(prev or [])
    seen = {_alt_name(a) for a in out}
    for a in new or ():
        name = _alt_name(a)
        if name and name not in seen:
            out.append(a)
            seen.add(name)
    return out


def snapshot_calcdex_id(snapshot: PokemonSnapshot) -> Optional[str]:
    if snapshot.calcdex_id:
        return snapshot.calcdex_id
    if snapshot.ident:
        return format_id(snapshot.ident) or None
    return None


def sync_pokemon(
    prev: Optional[Combatant],
    snapshot: Optional[PokemonSnapshot],
    *,
    format: Optional[str] = None,
    dex=None,
    game_type: Optional[str] = None,
) -> Optional[Combatant]:
    if snapshot is None:
        return copy.deepcopy(prev) if prev is not None else None

    if prev is None:
        cid = snapshot_calcdex_id(snapshot)
        if not cid:
            log.debug("Instantánea sin identidad, se ignora")
            return None
        prev = Combatant(calcdex_id=cid)

    c = copy.deepcopy(prev)
    prev_ability_id = format_id(resolve_ability(prev))

    # ---------- identidad ----------
    for attr in ("ident", "player_key", "species_forme", "gender", "level", "nature", "tera_type"):
        value = getattr(snapshot, attr)
        if value:
            setattr(c, attr, value)
    if snapshot.terastallized is not None:
        c.terastallized = snapshot.terastallized

    # ---------- autoritativo del servidor (solo capa base) ----------
    if snapshot.hp is not None:
        c.hp = snapshot.hp
    if snapshot.maxhp is not None:
        c.maxhp = snapshot.maxhp
    if snapshot.fainted is not None:
        c.fainted = snapshot.fainted
    if snapshot.status is not None:
        c.status = snapshot.status or None
    if snapshot.boosts is not None:
        c.boosts = dict(snapshot.boosts)
    if snapshot.toxic_counter is not None:
        c.toxic_counter = snapshot.toxic_counter
    if snapshot.server_sourced is not None:
        c.server_sourced = snapshot.server_sourced
    if snapshot.spread_stats:
        c.spread_stats = dict(snapshot.spread_stats)
    if snapshot.volatiles is not None:
        c.volatiles = set(snapshot.volatiles)
    if snapshot.boosted_stat is not None:
        c.boosted_stat = snapshot.boosted_stat or None

    # ---------- capa base observada ----------
    if snapshot.ability:
        c.ability = snapshot.ability
    if snapshot.item is not None and (snapshot.item or c.server_sourced):
        # '' del cliente = objeto desconocido, salvo si viene del servidor
        c.item = snapshot.item or None
    if snapshot.prev_item:
        c.prev_item = snapshot.prev_item
    if snapshot.prev_item_effect:
        c.prev_item_effect = snapshot.prev_item_effect
    if snapshot.item_effect is not None:
        c.item_effect = snapshot.item_effect or None
    if snapshot.types:
        c.types = list(snapshot.types)
    if snapshot.ivs:
        c.ivs = {**c.ivs, **snapshot.ivs}
    if snapshot.evs:
        c.evs = {**c.evs, **snapshot.evs}
    if snapshot.base_stats:
        c.base_stats = dict(snapshot.base_stats)
    elif not c.base_stats and dex is not None:
        info = dex.species(c.species_forme)
        if info is not None:
            c.base_stats = dict(info.base_stats)
            if not c.types:
                c.types = list(info.types)

    # ---------- revelado (unión) ----------
    c.revealed_moves = _union(c.revealed_moves, snapshot.moves)
    c.server_moves = _union(c.server_moves, snapshot.server_moves)
    c.transformed_moves = _union(c.transformed_moves, snapshot.transformed_moves)
    c.alt_moves = _union_alts(c.alt_moves, snapshot.alt_moves)

    # ---------- transformación ----------
    if snapshot.transformed_forme:
        c.transformed_forme = snapshot.transformed_forme
        c.revealed_formes = _union(c.revealed_formes, [snapshot.transformed_forme])
        if snapshot.transformed_base_stats:
            c.transformed_base_stats = dict(snapshot.transformed_base_stats)
        elif dex is not None:
            info = dex.species(snapshot.transformed_forme)
            if info is not None:
                c.transformed_base_stats = dict(info.base_stats)
    if c.species_forme:
        c.revealed_formes = _union(c.revealed_formes, [c.species_forme])

    # ---------- movimientos seleccionados ----------
    if c.server_sourced and snapshot.server_moves:
        c.moves = list(snapshot.server_moves)[:MAX_MOVES]
    else:
        for move in c.revealed_moves:
            if len(c.moves) >= MAX_MOVES:
                break
            if move not in c.moves:
                c.moves.append(move)

    # ---------- toggle de habilidad ----------
    ability = resolve_ability(c)
    doubles = (game_type or "").lower() == "doubles"
    c.ability_toggleable = is_toggleable(ability, doubles)
    if format_id(ability) != prev_ability_id:
        c.ability_toggled = False
    if not c.ability_toggleable:
        c.ability_toggled = False

    return c


def _side_from_conditions(prev: Optional[PlayerSide], conditions: Optional[dict], fainted: Optional[int]) -> PlayerSide:
    side = copy.deepcopy(prev) if prev is not None else PlayerSide()
    if conditions is not None:
        ids = {format_id(k): v for k, v in conditions.items()}

        def layers(cid: str) -> int:
            # el cliente usa [nombre, capas, minTurnos, maxTurnos]
            v = ids.get(cid)
            if isinstance(v, (list, tuple)) and len(v) > 1 and isinstance(v[1], int):
                return v[1]
            return 1 if v else 0

        side.spikes = layers("spikes")
        side.is_sr = "stealthrock" in ids
        side.is_reflect = "reflect" in ids
        side.is_light_screen = "lightscreen" in ids
        side.is_aurora_veil = "auroraveil" in ids
        side.is_tailwind = "tailwind" in ids
        side.conditions = dict(conditions)
    if fainted is not None:
        side.fainted_count = fainted
    return side


def sync_field(prev: Optional[Field], snapshot: Optional[BattleSnapshot]) -> Field:
    field = copy.deepcopy(prev) if prev is not None else Field()
    if snapshot is None:
        return field
    if snapshot.game_type in ("Singles", "Doubles"):
        field.game_type = snapshot.game_type
    if snapshot.weather is not None:
        field.weather = snapshot.weather or None
    if snapshot.weather_turns is not None:
        field.weather_turns = snapshot.weather_turns
    if snapshot.terrain is not None:
        field.terrain = snapshot.terrain or None
    if snapshot.terrain_turns is not None:
        field.terrain_turns = snapshot.terrain_turns
    for side in snapshot.sides:
        field.sides[side.player_key] = _side_from_conditions(
            field.sides.get(side.player_key), side.side_conditions, side.fainted_count,
        )
    return field
