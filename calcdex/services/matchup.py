# calcdex/services/matchup.py
"""Convierte un Combatant en los parámetros del constructor Pokemon de @smogon/calc.

Los casos especiales de habilidad/tipo son una tabla de reglas (ABILITY_RULES)
que se aplica en orden fijo sobre un registro de trabajo; después viene la
tubería de stats: base stats dirty → transformación → Power Trick → gens legacy.

Nunca lanza: si falta la generación o la especie devuelve None.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from math import floor
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..models.pokemon import Combatant, Field, is_set
from ..utils.abilities import (
    FIRST_HIT_ABILITIES, NEUTRAL_ABILITY, SELF_TYPE_CHANGE_ABILITIES,
    SWITCH_IN_BOOST_ABILITIES, is_ruin, is_toggleable,
)
from ..utils.generation import detect_gen_from_format, detect_legacy_gen
from ..utils.ids import format_id
from .calculations import compute_stats
from .overrides import (
    resolve_ability, resolve_base_stats, resolve_boosts, resolve_evs, resolve_item,
    resolve_ivs, resolve_level, resolve_nature, resolve_types,
)

log = logging.getLogger(__name__)

UNKNOWN_STATUS = "???"


@dataclass
class CalcPokemonInput:
    gen: int
    species: str
    options: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"gen": self.gen, "name": self.species, "options": self.options}


@dataclass
class _Work:
    """Estado intermedio sobre el que operan las reglas."""
    combatant: Combatant
    gen: int
    legacy: bool
    doubles: bool
    opponent: Optional[Combatant]
    ability: Optional[str]
    ability_id: str
    pseudo_toggle: bool
    pseudo_toggled: bool
    types: List[str] = field(default_factory=list)


# ---------- reglas de habilidad/tipo ----------
def _pseudo_toggle_off(w: _Work) -> bool:
    return w.pseudo_toggle and not w.pseudo_toggled


def _neutralize(w: _Work) -> None:
    w.ability = NEUTRAL_ABILITY


def _self_type_change(w: _Work) -> bool:
    c = w.combatant
    return (
        w.ability_id in SELF_TYPE_CHANGE_ABILITIES
        and "typechange" not in c.volatiles
        and not c.ability_toggled
    )


def _forward_original_types(w: _Work) -> None:
    # el motor aplicaría STAB a todo; sin 'typechange' se mandan los tipos originales
    w.ability = NEUTRAL_ABILITY
    w.types = list(w.combatant.types or w.types)


def _switch_in_boost(w: _Work) -> bool:
    # el cliente ya reporta el +1
    return w.ability_id in SWITCH_IN_BOOST_ABILITIES


def _ruin_cancel(w: _Work) -> bool:
    if w.legacy or not is_ruin(w.ability_id):
        return False
    opp = w.opponent
    if opp is None or not opp.species_forme:
        return False
    opp_dirty = opp.dirty_ability if is_set(opp.dirty_ability) else None
    opp_id = format_id(opp_dirty or opp.ability)
    return is_ruin(opp_id) and opp_id == w.ability_id


ABILITY_RULES: List[Tuple[str, Callable[[_Work], bool], Callable[[_Work], None]]] = [
    ("pseudo_toggle", _pseudo_toggle_off, _neutralize),
    ("self_type_change", _self_type_change, _forward_original_types),
    ("switch_in_boost", _switch_in_boost, _neutralize),
    ("ruin_cancel", _ruin_cancel, _neutralize),
]


def apply_ability_rules(w: _Work) -> List[str]:
    """Aplica ABILITY_RULES en orden; devuelve los nombres de las reglas que dispararon."""
    fired = []
    for name, predicate, transform in ABILITY_RULES:
        if predicate(w):
            transform(w)
            fired.append(name)
    return fired


# ---------- HP / status ----------
def _max_hp(c: Combatant, gen: int, base_stats: Dict[str, int]) -> int:
    if c.spread_stats.get("hp"):
        return c.spread_stats["hp"]
    if base_stats.get("hp") is not None:
        stats = compute_stats(
            gen, base_stats, resolve_ivs(c, gen), resolve_evs(c, gen),
            resolve_level(c, gen), resolve_nature(c, gen),
        )
        if stats.get("hp"):
            return stats["hp"]
    return c.maxhp or 100


def _cur_hp(c: Combatant, max_hp: int, should_multiscale: bool) -> int:
    if c.server_sourced:
        return max_hp if should_multiscale and not c.hp else c.hp
    pct = (c.hp / c.maxhp) if c.maxhp else 0
    # un Pokémon debilitado se asume a tope para no romper el cálculo
    return floor((1 if should_multiscale and not c.hp else (pct or 1)) * max_hp)


def _status(c: Combatant) -> Optional[str]:
    dirty = c.dirty_status
    if is_set(dirty) and dirty and dirty != UNKNOWN_STATUS:
        return None if dirty == "ok" else dirty
    if not c.status or c.status == UNKNOWN_STATUS:
        return None
    return c.status


def _allies_fainted(c: Combatant, move_name: Optional[str], field: Optional[Field]) -> int:
    # con el movimiento editado a mano no se aplica Supreme Overlord
    if move_name and c.move_overrides.get(move_name):
        return 0
    if is_set(c.dirty_faint_counter):
        return int(c.dirty_faint_counter or 0)
    if c.faint_counter:
        return c.faint_counter
    if field is not None and c.player_key in field.sides:
        return field.sides[c.player_key].fainted_count or 0
    return 0


# ---------- construcción ----------
def create_calc_pokemon(
    format,
    combatant: Optional[Combatant],
    move_name: Optional[str] = None,
    opponent: Optional[Combatant] = None,
    field: Optional[Field] = None,
) -> Optional[CalcPokemonInput]:
    gen = detect_gen_from_format(format)
    if not gen:
        log.debug("Formato sin generación: %r", format)
        return None
    if combatant is None or not combatant.calcdex_id or not combatant.species_forme:
        log.debug("Combatiente sin especie, no hay matchup")
        return None

    c = combatant
    legacy = detect_legacy_gen(gen)
    doubles = field is not None and field.doubles

    ability = resolve_ability(c, gen)
    ability_id = format_id(ability)
    pseudo_toggle = is_toggleable(ability, doubles)
    pseudo_toggled = pseudo_toggle and c.ability_toggleable and c.ability_toggled

    work = _Work(
        combatant=c, gen=gen, legacy=legacy, doubles=doubles, opponent=opponent,
        ability=ability, ability_id=ability_id,
        pseudo_toggle=pseudo_toggle, pseudo_toggled=pseudo_toggled,
        types=resolve_types(c, gen),
    )
    fired = apply_ability_rules(work)
    if fired:
        log.debug("%s: reglas de habilidad %s", c.calcdex_id, fired)

    # ---------- stats ----------
    base_stats = resolve_base_stats(c, gen)
    if c.transformed_forme and c.transformed_base_stats:
        # la transformación no cambia la HP máxima
        base_stats = {**c.transformed_base_stats, "hp": base_stats.get("hp")}
    if "powertrick" in c.volatiles:
        base_stats["atk"], base_stats["def"] = base_stats.get("def"), base_stats.get("atk")

    ivs = resolve_ivs(c, gen)
    evs = resolve_evs(c, gen)
    boosts = resolve_boosts(c, gen)
    if legacy:
        ivs["spd"] = ivs["spa"]
    if gen == 1:
        # gen 1 tiene una sola stat especial
        evs["spd"] = evs["spa"]
        boosts["spd"] = boosts["spa"]
        if base_stats.get("spd") != base_stats.get("spa"):
            base_stats["spd"] = base_stats.get("spa")

    should_multiscale = pseudo_toggled and ability_id in FIRST_HIT_ABILITIES
    max_hp = _max_hp(c, gen, resolve_base_stats(c, gen))

    options: Dict[str, Any] = {
        "curHP": _cur_hp(c, max_hp, should_multiscale),
        "level": resolve_level(c, gen),
        "gender": c.gender,
        "teraType": (c.terastallized and c.tera_type) or None,
        "status": _status(c),
        "toxicCounter": c.toxic_counter,
        "alliesFainted": _allies_fainted(c, move_name, field),
        "isDynamaxed": c.use_max,
        "isSaltCure": "saltcure" in c.volatiles,
        "ability": work.ability,
        "abilityOn": pseudo_toggled,
        "item": resolve_item(c, gen),
        "nature": resolve_nature(c, gen),
        "moves": list(c.moves),
        "ivs": ivs,
        "evs": evs,
        "boostedStat": c.boosted_stat,
        "boosts": boosts,
        "overrides": {
            "baseStats": base_stats,
            # el motor no soporta 3 tipos
            "types": (list(work.types) + [None, None])[:2],
        },
    }

    return CalcPokemonInput(gen=gen, species=c.species_forme, options=options)


def create_matchup(
    format,
    attacker: Optional[Combatant],
    defender: Optional[Combatant],
    move_name: Optional[str] = None,
    field: Optional[Field] = None,
) -> Optional[Tuple[CalcPokemonInput, CalcPokemonInput]]:
    """Ambos lados del matchup, o None si cualquiera no está disponible."""
    a = create_calc_pokemon(format, attacker, move_name, defender, field)
    d = create_calc_pokemon(format, defender, None, attacker, field)
    if a is None or d is None:
        return None
    return a, d
