# calcdex/services/overrides.py
"""Resolución de la capa override ("dirty") sobre la capa base.

Todas las funciones son puras: los mutadores devuelven un Combatant nuevo.
"""
from __future__ import annotations
import copy
from dataclasses import replace
from typing import Any, Dict, List, Optional

from ..models.pokemon import (
    BOOST_KEYS, CLEARED, OVERRIDE_FIELDS, STAT_KEYS, STAT_OVERRIDE_FIELDS,
    Combatant, is_set,
)
from ..utils.generation import LEGACY_GENS, default_ev, default_iv

DEFAULT_LEVEL = 100
DEFAULT_NATURE = "Hardy"


def _prefer(dirty: Any, base: Any) -> Any:
    return dirty if is_set(dirty) else base


def resolve(combatant: Combatant, name: str, gen: Optional[int] = None) -> Any:
    """Valor efectivo de un campo: override > base > default según la gen."""
    resolvers = {
        "ability": resolve_ability,
        "item": resolve_item,
        "status": resolve_status,
        "types": resolve_types,
        "faint_counter": resolve_faint_counter,
        "boosts": resolve_boosts,
        "base_stats": resolve_base_stats,
        "ivs": resolve_ivs,
        "evs": resolve_evs,
        "level": resolve_level,
        "nature": resolve_nature,
    }
    if name not in resolvers:
        raise KeyError(f"Campo no resoluble: '{name}'")
    return resolvers[name](combatant, gen)


def resolve_ability(combatant: Combatant, gen: Optional[int] = None) -> Optional[str]:
    if gen in LEGACY_GENS:
        return None
    return _prefer(combatant.dirty_ability, combatant.ability) or None


def resolve_item(combatant: Combatant, gen: Optional[int] = None) -> Optional[str]:
    # '' como override = "sin objeto" explícito
    if gen == 1:
        return None
    return _prefer(combatant.dirty_item, combatant.item) or None


def resolve_status(combatant: Combatant, gen: Optional[int] = None) -> Optional[str]:
    return _prefer(combatant.dirty_status, combatant.status) or None


def resolve_types(combatant: Combatant, gen: Optional[int] = None) -> List[str]:
    dirty = combatant.dirty_types
    if is_set(dirty) and len(dirty):
        return list(dirty)
    return list(combatant.types or [])


def resolve_faint_counter(combatant: Combatant, gen: Optional[int] = None) -> int:
    value = _prefer(combatant.dirty_faint_counter, combatant.faint_counter)
    return int(value or 0)


def resolve_boosts(combatant: Combatant, gen: Optional[int] = None) -> Dict[str, int]:
    dirty = combatant.dirty_boosts or {}
    base = combatant.boosts or {}
    out = {}
    for stat in BOOST_KEYS:
        value = _prefer(dirty.get(stat), base.get(stat))
        out[stat] = int(value) if value is not None else 0
    return out


def resolve_base_stats(combatant: Combatant, gen: Optional[int] = None) -> Dict[str, int]:
    out = dict(combatant.base_stats or {})
    for stat, value in (combatant.dirty_base_stats or {}).items():
        # solo overrides numéricos no negativos
        if not is_set(value) or isinstance(value, bool) or not isinstance(value, int) or value < 0:
            continue
        out[stat] = value
    return out


def resolve_ivs(combatant: Combatant, gen: Optional[int] = None) -> Dict[str, int]:
    ivs = combatant.ivs or {}
    dflt = default_iv(gen)
    return {k: ivs[k] if ivs.get(k) is not None else dflt for k in STAT_KEYS}


def resolve_evs(combatant: Combatant, gen: Optional[int] = None) -> Dict[str, int]:
    evs = combatant.evs or {}
    dflt = default_ev(gen)
    return {k: evs[k] if evs.get(k) is not None else dflt for k in STAT_KEYS}


def resolve_level(combatant: Combatant, gen: Optional[int] = None) -> int:
    return combatant.level or DEFAULT_LEVEL


def resolve_nature(combatant: Combatant, gen: Optional[int] = None) -> Optional[str]:
    if gen in LEGACY_GENS:
        return None
    return combatant.nature or DEFAULT_NATURE


# ---------- Mutadores (puros) ----------
def set_override(combatant: Combatant, name: str, value: Any) -> Combatant:
    if name in STAT_OVERRIDE_FIELDS:
        if not isinstance(value, dict):
            raise TypeError(f"'{name}' espera un dict por stat")
        dirty_attr = OVERRIDE_FIELDS[name][0]
        merged = {**(getattr(combatant, dirty_attr) or {}), **value}
        return replace(copy.deepcopy(combatant), **{dirty_attr: merged})
    dirty_attr = OVERRIDE_FIELDS[name][0]
    if name == "types" and value is not None:
        value = list(value)
    return replace(copy.deepcopy(combatant), **{dirty_attr: value})


def clear_override(combatant: Combatant, name: str) -> Combatant:
    dirty_attr = OVERRIDE_FIELDS[name][0]
    if name in STAT_OVERRIDE_FIELDS:
        cleared = {k: CLEARED for k in (getattr(combatant, dirty_attr) or {})}
        return replace(copy.deepcopy(combatant), **{dirty_attr: cleared})
    return replace(copy.deepcopy(combatant), **{dirty_attr: CLEARED})


def set_stat_override(combatant: Combatant, name: str, stat: str, value: int) -> Combatant:
    if name not in STAT_OVERRIDE_FIELDS:
        raise KeyError(f"'{name}' no es una tabla de stats")
    return set_override(combatant, name, {stat: value})


def clear_stat_override(combatant: Combatant, name: str, stat: str) -> Combatant:
    if name not in STAT_OVERRIDE_FIELDS:
        raise KeyError(f"'{name}' no es una tabla de stats")
    return set_override(combatant, name, {stat: CLEARED})
