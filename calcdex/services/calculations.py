from math import floor
from typing import Dict, Optional

from ..models.pokemon import STAT_KEYS
from ..utils.generation import LEGACY_GENS, default_ev, default_iv
from ..utils.nature import nature_multipliers


def _calc_hp(base: int, iv: int, ev: int, level: int) -> int:
    if base == 1:  # Shedinja
        return 1
    return floor(((2 * base + iv + floor(ev / 4)) * level) / 100) + level + 10


def _calc_other(base: int, iv: int, ev: int, level: int, nature_mult: float) -> int:
    return floor((floor(((2 * base + iv + floor(ev / 4)) * level) / 100) + 5) * nature_mult)


def _legacy_stat(base: int, dv: int, ev: int, level: int) -> int:
    # gens 1-2: DVs (0-15); el EV 252 equivale a stat exp máxima
    return floor((((base + dv) * 2 + floor(ev / 4)) * level) / 100)


def compute_stats(
    gen: Optional[int],
    base_stats: Dict[str, int],
    ivs: Optional[Dict[str, int]] = None,
    evs: Optional[Dict[str, int]] = None,
    level: int = 100,
    nature: Optional[str] = None,
) -> Dict[str, int]:
    """
    Devuelve el spread final {hp, atk, def, spa, spd, spe}.
    Stats sin base conocida quedan fuera del dict.
    """
    ivs = ivs or {}
    evs = evs or {}
    div, dev = default_iv(gen), default_ev(gen)
    stats: Dict[str, int] = {}

    if gen in LEGACY_GENS:
        for k in STAT_KEYS:
            if base_stats.get(k) is None:
                continue
            dv = floor(ivs.get(k, div) / 2)
            value = _legacy_stat(base_stats[k], dv, evs.get(k, dev), level)
            stats[k] = value + level + 10 if k == "hp" else value + 5
        return stats

    mults = nature_multipliers(nature)
    for k in STAT_KEYS:
        if base_stats.get(k) is None:
            continue
        if k == "hp":
            stats[k] = _calc_hp(base_stats[k], ivs.get(k, div), evs.get(k, dev), level)
        else:
            stats[k] = _calc_other(base_stats[k], ivs.get(k, div), evs.get(k, dev), level, mults[k])
    return stats
