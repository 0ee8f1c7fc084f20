# calcdex/services/presets.py
from __future__ import annotations
from typing import Iterable, Optional, Union

from ..models.pokemon import STAT_KEYS, Combatant, Preset, is_set
from ..utils.generation import default_iv, detect_gen_from_format, detect_legacy_gen


def _pokemon_ability(combatant: Combatant) -> Optional[str]:
    dirty = combatant.dirty_ability
    return (dirty if is_set(dirty) else None) or combatant.ability or None


def _pokemon_item(combatant: Combatant) -> Optional[str]:
    # si el objeto se consumió o lo quitaron, prev_item sigue contando
    dirty = combatant.dirty_item
    if is_set(dirty):
        return dirty or None
    return combatant.prev_item or combatant.item or None


def applied_preset(format: Union[int, str, None], combatant: Optional[Combatant], preset: Optional[Preset]) -> bool:
    """
    True si el preset está aplicado al combatiente:
    - naturaleza y habilidad (si no es gen legacy),
    - objeto (gen 2+),
    - movimientos: todos los del preset deben estar en combatant.moves (puede tener más),
    - IVs (en legacy se ignoran HP y SpD; SpD = SpA),
    - EVs (si no es gen legacy).
    """
    if not format or combatant is None or not combatant.species_forme:
        return False
    if preset is None or not preset.source:
        return False

    gen = detect_gen_from_format(format)
    if not gen:
        return False

    legacy = detect_legacy_gen(gen)
    dflt_iv = default_iv(gen)

    if not legacy:
        if not combatant.nature or not preset.nature or combatant.nature != preset.nature:
            return False
        ability = _pokemon_ability(combatant)
        if not ability or not preset.ability or ability != preset.ability:
            return False

    if gen >= 2:
        item = _pokemon_item(combatant)
        if not item or not preset.item or item != preset.item:
            return False

    moves = combatant.moves or []
    if not moves or not preset.moves:
        return False
    if not all(m in moves for m in preset.moves):
        return False

    ivs = combatant.ivs or {}
    preset_ivs = preset.ivs or {}
    for stat in STAT_KEYS:
        if legacy and stat in ("hp", "spd"):
            continue
        value = ivs.get(stat, dflt_iv)
        if preset_ivs.get(stat, dflt_iv) != value:
            return False

    if not legacy:
        evs = combatant.evs or {}
        preset_evs = preset.evs or {}
        for stat in STAT_KEYS:
            if (preset_evs.get(stat) or 0) != (evs.get(stat) or 0):
                return False

    return True


def find_applied_preset(
    format: Union[int, str, None],
    combatant: Optional[Combatant],
    presets: Iterable[Preset],
) -> Optional[Preset]:
    for preset in presets or ():
        if applied_preset(format, combatant, preset):
            return preset
    return None
