# calcdex/services/move_options.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..models.pokemon import Combatant
from ..utils.generation import detect_gen_from_format, genless_format
from ..utils.ids import format_id
from .types import hidden_power_moves

# formatos donde solo se muestran movimientos legales
LEGAL_LOCKED_FORMATS = {
    "ou", "uu", "ru", "nu", "pu", "zu", "lc", "ubers", "doublesou", "doublesubers",
    "vgc2023", "vgc2024", "vgc2025", "battlestadiumsingles", "randombattle", "randomdoublesbattle",
}


@dataclass
class MoveOption:
    label: str
    value: str
    right_label: Optional[str] = None


@dataclass
class MoveOptionGroup:
    label: str
    options: List[MoveOption] = field(default_factory=list)


def _alt_name(alt: Any) -> str:
    return alt[0] if isinstance(alt, (list, tuple)) else alt


def _usage_finder(alt_moves: List[Any]):
    usage = {a[0]: a[1] for a in alt_moves or [] if isinstance(a, (list, tuple)) and isinstance(a[1], (int, float))}

    def find(name: str) -> Optional[str]:
        if name not in usage:
            return None
        return f"{usage[name] * 100:.2f}%"
    return find


def build_move_options(format: Optional[str], combatant: Optional[Combatant], dex=None) -> List[MoveOptionGroup]:
    """Opciones agrupadas para el selector de movimientos (sin duplicados)."""
    options: List[MoveOptionGroup] = []
    if combatant is None or not combatant.species_forme:
        return options

    gen = detect_gen_from_format(format)
    genless = genless_format(format)
    show_all = not genless or genless not in LEGAL_LOCKED_FORMATS
    find_usage = _usage_finder(combatant.alt_moves)
    seen: List[str] = []

    def group(label: str, names: List[str], right=find_usage) -> MoveOptionGroup:
        fresh = []
        for n in names:
            if n and n not in seen and n not in fresh:
                fresh.append(n)
        seen.extend(fresh)
        return MoveOptionGroup(label, [MoveOption(n, n, right(n)) for n in fresh])

    c = combatant
    if c.server_sourced and c.server_moves:
        options.append(group("Pre-Transform" if c.transformed_forme else "Current", c.server_moves))

    if c.transformed_forme and c.transformed_moves:
        options.insert(0, group("Transformed", c.transformed_moves))

    if c.revealed_moves:
        options.append(group("Revealed", c.revealed_moves))

    if c.alt_moves:
        has_usage = any(isinstance(a, (list, tuple)) and isinstance(a[1], (int, float)) for a in c.alt_moves)
        pool = [_alt_name(a) for a in c.alt_moves if _alt_name(a) and _alt_name(a) not in seen]
        # con estadísticas de uso se respeta el orden recibido
        options.append(group("Pool", pool if has_usage else sorted(pool)))

    learnset: List[str] = []
    if dex is not None:
        learnset = list(dex.learnset(format, c.species_forme))
        if c.transformed_forme:
            learnset += dex.learnset(format, c.transformed_forme)
    if learnset:
        names = sorted({n for n in learnset if n and not format_id(n).startswith("hiddenpower")})
        options.append(group("Learnset", names))

    hp_group = None
    if gen and gen > 1:
        hp_group = MoveOptionGroup("Hidden Power")
        hp_names = [n for n in hidden_power_moves() if n not in seen]
        # se agrega al final, pero 'All' no debe repetirlos
        seen.extend(hp_names)
        hp_group.options = [MoveOption(n, n, find_usage(n)) for n in hp_names]

    if hp_group is not None:
        options.append(hp_group)

    if (show_all or not learnset) and dex is not None:
        others = sorted(n for n in dex.moves(gen) if n and not format_id(n).startswith("hiddenpower"))
        # justo antes de Hidden Power; sin ese grupo, al principio
        hp_index = len(options) - 1 if hp_group is not None else 0
        options.insert(hp_index, group("All", others))

    return options
