# calcdex/utils/generation.py
from __future__ import annotations
import re
from typing import Optional, Union

_RE_GEN = re.compile(r"^gen(\d+)", re.I)

# gens 1-2: DVs en vez de IVs, sin naturalezas ni EVs reales
LEGACY_GENS = (1, 2)


def detect_gen_from_format(format: Union[int, str, None]) -> Optional[int]:
    """'gen9ou' -> 9, 9 -> 9, cualquier otra cosa -> None."""
    if isinstance(format, bool):
        return None
    if isinstance(format, int):
        return format if format > 0 else None
    if not isinstance(format, str):
        return None
    m = _RE_GEN.match(format.strip())
    if not m:
        return None
    gen = int(m.group(1))
    return gen if gen > 0 else None


def detect_legacy_gen(format: Union[int, str, None]) -> bool:
    gen = detect_gen_from_format(format)
    return gen in LEGACY_GENS


def genless_format(format: Optional[str]) -> str:
    if not isinstance(format, str):
        return ""
    return _RE_GEN.sub("", format.strip().lower())


def default_iv(gen: Optional[int]) -> int:
    return 30 if gen in LEGACY_GENS else 31


def default_ev(gen: Optional[int]) -> int:
    return 252 if gen in LEGACY_GENS else 0
