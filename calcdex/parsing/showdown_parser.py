import re
import uuid
from typing import Dict, List, Optional

from ..models.pokemon import Preset, STAT_KEYS
from ..utils.generation import default_iv, detect_gen_from_format
from ..utils.nature import is_nature
from ..utils.species_normalize import normalize_species_name

# Regex tolerantes (ignoran espacios extra antes/después de ':')
RE_KV = {
    "ability": re.compile(r"^\s*ability\s*\:\s*(.+)\s*$", re.I),
    "item":    re.compile(r"^\s*item\s*\:\s*(.+)\s*$", re.I),
    "level":   re.compile(r"^\s*level\s*\:\s*(\d+)\s*$", re.I),
    "tera":    re.compile(r"^\s*tera[\s\-]*type\s*\:\s*(.+)\s*$", re.I),
    "evs":     re.compile(r"^\s*evs\s*\:\s*(.+)\s*$", re.I),
    "ivs":     re.compile(r"^\s*ivs\s*\:\s*(.+)\s*$", re.I),
}
RE_NATURE = re.compile(r"^\s*([A-Za-z]+)\s+Nature\s*$", re.I)

# Acepta guiones ascii y bullets comunes como inicio de movimiento
RE_MOVE = re.compile(r"^\s*[\-\–\—\•\·]\s*(.+?)\s*$")

# 'Hidden Power [Fire]' -> 'Hidden Power Fire'
RE_HIDDEN_POWER = re.compile(r"^hidden power\s*\[\s*(\w+)\s*\]$", re.I)

# Apodo (Especie) (M) @ Objeto
RE_HEADER = re.compile(
    r"^(?P<name>[^@\(]+?)(?:\s*\((?P<species>[^\)]{2,})\))?(?:\s*\((?P<gender>[MF])\))?(?:\s*@\s*(?P<item>.+))?$"
)


def _parse_spread(spread_line: str, clamp_min: int, clamp_max: int) -> Dict[str, int]:
    """
    Soporta: '252 HP / 4 Def / 252 Spe' (espacios y mayúsculas flexibles).
    Solo devuelve las stats presentes en la línea.
    """
    out: Dict[str, int] = {}
    if not spread_line:
        return out
    parts = [p.strip() for p in spread_line.split("/") if p.strip()]
    for part in parts:
        m = re.match(r"(?P<value>\d+)\s+(?P<label>HP|Atk|Def|SpA|SpD|Spe)", part, flags=re.I)
        if not m:
            continue
        val = int(m.group("value"))
        val = max(clamp_min, min(clamp_max, val))
        lab = m.group("label").lower()
        out[lab] = val
    return out


def _parse_evs(line: str) -> Dict[str, int]:
    return _parse_spread(line, clamp_min=0, clamp_max=252)


def _parse_ivs(line: str) -> Dict[str, int]:
    return _parse_spread(line, clamp_min=0, clamp_max=31)


def _move_name(raw: str) -> str:
    m = RE_HIDDEN_POWER.match(raw)
    if m:
        return f"Hidden Power {m.group(1).capitalize()}"
    return raw


def parse_showdown_text(
    data_str: str,
    format: Optional[str] = None,
    source: str = "import",
    name: Optional[str] = None,
) -> Preset:
    """Texto de exportación de Showdown -> Preset (un solo set)."""
    lines = [l.rstrip() for l in (data_str or "").splitlines() if l.strip()]
    if not lines:
        raise ValueError("Entrada vacía.")

    m1 = RE_HEADER.match(lines[0].strip())
    if not m1:
        raise ValueError(f"No se pudo interpretar la primera línea: '{lines[0]}'")

    species = (m1.group("species") or m1.group("name")).strip()
    gender = m1.group("gender")
    item = (m1.group("item") or "").strip() or None

    ability: Optional[str] = None
    tera_types: List[str] = []
    evs: Dict[str, int] = {}
    ivs: Dict[str, int] = {}
    nature: Optional[str] = None
    moves: List[str] = []

    for raw in lines[1:]:
        # Campos clave:valor
        for key, rx in RE_KV.items():
            m = rx.match(raw)
            if m:
                val = m.group(1).strip()
                if key == "ability":
                    ability = val or ability
                elif key == "item":
                    item = val or item
                elif key == "tera" and val:
                    tera_types.append(val)
                elif key == "evs":
                    evs = _parse_evs(val)
                elif key == "ivs":
                    ivs = _parse_ivs(val)
                break
        else:
            mnat = RE_NATURE.match(raw)
            if mnat and is_nature(mnat.group(1)):
                nature = mnat.group(1).capitalize()
                continue

            mm = RE_MOVE.match(raw)
            if mm:
                move = _move_name(mm.group(1).strip())
                if move and move not in moves:
                    moves.append(move)
                continue
            # otras líneas (Shiny, Happiness, Level...) se ignoran

    gen = detect_gen_from_format(format)
    # IVs ausentes = default de la gen
    full_ivs = {k: ivs.get(k, default_iv(gen)) for k in STAT_KEYS} if ivs else {}
    species = normalize_species_name(species, ability, gender)

    return Preset(
        calcdex_id=uuid.uuid4().hex,
        name=name or "Import",
        source=source,
        gen=gen,
        format=format,
        species_forme=species,
        ability=ability,
        item=item,
        nature=nature,
        moves=tuple(moves),
        ivs=full_ivs,
        evs=evs,
        tera_types=tuple(tera_types),
    )


def parse_showdown_team(data_str: str, format: Optional[str] = None, source: str = "import") -> List[Preset]:
    """Varios sets separados por línea en blanco."""
    blocks = re.split(r"\n\s*\n", (data_str or "").strip())
    return [parse_showdown_text(b, format=format, source=source) for b in blocks if b.strip()]
