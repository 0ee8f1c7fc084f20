# calcdex/parsing/dehydrators.py
"""Codificación compacta ("dehydrate") de subconjuntos del estado.

Formato: fragmentos ASCII separados por '/', listas anidadas por ','.
Los delimitadores reservados se eliminan de los valores (pérdida deliberada),
así que el decodificador puede invertir todo con la misma precedencia:
primero '/', luego ','.
"""
from __future__ import annotations
import dataclasses
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from ..models.pokemon import STAT_KEYS

# nunca pueden aparecer dentro de un valor codificado
RESERVED_DELIMITERS = (",", ";", "|")
PLACEHOLDER = "?"
DELIMITER = "/"
ARRAY_DELIMITER = ","
PER_SIDE_KEYS = ("auth", "p1", "p2", "p3", "p4")
# detalle de condiciones apiladas: fuera de esta capa
EXCLUDED_SIDE_KEYS = ("conditions",)
# nombres de campo -> claves camelCase del formato codificado
_KEY_EXCEPTIONS = {"is_sr": "isSR"}

_STRIP = str.maketrans("", "", "".join(RESERVED_DELIMITERS))


def dehydrate_boolean(value: Any) -> str:
    """True -> 'y', False -> 'n'."""
    return "y" if value else "n"


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, float):
        if value != value:
            return None
        if value.is_integer():
            value = int(value)
    if isinstance(value, (list, tuple)):
        parts = [_to_text(v) for v in value]
        return ",".join(p or "" for p in parts)
    if isinstance(value, (str, int)):
        return str(value)
    # dicts / objetos sin representación natural
    return None


def dehydrate_value(value: Any) -> str:
    if isinstance(value, bool):
        return dehydrate_boolean(value)
    text = _to_text(value)
    if text is None:
        return PLACEHOLDER
    return text.translate(_STRIP) or PLACEHOLDER


def dehydrate_array(value: Optional[Iterable[Any]], delimiter: str = DELIMITER) -> str:
    if value is None or isinstance(value, (str, bytes, Mapping)):
        return ""
    try:
        return delimiter.join(dehydrate_value(v) for v in value)
    except TypeError:
        return ""


def dehydrate_stats_table(value: Optional[Mapping[str, Any]], delimiter: str = DELIMITER) -> str:
    """{'hp': 31, 'atk': 0, ...} -> '31/0/31/31/31/31' (siempre 6 posiciones)."""
    table = value if isinstance(value, Mapping) else {}
    return delimiter.join(dehydrate_value(table.get(k)) for k in STAT_KEYS)


def _entries(value: Any):
    if value is None:
        return []
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return [(f.name, getattr(value, f.name)) for f in dataclasses.fields(value)]
    if isinstance(value, Mapping):
        return list(value.items())
    return []


def encoded_key(name: str) -> str:
    """'is_light_screen' -> 'isLightScreen'; las claves camelCase pasan tal cual."""
    if name in _KEY_EXCEPTIONS:
        return _KEY_EXCEPTIONS[name]
    head, *rest = str(name).split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def dehydrate_player_side(value: Any, delimiter: str = DELIMITER) -> str:
    """PlayerSide -> 'isSR=y/isReflect=y' (omite falsy y 'conditions')."""
    return delimiter.join(
        f"{encoded_key(k)}={dehydrate_value(v)}"
        for k, v in _entries(value)
        if k and k not in EXCLUDED_SIDE_KEYS and v
    )


def dehydrate_per_side(
    value: Optional[Mapping[str, Any]],
    delimiter: str = DELIMITER,
    array_delimiter: str = ARRAY_DELIMITER,
) -> str:
    """{'auth': False, 'p1': True, ...} -> 'n/y/...' en orden de clave."""
    if not isinstance(value, Mapping):
        return ""
    out = []
    for key in sorted(k for k in value.keys() if k in PER_SIDE_KEYS):
        v = value[key]
        if isinstance(v, (list, tuple)):
            out.append(dehydrate_array(v, array_delimiter))
        else:
            out.append(dehydrate_value(v))
    return delimiter.join(out)


# ---------- compuestos ----------
def dehydrate_field(field: Any) -> str:
    """
    Field -> 'gameType~Singles;weather~Rain;...;p1~isSR=y;p2~...'
    '~' separa clave y valor de cada sección; ';' separa secciones.
    """
    if field is None:
        return ""
    sections = [
        ("gameType", dehydrate_value(getattr(field, "game_type", None))),
        ("weather", dehydrate_value(getattr(field, "weather", None))),
        ("weatherTurns", dehydrate_value(getattr(field, "weather_turns", None))),
        ("terrain", dehydrate_value(getattr(field, "terrain", None))),
        ("terrainTurns", dehydrate_value(getattr(field, "terrain_turns", None))),
    ]
    sides = getattr(field, "sides", None) or {}
    for key in sorted(sides):
        sections.append((key, dehydrate_player_side(sides[key])))
    return ";".join(f"{k}~{v}" for k, v in sections)


def dehydrate_pokemon(combatant: Any) -> str:
    """Subconjunto estable de un Combatant (identidad, spread y overrides visibles)."""
    if combatant is None or not getattr(combatant, "species_forme", None):
        return ""
    g = lambda name: getattr(combatant, name, None)  # noqa: E731
    sections = [
        ("id", dehydrate_value(g("calcdex_id"))),
        ("species", dehydrate_value(g("species_forme"))),
        ("level", dehydrate_value(g("level"))),
        ("gender", dehydrate_value(g("gender"))),
        ("tera", dehydrate_value(g("tera_type"))),
        ("ability", dehydrate_value(g("ability"))),
        ("dirtyAbility", dehydrate_value(g("dirty_ability"))),
        ("item", dehydrate_value(g("item"))),
        ("dirtyItem", dehydrate_value(g("dirty_item"))),
        ("nature", dehydrate_value(g("nature"))),
        ("status", dehydrate_value(g("status"))),
        ("toggled", dehydrate_boolean(g("ability_toggled"))),
        ("moves", dehydrate_array(g("moves"))),
        ("ivs", dehydrate_stats_table(g("ivs"))),
        ("evs", dehydrate_stats_table(g("evs"))),
        ("boosts", dehydrate_stats_table(g("boosts"))),
        ("dirtyBoosts", dehydrate_stats_table(g("dirty_boosts"))),
    ]
    return ";".join(f"{k}~{v}" for k, v in sections)
