# calcdex/utils/species_normalize.py
from __future__ import annotations

# especie -> (forma si hembra, forma por defecto)
_GENDERED_FORMES = {
    "basculegion": ("Basculegion-F", "Basculegion"),
    "indeedee": ("Indeedee-F", "Indeedee"),
    "meowstic": ("Meowstic-F", "Meowstic"),
    "oinkologne": ("Oinkologne-F", "Oinkologne"),
}

# habilidad -> forma de Lycanroc
_LYCANROC_BY_ABILITY = {
    "tough claws": "Lycanroc-Dusk",
    "no guard": "Lycanroc-Midnight",
}


def normalize_species_name(name: str | None, ability: str | None = None, gender: str | None = None) -> str | None:
    """
    Normaliza cuando el set no trae la forma explícita.
    - Lycanroc: por habilidad (Tough Claws → Dusk, No Guard → Midnight, otro → base)
    - Basculegion/Indeedee/Meowstic/Oinkologne: por género (F → forma hembra)
    """
    if not name:
        return name
    n = name.strip()
    key = n.lower()
    if key == "lycanroc":
        a = (ability or "").strip().lower()
        return _LYCANROC_BY_ABILITY.get(a, "Lycanroc")
    if key in _GENDERED_FORMES:
        g = (gender or "").strip().lower()
        female, default = _GENDERED_FORMES[key]
        return female if g in ("f", "female", "♀") else default
    return n
