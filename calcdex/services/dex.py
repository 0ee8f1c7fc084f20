"""Colaborador "dex": base stats, tipos, learnsets y nombres de movimientos.

- StaticDex: datos en memoria (tests, datos precargados).
- PokeApiDex: PokéAPI vía requests, cacheado en JSON local.
"""
from __future__ import annotations
import json
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

import requests

from ..utils.generation import detect_gen_from_format
from ..utils.species_normalize import normalize_species_name

log = logging.getLogger(__name__)

POKEAPI_ROOT = "https://pokeapi.co/api/v2/"
DEFAULT_CACHE_DIR = os.environ.get(
    "CALCDEX_CACHE_DIR",
    os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "data")),
)

_STATS_MAP = {
    "hp": "hp", "attack": "atk", "defense": "def",
    "special-attack": "spa", "special-defense": "spd", "speed": "spe",
}

SPECIAL_CASES = {
    ("indeedee", "F"): "indeedee-female",
    ("indeedee", "M"): "indeedee-male",
    ("basculegion", "F"): "basculegion-female",
    ("basculegion", "M"): "basculegion-male",
}

NAME_ONLY_CASES = {
    "tauros-paldea-aqua": "tauros-paldea-aqua-breed",
    "tauros-paldea-blaze": "tauros-paldea-blaze-breed",
    "tauros-paldea-combat": "tauros-paldea-combat-breed",
    "oinkologne-f": "oinkologne-female",
    "oinkologne-m": "oinkologne-male",
    "maushold-four": "maushold-family-of-four",
    "maushold-three": "maushold-family-of-three",
    "basculegion-f": "basculegion-female",
    "basculegion-m": "basculegion-male",
    "lycanroc": "lycanroc-midday",
    "basculegion": "basculegion-male",
}

# PokéAPI agrupa learnsets por version-group; gen -> version-groups
VERSION_GROUPS = {
    1: {"red-blue", "yellow"},
    2: {"gold-silver", "crystal"},
    3: {"ruby-sapphire", "emerald", "firered-leafgreen"},
    4: {"diamond-pearl", "platinum", "heartgold-soulsilver"},
    5: {"black-white", "black-2-white-2"},
    6: {"x-y", "omega-ruby-alpha-sapphire"},
    7: {"sun-moon", "ultra-sun-ultra-moon", "lets-go-pikachu-lets-go-eevee"},
    8: {"sword-shield", "brilliant-diamond-and-shining-pearl", "legends-arceus"},
    9: {"scarlet-violet"},
}


@dataclass(frozen=True)
class SpeciesInfo:
    name: str
    base_stats: Dict[str, int]
    types: List[str] = field(default_factory=list)


def ascii_slug(s: str) -> str:
    s = s.strip().lower()
    s = s.replace("♀", "-f").replace("♂", "-m")
    s = s.replace(".", "").replace("'", "").replace("’", "").replace(":", "").replace(" ", "-")
    s = (s.replace("é", "e").replace("á", "a").replace("í", "i")
          .replace("ó", "o").replace("ú", "u"))
    s = re.sub(r"[^a-z0-9\-]", "", s)
    s = re.sub(r"-+", "-", s)
    return s


def showdown_to_pokeapi_slug(name: str, gender: Optional[str] = None) -> str:
    slug = ascii_slug(name)
    key = (slug, gender if gender in ("M", "F") else None)
    if key in SPECIAL_CASES:
        return SPECIAL_CASES[key]
    return NAME_ONLY_CASES.get(slug, slug)


def move_display_name(slug: str) -> str:
    """'high-jump-kick' -> 'High Jump Kick' (mantiene 'U-turn', 'X-Scissor'...)."""
    special = {"u-turn": "U-turn", "x-scissor": "X-Scissor", "double-edge": "Double-Edge",
               "will-o-wisp": "Will-O-Wisp", "v-create": "V-create", "power-up-punch": "Power-Up Punch"}
    if slug in special:
        return special[slug]
    return " ".join(p.capitalize() for p in slug.split("-") if p)


class StaticDex:
    """Dex en memoria: {forme: {'baseStats': {...}, 'types': [...], 'learnset': [...]}}."""

    def __init__(self, species: Mapping[str, Mapping] | None = None, moves: Iterable[str] | None = None):
        self._species = {k: dict(v) for k, v in (species or {}).items()}
        self._moves = sorted(set(moves or []))

    def species(self, forme: Optional[str]) -> Optional[SpeciesInfo]:
        if not forme:
            return None
        node = self._species.get(forme)
        if node is None:
            node = self._species.get(normalize_species_name(forme))
        if not node or not node.get("baseStats"):
            return None
        return SpeciesInfo(name=forme, base_stats=dict(node["baseStats"]), types=list(node.get("types") or []))

    def learnset(self, format: Optional[str], forme: Optional[str]) -> List[str]:
        node = self._species.get(forme or "") or {}
        return list(node.get("learnset") or [])

    def moves(self, gen: Optional[int]) -> List[str]:
        return list(self._moves)


class PokeApiDex:
    """Dex respaldado por PokéAPI. Cachea cada respuesta en un JSON bajo cache_dir."""

    def __init__(self, cache_dir: str | None = None, timeout: float = 15):
        self.cache_dir = cache_dir or DEFAULT_CACHE_DIR
        self.timeout = timeout

    # ---------- cache JSON ----------
    def _cache_path(self, name: str) -> str:
        return os.path.join(self.cache_dir, name)

    def _load(self, name: str) -> dict:
        path = self._cache_path(name)
        if not os.path.exists(path):
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f) or {}
        except (OSError, ValueError):
            log.warning("Cache corrupto en %s, se ignora", path)
            return {}

    def _store(self, name: str, data: dict) -> None:
        os.makedirs(self.cache_dir, exist_ok=True)
        with open(self._cache_path(name), "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def _get(self, path: str) -> Optional[dict]:
        url = POKEAPI_ROOT + path
        try:
            r = requests.get(url, timeout=self.timeout)
            r.raise_for_status()
            return r.json()
        except requests.RequestException as e:
            log.warning("PokéAPI falló para %s: %s", url, e)
        except ValueError:
            log.warning("Respuesta no-JSON de PokéAPI para %s", url)
        return None

    def _pokemon(self, forme: str) -> Optional[dict]:
        slug = showdown_to_pokeapi_slug(normalize_species_name(forme))
        return self._get("pokemon/" + slug)

    # ---------- API ----------
    def species(self, forme: Optional[str]) -> Optional[SpeciesInfo]:
        if not forme:
            return None
        cache = self._load("species_cache.json")
        node = cache.get(forme)
        if isinstance(node, dict) and len(node.get("baseStats") or {}) == 6:
            return SpeciesInfo(name=forme, base_stats=node["baseStats"], types=node.get("types") or [])

        data = self._pokemon(forme)
        if not data:
            return None
        try:
            stats = {_STATS_MAP[s["stat"]["name"]]: int(s["base_stat"]) for s in data["stats"]}
            types = [t["type"]["name"].capitalize() for t in data.get("types", [])]
        except (KeyError, TypeError, ValueError):
            log.warning("Payload inesperado de PokéAPI para %s", forme)
            return None

        cache[forme] = {"baseStats": stats, "types": types}
        self._store("species_cache.json", cache)
        return SpeciesInfo(name=forme, base_stats=stats, types=types)

    def learnset(self, format: Optional[str], forme: Optional[str]) -> List[str]:
        if not forme:
            return []
        gen = detect_gen_from_format(format)
        key = f"{forme}|{gen or ''}"
        cache = self._load("learnset_cache.json")
        if isinstance(cache.get(key), list):
            return list(cache[key])

        data = self._pokemon(forme)
        if not data:
            return []
        groups = set()
        for g in range(1, (gen or max(VERSION_GROUPS)) + 1):
            groups |= VERSION_GROUPS.get(g, set())
        moves = []
        for node in data.get("moves", []):
            try:
                slug = node["move"]["name"]
                vgs = {d["version_group"]["name"] for d in node.get("version_group_details", [])}
            except (KeyError, TypeError):
                continue
            if gen is None or vgs & groups:
                moves.append(move_display_name(slug))
        moves = sorted(set(moves))
        cache[key] = moves
        self._store("learnset_cache.json", cache)
        return moves

    def moves(self, gen: Optional[int]) -> List[str]:
        cache = self._load("moves_cache.json")
        if isinstance(cache.get("all"), list):
            return list(cache["all"])
        data = self._get("move?limit=2000")
        if not data:
            return []
        names = sorted(move_display_name(r["name"]) for r in data.get("results", []) if r.get("name"))
        cache["all"] = names
        self._store("moves_cache.json", cache)
        return names
