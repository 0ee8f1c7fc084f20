from __future__ import annotations

from .ids import format_id

# habilidades cuyo efecto se puede encender/apagar a mano
TOGGLE_ABILITIES = [
    "Beads of Ruin",
    "Flash Fire",
    "Libero",
    "Minus",
    "Multiscale",
    "Plus",
    "Protean",
    "Protosynthesis",
    "Quark Drive",
    "Shadow Shield",
    "Slow Start",
    "Stakeout",
    "Sword of Ruin",
    "Tablets of Ruin",
    "Unburden",
    "Vessel of Ruin",
]

# habilidad neutra que el motor no aplica
NEUTRAL_ABILITY = "Pressure"

FIRST_HIT_ABILITIES = {"multiscale", "shadowshield"}
SELF_TYPE_CHANGE_ABILITIES = {"protean", "libero"}
SWITCH_IN_BOOST_ABILITIES = {"intrepidsword", "download"}


def is_ruin(ability_id: str | None) -> bool:
    return bool(ability_id) and ability_id.endswith("ofruin")


def is_toggleable(ability: str | None, doubles: bool) -> bool:
    """Las Ruin solo se alternan en dobles."""
    aid = format_id(ability)
    if not aid:
        return False
    if is_ruin(aid) and not doubles:
        return False
    return aid in {format_id(a) for a in TOGGLE_ABILITIES}
