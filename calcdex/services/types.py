ALL_TYPES = [
    "Normal","Fire","Water","Electric","Grass","Ice",
    "Fighting","Poison","Ground","Flying","Psychic","Bug",
    "Rock","Ghost","Dragon","Dark","Steel","Fairy",
]

# Hidden Power nunca es Normal ni Fairy
HIDDEN_POWER_TYPES = [t for t in ALL_TYPES if t not in ("Normal", "Fairy")]


def hidden_power_moves() -> list[str]:
    return sorted(f"Hidden Power {t}" for t in HIDDEN_POWER_TYPES)
