from typing import Dict

NATURE_EFFECTS = {
    "Adamant": ("atk", "spa"),
    "Lonely": ("atk", "def"),
    "Brave": ("atk", "spe"),
    "Naughty": ("atk", "spd"),
    "Impish": ("def", "spa"),
    "Bold": ("def", "atk"),
    "Relaxed": ("def", "spe"),
    "Lax": ("def", "spd"),
    "Modest": ("spa", "atk"),
    "Mild": ("spa", "def"),
    "Quiet": ("spa", "spe"),
    "Rash": ("spa", "spd"),
    "Calm": ("spd", "atk"),
    "Gentle": ("spd", "def"),
    "Sassy": ("spd", "spe"),
    "Careful": ("spd", "spa"),
    "Jolly": ("spe", "spa"),
    "Hasty": ("spe", "def"),
    "Naive": ("spe", "spd"),
    "Timid": ("spe", "atk"),
    "Serious": (None, None),
    "Bashful": (None, None),
    "Docile": (None, None),
    "Hardy": (None, None),
    "Quirky": (None, None),
}


def is_nature(name: str | None) -> bool:
    return (name or "").strip().capitalize() in NATURE_EFFECTS


def nature_multipliers(nature: str | None) -> Dict[str, float]:
    mults = {k: 1.0 for k in ["atk", "def", "spa", "spd", "spe"]}
    if not nature:
        return mults
    up, down = NATURE_EFFECTS.get(nature.strip().capitalize(), (None, None))
    if up:
        mults[up] = 1.1
    if down:
        mults[down] = 0.9
    return mults
