import re

_RE_NON_ID = re.compile(r"[^a-z0-9]")


def format_id(value) -> str:
    """'Sword of Ruin' -> 'swordofruin'. None -> ''."""
    if value is None or value is False:
        return ""
    return _RE_NON_ID.sub("", str(value).lower())
