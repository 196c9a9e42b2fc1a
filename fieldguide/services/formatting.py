from __future__ import annotations

import re

# The docker CLI prints sizes in decimal units (go-units HumanSize).
_UNITS: tuple[str, ...] = ("B", "kB", "MB", "GB", "TB", "PB")

_MULTIPLIERS: dict[str, int] = {
    "": 1,
    "b": 1,
    "kb": 1000,
    "mb": 1000**2,
    "gb": 1000**3,
    "tb": 1000**4,
    "pb": 1000**5,
    "kib": 1024,
    "mib": 1024**2,
    "gib": 1024**3,
    "tib": 1024**4,
    "pib": 1024**5,
}

_SIZE_RE = re.compile(r"^\s*([0-9]+(?:\.[0-9]+)?)\s*([A-Za-z]*)")


def format_bytes(value: int) -> str:
    if value < 1000:
        return f"{value} B"
    size = float(value)
    for unit in _UNITS[1:]:
        size /= 1000
        if size < 1000 or unit == _UNITS[-1]:
            return f"{size:.1f} {unit}"
    return f"{value} B"


def parse_size(text: str) -> int:
    """Parse a docker size string (``"1.2GB"``, ``"72.8kB (5%)"``) into bytes.

    Unrecognised input parses as 0.
    """
    match = _SIZE_RE.match(text)
    if match is None:
        return 0
    multiplier = _MULTIPLIERS.get(match.group(2).lower())
    if multiplier is None:
        return 0
    return round(float(match.group(1)) * multiplier)
