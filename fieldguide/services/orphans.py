from __future__ import annotations

from collections.abc import Iterable, Iterator


def normalize_names(names: Iterable[str]) -> Iterator[str]:
    """Strip surrounding whitespace and drop empty identifiers."""
    for raw in names:
        name = raw.strip()
        if name:
            yield name


def orphan_volumes(volumes: Iterable[str], mounted: Iterable[str]) -> list[str]:
    """Return the volumes that no running container mounts.

    Comparison is exact and case-sensitive; the runtime's listing order of
    *volumes* is preserved.
    """
    in_use = set(normalize_names(mounted))
    return [name for name in normalize_names(volumes) if name not in in_use]
