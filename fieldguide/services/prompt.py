from __future__ import annotations

from collections.abc import Callable

from rich.console import Console

Reader = Callable[[str], str]

AFFIRMATIVE: frozenset[str] = frozenset({"y", "Y"})


def confirm(console: Console, question: str, reader: Reader | None = None) -> bool:
    """Ask a yes/no question; only an exact ``y`` or ``Y`` counts as yes.

    End of input is a decline.
    """
    read = reader or console.input
    try:
        answer = read(f"{question} (y/N): ")
    except EOFError:
        console.print()
        return False
    return answer in AFFIRMATIVE
