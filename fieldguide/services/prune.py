from __future__ import annotations

from collections.abc import Sequence

from result import Err
from rich.console import Console
from rich.markup import escape

from fieldguide.models.enums import CommandStatus, PruneMode, PruneTarget
from fieldguide.models.runtime import CommandOutcome, RuntimeCallError
from fieldguide.runtime import ContainerRuntime
from fieldguide.services.prompt import Reader, confirm
from fieldguide.services.summary import section, usage_table

AGGRESSIVE_FLAG = "--aggressive"

_SAFE_PLAN: tuple[PruneTarget, ...] = (
    PruneTarget.CONTAINERS,
    PruneTarget.NETWORKS,
    PruneTarget.DANGLING_IMAGES,
    PruneTarget.BUILD_CACHE,
)

# Containers go first so resources held only by stopped containers count as unused.
PRUNE_PLANS: dict[PruneMode, tuple[PruneTarget, ...]] = {
    PruneMode.SAFE: _SAFE_PLAN,
    PruneMode.AGGRESSIVE: (
        *_SAFE_PLAN,
        PruneTarget.UNUSED_IMAGES,
        PruneTarget.ALL_BUILD_CACHE,
        PruneTarget.VOLUMES,
    ),
}


def prune_mode_from_args(args: Sequence[str]) -> PruneMode:
    """Aggressive only when the first argument is exactly ``--aggressive``."""
    if args and args[0] == AGGRESSIVE_FLAG:
        return PruneMode.AGGRESSIVE
    return PruneMode.SAFE


def _print_usage(runtime: ContainerRuntime, console: Console, title: str) -> RuntimeCallError | None:
    section(console, title)
    usage = runtime.disk_usage()
    if isinstance(usage, Err):
        console.print(f"[red]{escape(usage.err_value.message)}[/red]")
        return usage.err_value
    console.print(usage_table(usage.ok_value))
    return None


def run_prune(
    runtime: ContainerRuntime,
    console: Console,
    mode: PruneMode,
    reader: Reader | None = None,
) -> CommandOutcome:
    console.rule("[bold]Docker Cleanup[/bold]")

    error = _print_usage(runtime, console, "Current disk usage")
    if error is not None:
        return CommandOutcome(CommandStatus.FAILED, error)

    console.print()
    if mode is PruneMode.AGGRESSIVE:
        console.print("Mode: [bold red]AGGRESSIVE[/bold red] (all unused images + all build cache + unused volumes)")
        console.print()
        console.print("[bold red]WARNING:[/bold red] This will also remove:")
        console.print("  - ALL unused images (not just dangling)")
        console.print("  - ALL build cache (not just dangling)")
        console.print("  - ALL unused volumes (data loss risk if containers are stopped)")
        console.print()
        question = "Are you sure?"
    else:
        console.print(
            "Mode: [bold green]SAFE[/bold green] (stopped containers + unused networks + dangling images + build cache)"
        )
        console.print()
        question = "Proceed?"

    if not confirm(console, question, reader):
        console.print("Aborted.")
        return CommandOutcome(CommandStatus.ABORTED)

    failures: list[RuntimeCallError] = []
    for target in PRUNE_PLANS[mode]:
        section(console, f"Pruning {target.label.lower()}")
        pruned = runtime.prune(target)
        if isinstance(pruned, Err):
            failures.append(pruned.err_value)
            console.print(f"[red]{escape(pruned.err_value.message)}[/red]", soft_wrap=True)
            continue
        output = pruned.ok_value.strip()
        if output:
            console.print(escape(output), soft_wrap=True)

    error = _print_usage(runtime, console, "Disk usage after cleanup")
    if failures:
        return CommandOutcome(CommandStatus.FAILED, failures[0])
    if error is not None:
        return CommandOutcome(CommandStatus.FAILED, error)
    return CommandOutcome(CommandStatus.DONE)
