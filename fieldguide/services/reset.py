# Stack reset procedures.
#
# Both resets walk the same stage machine:
#
#   NOT_RUNNING -> VALIDATED -> [CONFIRMED | ABORTED] -> TEARING_DOWN
#     -> (hard only: VOLUMES_DELETED -> IMAGES_DELETED -> BUILDING)
#     -> STARTING -> RUNNING
#
# Any failed runtime call moves to FAILED and stops.  ABORTED and FAILED are
# terminal.  Calls are issued one at a time and each blocks until the runtime
# returns, so teardown (volume deletion included) has finished before the
# build/up calls are made.

from __future__ import annotations

from dataclasses import dataclass, field

from result import Err
from rich.console import Console
from rich.markup import escape

from fieldguide.models.enums import CommandStatus, ResetStage
from fieldguide.models.runtime import CommandOutcome, RuntimeCallError, RuntimeResult
from fieldguide.runtime import ContainerRuntime
from fieldguide.services.manifest import check_manifest, print_missing_manifest
from fieldguide.services.prompt import Reader, confirm
from fieldguide.services.summary import section

_TRANSITIONS: dict[ResetStage, frozenset[ResetStage]] = {
    ResetStage.NOT_RUNNING: frozenset({ResetStage.VALIDATED, ResetStage.FAILED}),
    ResetStage.VALIDATED: frozenset({ResetStage.CONFIRMED, ResetStage.ABORTED, ResetStage.TEARING_DOWN}),
    ResetStage.CONFIRMED: frozenset({ResetStage.TEARING_DOWN}),
    ResetStage.TEARING_DOWN: frozenset({ResetStage.VOLUMES_DELETED, ResetStage.STARTING, ResetStage.FAILED}),
    ResetStage.VOLUMES_DELETED: frozenset({ResetStage.IMAGES_DELETED}),
    ResetStage.IMAGES_DELETED: frozenset({ResetStage.BUILDING}),
    ResetStage.BUILDING: frozenset({ResetStage.STARTING, ResetStage.FAILED}),
    ResetStage.STARTING: frozenset({ResetStage.RUNNING, ResetStage.FAILED}),
    ResetStage.RUNNING: frozenset({ResetStage.FAILED}),
    ResetStage.ABORTED: frozenset(),
    ResetStage.FAILED: frozenset(),
}


@dataclass(slots=True)
class ResetTracker:
    """Records the stages a reset passes through and rejects illegal moves."""

    history: list[ResetStage] = field(default_factory=lambda: [ResetStage.NOT_RUNNING])

    @property
    def stage(self) -> ResetStage:
        return self.history[-1]

    def advance(self, stage: ResetStage) -> None:
        if stage not in _TRANSITIONS[self.stage]:
            msg = f"Illegal reset transition: {self.stage.value} -> {stage.value}"
            raise ValueError(msg)
        self.history.append(stage)


@dataclass(slots=True, frozen=True)
class ResetOutcome:
    outcome: CommandOutcome
    stages: tuple[ResetStage, ...]

    @property
    def exit_code(self) -> int:
        return self.outcome.exit_code


def _finish(tracker: ResetTracker, status: CommandStatus, error: RuntimeCallError | None = None) -> ResetOutcome:
    return ResetOutcome(CommandOutcome(status, error), tuple(tracker.history))


def _fail(console: Console, tracker: ResetTracker, error: RuntimeCallError) -> ResetOutcome:
    tracker.advance(ResetStage.FAILED)
    console.print(f"[red]Error:[/red] {escape(error.message)}", soft_wrap=True)
    return _finish(tracker, CommandStatus.FAILED, error)


def _validate(console: Console, tracker: ResetTracker, manifest: str, prog: str) -> bool:
    checked = check_manifest(manifest)
    if isinstance(checked, Err):
        tracker.advance(ResetStage.FAILED)
        print_missing_manifest(console, checked.err_value, prog)
        return False
    tracker.advance(ResetStage.VALIDATED)
    return True


def _start_and_show(
    runtime: ContainerRuntime,
    console: Console,
    tracker: ResetTracker,
    manifest: str,
    started: RuntimeResult[None],
) -> ResetOutcome:
    if isinstance(started, Err):
        return _fail(console, tracker, started.err_value)
    tracker.advance(ResetStage.RUNNING)

    section(console, "Current status")
    status = runtime.compose_ps(manifest)
    if isinstance(status, Err):
        return _fail(console, tracker, status.err_value)
    return _finish(tracker, CommandStatus.DONE)


def safe_reset(runtime: ContainerRuntime, console: Console, manifest: str, prog: str) -> ResetOutcome:
    """Recreate a stack's containers while keeping its volumes and images."""
    tracker = ResetTracker()
    if not _validate(console, tracker, manifest, prog):
        return _finish(tracker, CommandStatus.PRECONDITION_FAILED)

    console.rule("[bold]Safe Reset[/bold]")
    console.print(f"Compose file: {escape(manifest)}", soft_wrap=True)

    section(console, "Stopping containers and removing orphans")
    tracker.advance(ResetStage.TEARING_DOWN)
    down = runtime.compose_down(manifest)
    if isinstance(down, Err):
        return _fail(console, tracker, down.err_value)

    section(console, "Starting fresh containers")
    tracker.advance(ResetStage.STARTING)
    started = runtime.compose_up(manifest, remove_orphans=True)
    return _start_and_show(runtime, console, tracker, manifest, started)


def hard_reset(
    runtime: ContainerRuntime,
    console: Console,
    manifest: str,
    prog: str,
    reader: Reader | None = None,
) -> ResetOutcome:
    """Destroy a stack's containers, volumes and local images, then rebuild it."""
    tracker = ResetTracker()
    if not _validate(console, tracker, manifest, prog):
        return _finish(tracker, CommandStatus.PRECONDITION_FAILED)

    console.rule("[bold]Hard Reset[/bold]")
    console.print(f"Compose file: {escape(manifest)}", soft_wrap=True)
    console.print()
    console.print("[bold red]WARNING:[/bold red] This will delete all project volumes and rebuild images.")
    console.print("         Any data in named volumes will be permanently lost.")
    console.print()
    if not confirm(console, "Are you sure?", reader):
        tracker.advance(ResetStage.ABORTED)
        console.print("Aborted.")
        return _finish(tracker, CommandStatus.ABORTED)
    tracker.advance(ResetStage.CONFIRMED)

    section(console, "Tearing down (containers + orphans + volumes + local images)")
    tracker.advance(ResetStage.TEARING_DOWN)
    down = runtime.compose_down(manifest, volumes=True, remove_local_images=True)
    if isinstance(down, Err):
        return _fail(console, tracker, down.err_value)
    tracker.advance(ResetStage.VOLUMES_DELETED)
    tracker.advance(ResetStage.IMAGES_DELETED)

    section(console, "Rebuilding images")
    tracker.advance(ResetStage.BUILDING)
    built = runtime.compose_build(manifest)
    if isinstance(built, Err):
        return _fail(console, tracker, built.err_value)

    section(console, "Starting fresh containers")
    tracker.advance(ResetStage.STARTING)
    started = runtime.compose_up(manifest)
    return _start_and_show(runtime, console, tracker, manifest, started)
