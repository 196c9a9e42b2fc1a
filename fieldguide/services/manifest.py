from __future__ import annotations

from pathlib import Path

from result import Err, Ok, Result
from rich.console import Console
from rich.markup import escape

from fieldguide.models.enums import CommandStatus
from fieldguide.models.runtime import CommandOutcome
from fieldguide.runtime import ContainerRuntime


def check_manifest(path: str) -> Result[str, str]:
    """Return *path* unchanged if it names an existing file."""
    if Path(path).is_file():
        return Ok(path)
    return Err(f"{path} not found")


def print_missing_manifest(console: Console, message: str, prog: str) -> None:
    console.print(f"[red]Error:[/red] {escape(message)}", soft_wrap=True)
    console.print(f"Usage: {escape(prog)} \\[path/to/docker-compose.yml]", soft_wrap=True)


def validate_manifest(runtime: ContainerRuntime, console: Console, manifest: str, prog: str) -> CommandOutcome:
    checked = check_manifest(manifest)
    if isinstance(checked, Err):
        print_missing_manifest(console, checked.err_value, prog)
        return CommandOutcome(CommandStatus.PRECONDITION_FAILED)

    console.print(f"Compose file: {escape(manifest)}", soft_wrap=True)
    validated = runtime.compose_config(manifest)
    if isinstance(validated, Err):
        console.print(f"[red]Invalid manifest:[/red] {escape(validated.err_value.message)}", soft_wrap=True)
        return CommandOutcome(CommandStatus.FAILED, validated.err_value)

    console.print(f"[green]Manifest OK:[/green] {escape(manifest)}", soft_wrap=True)
    return CommandOutcome(CommandStatus.DONE)
