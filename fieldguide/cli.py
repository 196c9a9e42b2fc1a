from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from result import Err
from rich.console import Console
from rich.markup import escape

from fieldguide.config.defaults import default_config
from fieldguide.config.loader import load_config, sample_config_json
from fieldguide.config.schema import AppConfig, clamp_field
from fieldguide.runtime import create_runtime
from fieldguide.services.manifest import validate_manifest
from fieldguide.services.prune import prune_mode_from_args, run_prune
from fieldguide.services.report import build_report
from fieldguide.services.reset import hard_reset, safe_reset
from fieldguide.services.summary import render_report

console = Console()

app = typer.Typer(
    name="fieldguide",
    help="Docker disk reporting, cleanup and Compose stack resets.",
    no_args_is_help=True,
    add_completion=False,
)

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to a JSON config file.", dir_okay=False),
]
ManifestArgument = Annotated[
    Optional[str],
    typer.Argument(help="Compose file (defaults to composeFile from the config)."),
]

# Unknown tokens must reach prune_mode_from_args instead of failing parsing.
_PASSTHROUGH = {"allow_extra_args": True, "ignore_unknown_options": True}


def _load(path: Path | None) -> AppConfig:
    loaded = load_config(path)
    if isinstance(loaded, Err):
        console.print(f"[yellow]Warning:[/yellow] {escape(loaded.err_value)} Using defaults.")
        return default_config()
    return loaded.ok_value


def report(
    config: ConfigOption = None,
    top: Annotated[Optional[int], typer.Option("--top", "-n", help="Number of largest images to list.")] = None,
) -> None:
    """Show what Docker is using on disk."""
    cfg = _load(config)
    top_n = clamp_field(top, "top_images") if top is not None else cfg.top_images
    built = build_report(create_runtime(cfg, console), top_n)
    if isinstance(built, Err):
        console.print(f"[red]Error:[/red] {escape(built.err_value.message)}", soft_wrap=True)
        raise typer.Exit(built.err_value.exit_code)
    render_report(console, built.ok_value, top_n)


def prune(ctx: typer.Context, config: ConfigOption = None) -> None:
    """Remove unused Docker resources after confirmation. Pass --aggressive to include unused images and volumes."""
    cfg = _load(config)
    outcome = run_prune(create_runtime(cfg, console), console, prune_mode_from_args(ctx.args))
    raise typer.Exit(outcome.exit_code)


def safe_reset_command(ctx: typer.Context, manifest: ManifestArgument = None, config: ConfigOption = None) -> None:
    """Restart a Compose stack without losing persistent data."""
    cfg = _load(config)
    result = safe_reset(create_runtime(cfg, console), console, manifest or cfg.compose_file, ctx.command_path)
    raise typer.Exit(result.exit_code)


def hard_reset_command(ctx: typer.Context, manifest: ManifestArgument = None, config: ConfigOption = None) -> None:
    """Tear down a Compose stack with its volumes and local images, then rebuild it."""
    cfg = _load(config)
    result = hard_reset(create_runtime(cfg, console), console, manifest or cfg.compose_file, ctx.command_path)
    raise typer.Exit(result.exit_code)


def check(ctx: typer.Context, manifest: ManifestArgument = None, config: ConfigOption = None) -> None:
    """Validate a Compose file with the runtime."""
    cfg = _load(config)
    outcome = validate_manifest(create_runtime(cfg, console), console, manifest or cfg.compose_file, ctx.command_path)
    raise typer.Exit(outcome.exit_code)


def sample_config() -> None:
    """Print the default configuration as JSON."""
    console.print_json(sample_config_json())


app.command("report")(report)
app.command("prune", context_settings=_PASSTHROUGH)(prune)
app.command("safe-reset")(safe_reset_command)
app.command("hard-reset")(hard_reset_command)
app.command("check")(check)
app.command("sample-config")(sample_config)


def _single(command: Callable[..., None], **kwargs: Any) -> typer.Typer:
    single = typer.Typer(add_completion=False)
    single.command(**kwargs)(command)
    return single


disk_report_app = _single(report)
prune_app = _single(prune, context_settings=_PASSTHROUGH)
safe_reset_app = _single(safe_reset_command)
hard_reset_app = _single(hard_reset_command)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
