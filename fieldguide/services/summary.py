from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from fieldguide.models.usage import DiskReport, ImageInfo, StackInfo, UsageRecord
from fieldguide.services.formatting import format_bytes


def section(console: Console, title: str) -> None:
    console.print()
    console.rule(f"[bold]{escape(title)}[/bold]", align="left")


def not_available(console: Console, what: str) -> None:
    console.print(f"[dim]({escape(what)} not available)[/dim]")


def usage_table(records: list[UsageRecord]) -> Table:
    table = Table(header_style="bold cyan")
    table.add_column("Type")
    table.add_column("Total", justify="right")
    table.add_column("Active", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Reclaimable", justify="right")
    for record in records:
        table.add_row(
            record.category.label,
            str(record.total_count),
            str(record.active),
            escape(record.size),
            escape(record.reclaimable),
        )
    return table


def _images_table(images: list[ImageInfo]) -> Table:
    table = Table(header_style="bold yellow")
    table.add_column("Image")
    table.add_column("Size", justify="right")
    table.add_column("ID")
    for image in images:
        table.add_row(escape(image.reference), escape(image.size), escape(image.image_id))
    return table


def _stacks_table(stacks: list[StackInfo]) -> Table:
    table = Table(header_style="bold magenta")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Config Files")
    for stack in stacks:
        table.add_row(escape(stack.name), escape(stack.status), escape(stack.config_files))
    return table


def _reclaimable_table(records: list[UsageRecord]) -> Table:
    table = Table(header_style="bold green")
    table.add_column("Type")
    table.add_column("Reclaimable", justify="right")
    for record in records:
        table.add_row(record.category.label, escape(record.reclaimable))
    return table


def _render_dangling(console: Console, dangling: list[ImageInfo] | None) -> None:
    section(console, "Dangling Images (no tag, safe to remove)")
    if dangling is None:
        not_available(console, "dangling image listing")
        return
    console.print(f"Count: {len(dangling)}")
    for image in dangling:
        console.print(f"  {escape(image.image_id)}  {escape(image.size)}", soft_wrap=True)
    if dangling:
        console.print("Remove with: docker image prune")


def _render_orphans(console: Console, orphans: list[str] | None) -> None:
    section(console, "Volumes Not Attached to Running Containers")
    if orphans is None:
        not_available(console, "volume listing")
        return
    if not orphans:
        console.print("  (none)")
        return
    for name in orphans:
        console.print(f"  {escape(name)}", soft_wrap=True)
    console.print()
    console.print(f"  {len(orphans)} volume(s) not attached to running containers.")
    console.print("  [yellow]Review carefully: stopped containers may still need these.[/yellow]")
    console.print("  Remove with: docker volume prune")


def render_report(console: Console, report: DiskReport, top_n: int) -> None:
    console.print(
        Panel(
            f"Total Size: [bold]{format_bytes(report.total_bytes)}[/bold]\n"
            f"Reclaimable: [bold]{format_bytes(report.reclaimable_bytes)}[/bold]",
            title="Docker Disk Usage Report",
            border_style="blue",
        )
    )

    section(console, "Summary")
    console.print(usage_table(report.usage))

    section(console, f"Top {top_n} Largest Images")
    if report.top_images is None:
        not_available(console, "image listing")
    elif not report.top_images:
        console.print("  (none)")
    else:
        console.print(_images_table(report.top_images))

    _render_dangling(console, report.dangling_images)
    _render_orphans(console, report.orphan_volumes)

    section(console, "Compose Projects")
    if report.stacks is None:
        not_available(console, "docker compose ls")
    elif not report.stacks:
        console.print("  (none)")
    else:
        console.print(_stacks_table(report.stacks))

    section(console, "Reclaimable Space")
    console.print(_reclaimable_table(report.usage))
    console.print(f"Total reclaimable: [bold]{format_bytes(report.reclaimable_bytes)}[/bold]")
