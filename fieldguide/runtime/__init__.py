from __future__ import annotations

from typing import Protocol

from rich.console import Console
from rich.markup import escape

from fieldguide.config.schema import AppConfig
from fieldguide.models.enums import PruneTarget
from fieldguide.models.runtime import RuntimeResult
from fieldguide.models.usage import ImageInfo, StackInfo, UsageRecord
from fieldguide.runtime.docker_cli import DockerCli


class ContainerRuntime(Protocol):
    def disk_usage(self) -> RuntimeResult[list[UsageRecord]]: ...

    def images(self, dangling: bool = False) -> RuntimeResult[list[ImageInfo]]: ...

    def volumes(self) -> RuntimeResult[list[str]]: ...

    def running_mounts(self) -> RuntimeResult[list[str]]: ...

    def stacks(self) -> RuntimeResult[list[StackInfo]]: ...

    def prune(self, target: PruneTarget) -> RuntimeResult[str]: ...

    def compose_down(
        self,
        manifest: str,
        *,
        volumes: bool = False,
        remove_local_images: bool = False,
    ) -> RuntimeResult[None]: ...

    def compose_build(self, manifest: str) -> RuntimeResult[None]: ...

    def compose_up(self, manifest: str, *, remove_orphans: bool = False) -> RuntimeResult[None]: ...

    def compose_ps(self, manifest: str) -> RuntimeResult[None]: ...

    def compose_config(self, manifest: str) -> RuntimeResult[None]: ...


def create_runtime(config: AppConfig, console: Console) -> ContainerRuntime:
    """Return the runtime client described by *config*.

    With ``show_commands`` enabled every docker invocation is echoed to
    *console* before it runs.
    """

    def _echo(command: str) -> None:
        console.print(f"[dim]$ {escape(command)}[/dim]")

    return DockerCli(config.docker_binary, echo=_echo if config.show_commands else None)


__all__ = [
    "ContainerRuntime",
    "DockerCli",
    "create_runtime",
]
