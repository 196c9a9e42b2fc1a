# Docker CLI backed runtime client.
#
# Queries capture stdout and parse the CLI's JSON output (`--format {{json .}}`
# emits one object per line; `compose ls --format json` and `inspect` emit a
# single array).  Stack transitions stream straight to the operator's
# terminal so build progress and the runtime's own error text are shown
# unmodified; only the exit status is inspected.
#
# Every call blocks until the docker process exits.  No timeouts are imposed.

from __future__ import annotations

import json
import shlex
import subprocess
from collections.abc import Callable, Sequence
from typing import Any

from result import Err, Ok

from fieldguide.models.enums import PruneTarget, ResourceCategory
from fieldguide.models.runtime import RuntimeCallError, RuntimeErrorCode, RuntimeResult
from fieldguide.models.usage import ImageInfo, StackInfo, UsageRecord
from fieldguide.services.formatting import parse_size

Runner = Callable[..., subprocess.CompletedProcess[str]]
Echo = Callable[[str], None]

_JSON_FORMAT = "{{json .}}"

_PRUNE_ARGS: dict[PruneTarget, tuple[str, ...]] = {
    PruneTarget.CONTAINERS: ("container", "prune", "--force"),
    PruneTarget.NETWORKS: ("network", "prune", "--force"),
    PruneTarget.DANGLING_IMAGES: ("image", "prune", "--force"),
    PruneTarget.BUILD_CACHE: ("builder", "prune", "--force"),
    PruneTarget.UNUSED_IMAGES: ("image", "prune", "--all", "--force"),
    PruneTarget.ALL_BUILD_CACHE: ("builder", "prune", "--all", "--force"),
    # --all includes named volumes; without it only anonymous ones go.
    PruneTarget.VOLUMES: ("volume", "prune", "--all", "--force"),
}


def _parse_error(command: Sequence[str], message: str) -> RuntimeCallError:
    return RuntimeCallError(code=RuntimeErrorCode.PARSE_ERROR, command=tuple(command), message=message)


def _json_lines(text: str) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        row = json.loads(line)
        if not isinstance(row, dict):
            msg = f"expected a JSON object, got {type(row).__name__}"
            raise ValueError(msg)
        rows.append(row)
    return rows


def _json_array(text: str) -> list[dict[str, Any]]:
    stripped = text.strip()
    if not stripped:
        return []
    payload = json.loads(stripped)
    if isinstance(payload, dict):
        return [payload]
    if not isinstance(payload, list):
        msg = f"expected a JSON array, got {type(payload).__name__}"
        raise ValueError(msg)
    return [row for row in payload if isinstance(row, dict)]


def _usage_record(row: dict[str, Any]) -> UsageRecord:
    size = str(row.get("Size", "0B"))
    reclaimable = str(row.get("Reclaimable", "0B"))
    return UsageRecord(
        category=ResourceCategory.from_label(str(row["Type"])),
        total_count=int(row.get("TotalCount", 0)),
        active=int(row.get("Active", 0)),
        size=size,
        size_bytes=parse_size(size),
        reclaimable=reclaimable,
        reclaimable_bytes=parse_size(reclaimable),
    )


def _image_info(row: dict[str, Any]) -> ImageInfo:
    size = str(row.get("Size", "0B"))
    return ImageInfo(
        repository=str(row.get("Repository", "<none>")),
        tag=str(row.get("Tag", "<none>")),
        image_id=str(row.get("ID", "")),
        size=size,
        size_bytes=parse_size(size),
    )


def _stack_info(row: dict[str, Any]) -> StackInfo:
    return StackInfo(
        name=str(row.get("Name", "")),
        status=str(row.get("Status", "")),
        config_files=str(row.get("ConfigFiles", "")),
    )


class DockerCli:
    """``ContainerRuntime`` implementation driving the ``docker`` executable."""

    def __init__(self, binary: str = "docker", *, echo: Echo | None = None, runner: Runner = subprocess.run) -> None:
        self._binary = binary
        self._echo = echo
        self._runner = runner

    def _command(self, args: Sequence[str]) -> list[str]:
        command = [self._binary, *args]
        if self._echo is not None:
            self._echo(shlex.join(command))
        return command

    def _capture(self, *args: str) -> RuntimeResult[str]:
        command = self._command(args)
        try:
            proc = self._runner(command, capture_output=True, text=True, check=False)
        except OSError as exc:
            return Err(RuntimeCallError(code=RuntimeErrorCode.NOT_INSTALLED, command=tuple(command), message=str(exc)))
        if proc.returncode != 0:
            message = (proc.stderr or "").strip() or f"exited with status {proc.returncode}"
            return Err(
                RuntimeCallError(
                    code=RuntimeErrorCode.COMMAND_FAILED,
                    command=tuple(command),
                    message=message,
                    returncode=proc.returncode,
                )
            )
        return Ok(proc.stdout or "")

    def _stream(self, *args: str) -> RuntimeResult[None]:
        command = self._command(args)
        try:
            proc = self._runner(command, check=False)
        except OSError as exc:
            return Err(RuntimeCallError(code=RuntimeErrorCode.NOT_INSTALLED, command=tuple(command), message=str(exc)))
        if proc.returncode != 0:
            return Err(
                RuntimeCallError(
                    code=RuntimeErrorCode.COMMAND_FAILED,
                    command=tuple(command),
                    message=f"{shlex.join(command)} exited with status {proc.returncode}",
                    returncode=proc.returncode,
                )
            )
        return Ok(None)

    # --- queries ---

    def disk_usage(self) -> RuntimeResult[list[UsageRecord]]:
        args = ("system", "df", "--format", _JSON_FORMAT)
        out = self._capture(*args)
        if isinstance(out, Err):
            return out
        try:
            return Ok([_usage_record(row) for row in _json_lines(out.ok_value)])
        except (ValueError, KeyError) as exc:
            return Err(_parse_error([self._binary, *args], f"Unexpected disk usage output: {exc}"))

    def images(self, dangling: bool = False) -> RuntimeResult[list[ImageInfo]]:
        args: tuple[str, ...] = ("images", "--format", _JSON_FORMAT)
        if dangling:
            args = ("images", "--filter", "dangling=true", "--format", _JSON_FORMAT)
        out = self._capture(*args)
        if isinstance(out, Err):
            return out
        try:
            return Ok([_image_info(row) for row in _json_lines(out.ok_value)])
        except ValueError as exc:
            return Err(_parse_error([self._binary, *args], f"Unexpected image listing: {exc}"))

    def volumes(self) -> RuntimeResult[list[str]]:
        out = self._capture("volume", "ls", "-q")
        if isinstance(out, Err):
            return out
        return Ok(out.ok_value.splitlines())

    def running_mounts(self) -> RuntimeResult[list[str]]:
        ids = self._capture("ps", "-q")
        if isinstance(ids, Err):
            return ids
        container_ids = [line.strip() for line in ids.ok_value.splitlines() if line.strip()]
        if not container_ids:
            return Ok([])

        args = ("inspect", *container_ids)
        out = self._capture(*args)
        if isinstance(out, Err):
            return out
        try:
            containers = _json_array(out.ok_value)
        except ValueError as exc:
            return Err(_parse_error([self._binary, *args], f"Unexpected inspect output: {exc}"))

        # Bind mounts carry no Name; only named and anonymous volumes do.
        names: list[str] = []
        for container in containers:
            for mount in container.get("Mounts") or []:
                name = mount.get("Name")
                if name:
                    names.append(str(name))
        return Ok(names)

    def stacks(self) -> RuntimeResult[list[StackInfo]]:
        args = ("compose", "ls", "--format", "json")
        out = self._capture(*args)
        if isinstance(out, Err):
            return out
        try:
            return Ok([_stack_info(row) for row in _json_array(out.ok_value)])
        except ValueError as exc:
            return Err(_parse_error([self._binary, *args], f"Unexpected compose ls output: {exc}"))

    # --- mutations ---

    def prune(self, target: PruneTarget) -> RuntimeResult[str]:
        return self._capture(*_PRUNE_ARGS[target])

    def compose_down(
        self,
        manifest: str,
        *,
        volumes: bool = False,
        remove_local_images: bool = False,
    ) -> RuntimeResult[None]:
        args = ["compose", "-f", manifest, "down", "--remove-orphans"]
        if volumes:
            args.append("--volumes")
        if remove_local_images:
            args.extend(["--rmi", "local"])
        return self._stream(*args)

    def compose_build(self, manifest: str) -> RuntimeResult[None]:
        return self._stream("compose", "-f", manifest, "build")

    def compose_up(self, manifest: str, *, remove_orphans: bool = False) -> RuntimeResult[None]:
        args = ["compose", "-f", manifest, "up", "-d"]
        if remove_orphans:
            args.append("--remove-orphans")
        return self._stream(*args)

    def compose_ps(self, manifest: str) -> RuntimeResult[None]:
        return self._stream("compose", "-f", manifest, "ps")

    def compose_config(self, manifest: str) -> RuntimeResult[None]:
        out = self._capture("compose", "-f", manifest, "config", "--quiet")
        if isinstance(out, Err):
            return out
        return Ok(None)
