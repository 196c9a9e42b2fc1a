from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass, field
from io import StringIO
from typing import Any

from result import Err, Ok
from rich.console import Console

from fieldguide.config.schema import AppConfig
from fieldguide.models.enums import PruneTarget, ResourceCategory
from fieldguide.models.runtime import RuntimeErrorCode
from fieldguide.runtime import DockerCli, create_runtime


@dataclass
class FakeRunner:
    """Stands in for ``subprocess.run``; replies are keyed by the args after the binary."""

    replies: dict[tuple[str, ...], tuple[int, str, str]] = field(default_factory=dict)
    calls: list[tuple[list[str], dict[str, Any]]] = field(default_factory=list)
    missing: bool = False

    def __call__(self, command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.calls.append((command, kwargs))
        if self.missing:
            raise FileNotFoundError(2, "No such file or directory", command[0])
        code, out, err = self.replies.get(tuple(command[1:]), (0, "", ""))
        return subprocess.CompletedProcess(command, code, out, err)

    @property
    def commands(self) -> list[list[str]]:
        return [command for command, _ in self.calls]


def _lines(*rows: dict[str, Any]) -> str:
    return "\n".join(json.dumps(row) for row in rows) + "\n"


class TestDiskUsage:
    def test_parses_json_lines(self) -> None:
        runner = FakeRunner(
            replies={
                ("system", "df", "--format", "{{json .}}"): (
                    0,
                    _lines(
                        {"Type": "Images", "TotalCount": "5", "Active": "2", "Size": "2.1GB", "Reclaimable": "1.4GB (66%)"},
                        {"Type": "Local Volumes", "TotalCount": 3, "Active": 1, "Size": "120MB", "Reclaimable": "80MB (66%)"},
                    ),
                    "",
                )
            }
        )
        result = DockerCli(runner=runner).disk_usage()
        assert isinstance(result, Ok)
        images, volumes = result.unwrap()
        assert images.category is ResourceCategory.IMAGES
        assert images.total_count == 5
        assert images.active == 2
        assert images.size_bytes == 2_100_000_000
        assert images.reclaimable == "1.4GB (66%)"
        assert images.reclaimable_bytes == 1_400_000_000
        assert volumes.category is ResourceCategory.LOCAL_VOLUMES

    def test_daemon_error_surfaces_stderr(self) -> None:
        runner = FakeRunner(
            replies={("system", "df", "--format", "{{json .}}"): (1, "", "Cannot connect to the Docker daemon\n")}
        )
        result = DockerCli(runner=runner).disk_usage()
        assert isinstance(result, Err)
        error = result.unwrap_err()
        assert error.code is RuntimeErrorCode.COMMAND_FAILED
        assert error.message == "Cannot connect to the Docker daemon"
        assert error.returncode == 1
        assert error.command == ("docker", "system", "df", "--format", "{{json .}}")

    def test_garbage_output_is_parse_error(self) -> None:
        runner = FakeRunner(replies={("system", "df", "--format", "{{json .}}"): (0, "TYPE TOTAL\n", "")})
        result = DockerCli(runner=runner).disk_usage()
        assert isinstance(result, Err)
        assert result.unwrap_err().code is RuntimeErrorCode.PARSE_ERROR

    def test_unknown_category_is_parse_error(self) -> None:
        runner = FakeRunner(
            replies={("system", "df", "--format", "{{json .}}"): (0, _lines({"Type": "Snapshots"}), "")}
        )
        result = DockerCli(runner=runner).disk_usage()
        assert isinstance(result, Err)
        assert result.unwrap_err().code is RuntimeErrorCode.PARSE_ERROR

    def test_missing_binary(self) -> None:
        result = DockerCli("nodocker", runner=FakeRunner(missing=True)).disk_usage()
        assert isinstance(result, Err)
        assert result.unwrap_err().code is RuntimeErrorCode.NOT_INSTALLED
        assert result.unwrap_err().exit_code == 1

    def test_queries_capture_output(self) -> None:
        runner = FakeRunner()
        DockerCli(runner=runner).disk_usage()
        _, kwargs = runner.calls[0]
        assert kwargs["capture_output"] is True
        assert kwargs["text"] is True
        assert kwargs["check"] is False


class TestImages:
    def test_all_images(self) -> None:
        runner = FakeRunner(
            replies={
                ("images", "--format", "{{json .}}"): (
                    0,
                    _lines({"Repository": "nginx", "Tag": "1.27", "ID": "a1b2", "Size": "187MB"}),
                    "",
                )
            }
        )
        images = DockerCli(runner=runner).images().unwrap()
        assert images[0].reference == "nginx:1.27"
        assert images[0].size_bytes == 187_000_000
        assert not images[0].is_dangling

    def test_dangling_filter(self) -> None:
        runner = FakeRunner(
            replies={
                ("images", "--filter", "dangling=true", "--format", "{{json .}}"): (
                    0,
                    _lines({"Repository": "<none>", "Tag": "<none>", "ID": "ff00", "Size": "1GB"}),
                    "",
                )
            }
        )
        images = DockerCli(runner=runner).images(dangling=True).unwrap()
        assert len(images) == 1
        assert images[0].is_dangling


class TestVolumesAndMounts:
    def test_volume_names(self) -> None:
        runner = FakeRunner(replies={("volume", "ls", "-q"): (0, "db\ncache\n", "")})
        assert DockerCli(runner=runner).volumes().unwrap() == ["db", "cache"]

    def test_no_running_containers_skips_inspect(self) -> None:
        runner = FakeRunner(replies={("ps", "-q"): (0, "\n", "")})
        assert DockerCli(runner=runner).running_mounts().unwrap() == []
        assert runner.commands == [["docker", "ps", "-q"]]

    def test_named_mounts_only(self) -> None:
        inspect = [
            {"Mounts": [{"Type": "volume", "Name": "db"}, {"Type": "bind", "Source": "/srv"}]},
            {"Mounts": None},
            {"Mounts": [{"Type": "volume", "Name": "cache"}]},
        ]
        runner = FakeRunner(
            replies={
                ("ps", "-q"): (0, "c1\nc2\nc3\n", ""),
                ("inspect", "c1", "c2", "c3"): (0, json.dumps(inspect), ""),
            }
        )
        assert DockerCli(runner=runner).running_mounts().unwrap() == ["db", "cache"]

    def test_inspect_failure(self) -> None:
        runner = FakeRunner(
            replies={("ps", "-q"): (0, "c1\n", ""), ("inspect", "c1"): (1, "", "No such object: c1")}
        )
        result = DockerCli(runner=runner).running_mounts()
        assert isinstance(result, Err)
        assert "No such object" in result.unwrap_err().message


class TestStacks:
    def test_compose_ls(self) -> None:
        payload = [{"Name": "shop", "Status": "running(3)", "ConfigFiles": "/srv/shop/docker-compose.yml"}]
        runner = FakeRunner(replies={("compose", "ls", "--format", "json"): (0, json.dumps(payload), "")})
        stacks = DockerCli(runner=runner).stacks().unwrap()
        assert stacks[0].name == "shop"
        assert stacks[0].status == "running(3)"

    def test_compose_unavailable(self) -> None:
        runner = FakeRunner(
            replies={("compose", "ls", "--format", "json"): (1, "", "docker: 'compose' is not a docker command.")}
        )
        assert isinstance(DockerCli(runner=runner).stacks(), Err)


class TestPrune:
    def test_commands_per_target(self) -> None:
        runner = FakeRunner()
        cli = DockerCli(runner=runner)
        for target in PruneTarget:
            cli.prune(target)
        assert runner.commands == [
            ["docker", "container", "prune", "--force"],
            ["docker", "network", "prune", "--force"],
            ["docker", "image", "prune", "--force"],
            ["docker", "builder", "prune", "--force"],
            ["docker", "image", "prune", "--all", "--force"],
            ["docker", "builder", "prune", "--all", "--force"],
            ["docker", "volume", "prune", "--all", "--force"],
        ]

    def test_returns_runtime_output(self) -> None:
        runner = FakeRunner(
            replies={("container", "prune", "--force"): (0, "Total reclaimed space: 12MB\n", "")}
        )
        assert DockerCli(runner=runner).prune(PruneTarget.CONTAINERS).unwrap() == "Total reclaimed space: 12MB\n"


class TestCompose:
    def test_down_flags(self) -> None:
        runner = FakeRunner()
        cli = DockerCli(runner=runner)
        cli.compose_down("stack.yml")
        cli.compose_down("stack.yml", volumes=True, remove_local_images=True)
        assert runner.commands == [
            ["docker", "compose", "-f", "stack.yml", "down", "--remove-orphans"],
            ["docker", "compose", "-f", "stack.yml", "down", "--remove-orphans", "--volumes", "--rmi", "local"],
        ]

    def test_up_build_ps(self) -> None:
        runner = FakeRunner()
        cli = DockerCli(runner=runner)
        cli.compose_build("s.yml")
        cli.compose_up("s.yml")
        cli.compose_up("s.yml", remove_orphans=True)
        cli.compose_ps("s.yml")
        assert runner.commands == [
            ["docker", "compose", "-f", "s.yml", "build"],
            ["docker", "compose", "-f", "s.yml", "up", "-d"],
            ["docker", "compose", "-f", "s.yml", "up", "-d", "--remove-orphans"],
            ["docker", "compose", "-f", "s.yml", "ps"],
        ]

    def test_transitions_stream_to_terminal(self) -> None:
        runner = FakeRunner()
        DockerCli(runner=runner).compose_up("s.yml")
        _, kwargs = runner.calls[0]
        assert "capture_output" not in kwargs

    def test_stream_failure_carries_status(self) -> None:
        runner = FakeRunner(replies={("compose", "-f", "s.yml", "build"): (17, "", "")})
        result = DockerCli(runner=runner).compose_build("s.yml")
        assert isinstance(result, Err)
        assert result.unwrap_err().exit_code == 17

    def test_config_quiet(self) -> None:
        runner = FakeRunner()
        assert DockerCli(runner=runner).compose_config("s.yml") == Ok(None)
        assert runner.commands == [["docker", "compose", "-f", "s.yml", "config", "--quiet"]]


class TestCreateRuntime:
    def test_echoes_commands_when_enabled(self) -> None:
        console = Console(file=StringIO(), width=200)
        runtime = create_runtime(AppConfig(docker_binary="podman", show_commands=True), console)
        assert isinstance(runtime, DockerCli)
        runtime._runner = FakeRunner()  # type: ignore[attr-defined]
        runtime.volumes()
        output = console.file.getvalue()  # type: ignore[attr-defined]
        assert "$ podman volume ls -q" in output

    def test_custom_binary(self) -> None:
        runner = FakeRunner()
        DockerCli("podman", runner=runner).volumes()
        assert runner.commands == [["podman", "volume", "ls", "-q"]]
