from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# (json_key, attr_name, minimum): shared by from_dict and CLI override clamping.
_INT_FIELDS: tuple[tuple[str, str, int], ...] = (("topImages", "top_images", 1),)


def clamp_field(value: int, field_name: str) -> int:
    """Clamp *value* to the minimum defined for *field_name* in _INT_FIELDS."""
    for _, attr, minimum in _INT_FIELDS:
        if attr == field_name:
            return max(minimum, value)
    return value


def _get_int(data: dict[str, Any], json_key: str, default: int, minimum: int) -> int:
    raw = data.get(json_key, default)
    try:
        if isinstance(raw, bool):
            raise TypeError(raw)
        return max(minimum, int(raw))
    except (TypeError, ValueError) as exc:
        msg = f"{json_key} must be an integer, got {raw!r}"
        raise ValueError(msg) from exc


@dataclass(slots=True)
class AppConfig:
    docker_binary: str = "docker"
    compose_file: str = "docker-compose.yml"
    top_images: int = 10
    show_commands: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "dockerBinary": self.docker_binary,
            "composeFile": self.compose_file,
            "topImages": self.top_images,
            "showCommands": self.show_commands,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], defaults: AppConfig) -> AppConfig:
        docker_binary = str(data.get("dockerBinary", defaults.docker_binary)).strip()
        compose_file = str(data.get("composeFile", defaults.compose_file)).strip()

        int_kwargs: dict[str, int] = {}
        for json_key, attr, minimum in _INT_FIELDS:
            int_kwargs[attr] = _get_int(data, json_key, getattr(defaults, attr), minimum)

        return cls(
            docker_binary=docker_binary or defaults.docker_binary,
            compose_file=compose_file or defaults.compose_file,
            show_commands=bool(data.get("showCommands", defaults.show_commands)),
            **int_kwargs,
        )
