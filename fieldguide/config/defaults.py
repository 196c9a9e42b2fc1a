from __future__ import annotations

from fieldguide.config.schema import AppConfig


def default_config() -> AppConfig:
    return AppConfig(
        docker_binary="docker",
        compose_file="docker-compose.yml",
        top_images=10,
        show_commands=False,
    )
