from __future__ import annotations

import json
from pathlib import Path

from result import Err, Ok, Result

from fieldguide.config.defaults import default_config
from fieldguide.config.schema import AppConfig

CONFIG_PATH = "~/.config/fieldguide/config.json"


def load_config(path: str | Path | None = None) -> Result[AppConfig, str]:
    resolved = Path(path or CONFIG_PATH).expanduser()
    if not resolved.exists():
        return Ok(default_config())

    try:
        payload = json.loads(resolved.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        return Err(f"Failed reading config at {resolved}: {exc}.")
    if not isinstance(payload, dict):
        return Err(f"Config at {resolved} must be a JSON object.")

    try:
        return Ok(AppConfig.from_dict(payload, default_config()))
    except ValueError as exc:
        return Err(f"Invalid config at {resolved}: {exc}.")


def sample_config_json() -> str:
    return json.dumps(default_config().to_dict(), indent=2)
