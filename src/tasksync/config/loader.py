"""Project and home config loading."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from tasksync.contracts.config import HomeConfig, SyncSettings, TaskSyncConfig
from tasksync.contracts.exceptions import ConfigError

PROJECT_CONFIG_NAME = "tasksync.json"
HOME_CONFIG_ENV = "TASKSYNC_HOME_CONFIG"
DEFAULT_HOME_CONFIG = Path("~/.config/tasksync/config.json")


def _resolve_path(value: Path, *, base_dir: Path) -> Path:
    if value.is_absolute():
        return value
    return (base_dir / value).resolve()


def _read_json(path: Path, kind: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"failed reading {kind} file: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in {kind} file: {path}") from exc


def find_project_config(start: Path | None = None) -> Path:
    """Walk up from *start* (default: cwd) to the nearest ``tasksync.json``."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / PROJECT_CONFIG_NAME
        if candidate.is_file():
            return candidate
    raise ConfigError(f"no {PROJECT_CONFIG_NAME} found in {current} or its parents")


def load_project_config(path: str | Path | None = None) -> TaskSyncConfig:
    config_path = Path(path).expanduser().resolve() if path is not None else find_project_config()
    config_dir = config_path.parent

    raw_payload = _read_json(config_path, "config")
    try:
        parsed = TaskSyncConfig.model_validate(raw_payload)
    except ValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc

    sync = parsed.sync.model_copy(update={"reports_dir": _resolve_path(parsed.sync.reports_dir, base_dir=config_dir)})
    return parsed.model_copy(
        update={
            "tasks_dir": _resolve_path(parsed.tasks_dir, base_dir=config_dir),
            "sync": SyncSettings.model_validate(sync.model_dump()),
        }
    )


def home_config_path(environ: Mapping[str, str] | None = None) -> Path:
    env = environ if environ is not None else os.environ
    override = (env.get(HOME_CONFIG_ENV) or "").strip()
    return Path(override or DEFAULT_HOME_CONFIG).expanduser()


def load_home_config(path: str | Path | None = None) -> HomeConfig:
    """Load the home config; a missing default file yields an empty config."""
    config_path = Path(path).expanduser() if path is not None else home_config_path()
    if path is None and not config_path.exists():
        return HomeConfig()

    raw_payload = _read_json(config_path, "home config")
    try:
        return HomeConfig.model_validate(raw_payload)
    except ValidationError as exc:
        raise ConfigError(f"invalid home config: {exc}") from exc
