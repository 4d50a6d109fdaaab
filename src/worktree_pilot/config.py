"""
Configuration management for worktree-pilot.

Settings are layered, later sources overriding earlier ones:
1. Built-in defaults
2. ~/.config/worktree-pilot/config.toml
3. worktree-pilot.toml or .worktree-pilot.toml in the repository root
4. Path specified via --config flag
5. WTP_<SECTION>_<KEY> environment variables
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import toml
from pydantic import BaseModel, Field, ValidationError

from worktree_pilot.models.modes import CleanupMode, TerminalMode

logger = logging.getLogger(__name__)

APP_NAME = "worktree-pilot"
ENV_PREFIX = "WTP_"
PROJECT_CONFIG_NAMES = (f"{APP_NAME}.toml", f".{APP_NAME}.toml")


class TerminalConfig(BaseModel):
    """Configuration for opening worktrees."""

    mode: TerminalMode = Field(
        default=TerminalMode.TAB,
        description="Default terminal mode (tab, window, inplace, echo, vscode, cursor)",
    )


class WorktreeConfig(BaseModel):
    """Configuration for worktree placement."""

    directory_pattern: str = Field(
        default="../{repo_name}-worktrees/{branch}",
        description="Directory template for new worktrees, relative to the repo root",
    )


class CleanupConfig(BaseModel):
    """Configuration for cleanup runs."""

    default_mode: CleanupMode = Field(
        default=CleanupMode.INTERACTIVE,
        description="Mode used when --mode is not given",
    )


class ScriptsConfig(BaseModel):
    """Shell snippets run around worktree lifecycle events."""

    pre_create: Optional[str] = Field(
        default=None, description="Run in the repo root before a worktree is created"
    )
    post_create: Optional[str] = Field(
        default=None, description="Run in the new worktree after creation"
    )
    post_create_async: Optional[str] = Field(
        default=None, description="Started in the new worktree and not waited on"
    )
    session_init: Optional[str] = Field(
        default=None, description="Run in every terminal session a worktree is opened in"
    )
    pre_cleanup: Optional[str] = Field(
        default=None, description="Run in the repo root before worktrees are removed"
    )
    post_cleanup: Optional[str] = Field(
        default=None, description="Run in the repo root after worktrees are removed"
    )


class Config(BaseModel):
    """Main configuration model for worktree-pilot."""

    terminal: TerminalConfig = Field(default_factory=TerminalConfig)
    worktree: WorktreeConfig = Field(default_factory=WorktreeConfig)
    cleanup: CleanupConfig = Field(default_factory=CleanupConfig)
    scripts: ScriptsConfig = Field(default_factory=ScriptsConfig)


def get_global_config_path() -> Path:
    """Get the per-user configuration file path."""
    return Path.home() / ".config" / APP_NAME / "config.toml"


def find_project_config(project_dir: Path) -> Optional[Path]:
    """Return the first project config file present in project_dir."""
    for name in PROJECT_CONFIG_NAMES:
        candidate = project_dir / name
        if candidate.is_file():
            return candidate
    return None


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return toml.load(path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning(f"Ignoring unreadable config file {path}: {e}")
        return {}


def _env_overrides(environ: Optional[dict[str, str]] = None) -> list[tuple[str, dict[str, Any]]]:
    """
    Collect overrides from WTP_<SECTION>_<KEY> environment variables.

    Only keys that exist on a known section are picked up, so
    WTP_SCRIPTS_POST_CREATE maps to scripts.post_create. Each override is
    returned separately with the variable name it came from.
    """
    environ = os.environ if environ is None else environ
    overrides: list[tuple[str, dict[str, Any]]] = []

    for section_name, field in Config.model_fields.items():
        section_model = field.annotation
        for key in section_model.model_fields:
            env_name = f"{ENV_PREFIX}{section_name}_{key}".upper()
            if env_name in environ:
                overrides.append((env_name, {section_name: {key: environ[env_name]}}))

    return overrides


def _apply_layer(data: dict[str, Any], layer: dict[str, Any], source: str) -> dict[str, Any]:
    """Merge layer over data, or keep data unchanged if the result does not validate."""
    merged = _merge(data, layer)
    try:
        Config(**merged)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid configuration from {source}: {e}")
        return data
    return merged


def load_config(
    project_dir: Optional[Path] = None,
    config_path: Optional[str] = None,
    environ: Optional[dict[str, str]] = None,
) -> Config:
    """
    Load configuration by layering every available source over the defaults.

    Sources are applied in order: global file, project file, explicit file,
    environment. A source that fails validation is logged and skipped while
    the other layers still apply.

    Args:
        project_dir: Repository root to look for a project config file in.
        config_path: Optional explicit path to a config file.
        environ: Environment mapping to read overrides from. Defaults to os.environ.

    Returns:
        Config instance with merged values.
    """
    data: dict[str, Any] = {}

    sources = [get_global_config_path()]
    if project_dir is not None:
        sources.append(find_project_config(project_dir))
    if config_path:
        sources.append(Path(config_path))

    for path in sources:
        if path and path.is_file():
            logger.debug(f"Loading config from {path}")
            data = _apply_layer(data, _read_toml(path), str(path))

    for env_name, override in _env_overrides(environ):
        data = _apply_layer(data, override, env_name)

    return Config(**data)


def save_config(config: Config, path: Path) -> None:
    """
    Save configuration to a TOML file.

    Args:
        config: Configuration to save.
        path: Path to save the config file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        toml.dump(config.model_dump(mode="json", exclude_none=True), f)
