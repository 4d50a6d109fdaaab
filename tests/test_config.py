"""Tests for configuration loading and the layered cascade."""

from pathlib import Path
from unittest.mock import patch

import pytest
import toml

from worktree_pilot.config import (
    Config,
    find_project_config,
    load_config,
    save_config,
)
from worktree_pilot.models.modes import CleanupMode, TerminalMode


@pytest.fixture
def global_config(temp_dir: Path):
    path = temp_dir / "global" / "config.toml"
    path.parent.mkdir()
    with patch("worktree_pilot.config.get_global_config_path", return_value=path):
        yield path


class TestDefaults:
    """Tests for built-in defaults."""

    def test_default_values(self, global_config):
        config = load_config(environ={})

        assert config.terminal.mode == TerminalMode.TAB
        assert config.worktree.directory_pattern == "../{repo_name}-worktrees/{branch}"
        assert config.cleanup.default_mode == CleanupMode.INTERACTIVE
        assert config.scripts.post_create is None
        assert config.scripts.session_init is None


class TestCascade:
    """Tests for source precedence."""

    def test_global_file(self, global_config):
        global_config.write_text('[terminal]\nmode = "window"\n')

        assert load_config(environ={}).terminal.mode == TerminalMode.WINDOW

    def test_project_overrides_global_per_key(self, global_config, temp_dir):
        global_config.write_text(
            '[terminal]\nmode = "window"\n[scripts]\nsession_init = "nvm use"\n'
        )
        project = temp_dir / "project"
        project.mkdir()
        (project / ".worktree-pilot.toml").write_text('[terminal]\nmode = "vscode"\n')

        config = load_config(project_dir=project, environ={})

        assert config.terminal.mode == TerminalMode.VSCODE
        assert config.scripts.session_init == "nvm use"

    def test_explicit_file_overrides_project(self, global_config, temp_dir):
        project = temp_dir / "project"
        project.mkdir()
        (project / "worktree-pilot.toml").write_text('[cleanup]\ndefault_mode = "merged"\n')
        explicit = temp_dir / "explicit.toml"
        explicit.write_text('[cleanup]\ndefault_mode = "github"\n')

        config = load_config(project_dir=project, config_path=str(explicit), environ={})

        assert config.cleanup.default_mode == CleanupMode.GITHUB

    def test_environment_wins(self, global_config, temp_dir):
        explicit = temp_dir / "explicit.toml"
        explicit.write_text('[terminal]\nmode = "window"\n')

        config = load_config(
            config_path=str(explicit),
            environ={
                "WTP_TERMINAL_MODE": "echo",
                "WTP_SCRIPTS_POST_CREATE": "npm install",
                "WTP_UNKNOWN_KEY": "ignored",
            },
        )

        assert config.terminal.mode == TerminalMode.ECHO
        assert config.scripts.post_create == "npm install"

    def test_unreadable_file_is_skipped(self, global_config, temp_dir):
        global_config.write_text("this is [not toml")
        project = temp_dir / "project"
        project.mkdir()
        (project / "worktree-pilot.toml").write_text('[terminal]\nmode = "cursor"\n')

        assert load_config(project_dir=project, environ={}).terminal.mode == TerminalMode.CURSOR

    def test_invalid_values_fall_back_to_defaults(self, global_config):
        global_config.write_text('[terminal]\nmode = "teleport"\n')

        assert load_config(environ={}) == Config()

    def test_invalid_explicit_file_keeps_project_settings(self, global_config, temp_dir):
        project = temp_dir / "project"
        project.mkdir()
        (project / ".worktree-pilot.toml").write_text('[terminal]\nmode = "echo"\n')
        explicit = temp_dir / "explicit.toml"
        explicit.write_text('[cleanup]\ndefault_mode = "bogus"\n')

        config = load_config(project_dir=project, config_path=str(explicit), environ={})

        assert config.terminal.mode == TerminalMode.ECHO
        assert config.cleanup.default_mode == CleanupMode.INTERACTIVE

    def test_invalid_env_override_is_skipped_alone(self, global_config):
        global_config.write_text('[terminal]\nmode = "window"\n')

        config = load_config(
            environ={
                "WTP_TERMINAL_MODE": "teleport",
                "WTP_SCRIPTS_SESSION_INIT": "source .venv/bin/activate",
            }
        )

        assert config.terminal.mode == TerminalMode.WINDOW
        assert config.scripts.session_init == "source .venv/bin/activate"


class TestProjectConfigDiscovery:
    """Tests for find_project_config."""

    def test_prefers_plain_name(self, temp_dir):
        (temp_dir / "worktree-pilot.toml").write_text("")
        (temp_dir / ".worktree-pilot.toml").write_text("")

        assert find_project_config(temp_dir) == temp_dir / "worktree-pilot.toml"

    def test_none_when_absent(self, temp_dir):
        assert find_project_config(temp_dir) is None


def test_save_config_round_trips_through_load(global_config, temp_dir):
    config = Config()
    config.terminal.mode = TerminalMode.ECHO
    config.scripts.post_create = "make setup"
    target = temp_dir / "out" / "config.toml"

    save_config(config, target)

    data = toml.load(target)
    assert data["terminal"]["mode"] == "echo"
    assert "pre_create" not in data["scripts"]
    assert load_config(config_path=str(target), environ={}) == config
