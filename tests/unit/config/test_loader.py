"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from kclserver.bootstrap.releases import GITHUB_API_BASE, KCL_REPOSITORY
from kclserver.config.loader import (
    ConfigError,
    dict_to_config,
    expand_env_vars,
    find_global_config,
    find_project_config,
    load_config,
    load_yaml_file,
    merge_configs,
)


def _write_global(home: Path, content: str) -> Path:
    path = home / "config" / "config.yml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestFindConfig:
    """Tests for config file discovery."""

    def test_finds_dot_file_first(self, tmp_path: Path) -> None:
        (tmp_path / ".kclserver.yml").write_text("timeout: 1\n")
        (tmp_path / "kclserver.yml").write_text("timeout: 2\n")

        assert find_project_config(tmp_path) == tmp_path / ".kclserver.yml"

    def test_finds_yaml_extension(self, tmp_path: Path) -> None:
        (tmp_path / "kclserver.yaml").write_text("{}\n")

        assert find_project_config(tmp_path) == tmp_path / "kclserver.yaml"

    def test_none_when_missing(self, tmp_path: Path) -> None:
        assert find_project_config(tmp_path) is None

    def test_global_config_under_home(self, isolated_home: Path) -> None:
        assert find_global_config() is None

        path = _write_global(isolated_home, "timeout: 5\n")

        assert find_global_config() == path


class TestLoadYamlFile:
    """Tests for load_yaml_file."""

    def test_empty_file_is_empty_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yml"
        path.write_text("")

        assert load_yaml_file(path) == {}

    def test_non_mapping_is_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_yaml_file(path)

    def test_expands_env_vars(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KCL_TOKEN", "s3cret")
        path = tmp_path / "c.yml"
        path.write_text("github_token: ${KCL_TOKEN}\n")

        assert load_yaml_file(path) == {"github_token": "s3cret"}


class TestExpandEnvVars:
    """Tests for expand_env_vars."""

    def test_default_used_when_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("KCL_UNSET", raising=False)

        assert expand_env_vars("${KCL_UNSET:-fallback}") == "fallback"

    def test_unset_without_default_is_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("KCL_UNSET", raising=False)

        assert expand_env_vars({"a": ["x${KCL_UNSET}y"]}) == {"a": ["xy"]}

    def test_non_strings_untouched(self) -> None:
        assert expand_env_vars({"timeout": 3}) == {"timeout": 3}


class TestMergeConfigs:
    """Tests for merge_configs."""

    def test_overlay_wins(self) -> None:
        assert merge_configs({"timeout": 1}, {"timeout": 2}) == {"timeout": 2}

    def test_none_does_not_override(self) -> None:
        assert merge_configs({"install_dir": "/a"}, {"install_dir": None}) == {"install_dir": "/a"}


class TestDictToConfig:
    """Tests for dict_to_config."""

    def test_defaults(self, tmp_path: Path, isolated_home: Path) -> None:
        config = dict_to_config({}, tmp_path)

        assert config.home == isolated_home
        assert config.install_dir is None
        assert config.repository == KCL_REPOSITORY
        assert config.api_url == GITHUB_API_BASE
        assert config.github_token is None
        assert config.timeout is None

    def test_relative_install_dir_uses_project_root(self, tmp_path: Path) -> None:
        config = dict_to_config({"install_dir": "servers"}, tmp_path)

        assert config.install_dir == tmp_path / "servers"

    def test_absolute_install_dir_kept(self, tmp_path: Path) -> None:
        target = tmp_path / "abs"

        config = dict_to_config({"install_dir": str(target)}, Path("/elsewhere"))

        assert config.install_dir == target

    def test_token_falls_back_to_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "from-env")

        assert dict_to_config({}, tmp_path).github_token == "from-env"
        assert dict_to_config({"github_token": "explicit"}, tmp_path).github_token == "explicit"

    def test_timeout_becomes_float(self, tmp_path: Path) -> None:
        assert dict_to_config({"timeout": 10}, tmp_path).timeout == 10.0


class TestLoadConfig:
    """Tests for load_config precedence and errors."""

    def test_no_files_gives_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)

        assert config.repository == KCL_REPOSITORY
        assert config.sources == []

    def test_project_overrides_global(self, tmp_path: Path, isolated_home: Path) -> None:
        _write_global(isolated_home, "timeout: 5\nrepository: global/kcl\n")
        (tmp_path / ".kclserver.yml").write_text("timeout: 9\n")

        config = load_config(tmp_path)

        assert config.timeout == 9.0
        assert config.repository == "global/kcl"
        assert [s.split(":", 1)[0] for s in config.sources] == ["global", "project"]

    def test_custom_config_replaces_project(self, tmp_path: Path) -> None:
        (tmp_path / ".kclserver.yml").write_text("timeout: 9\n")
        custom = tmp_path / "custom.yml"
        custom.write_text("repository: me/kcl\n")

        config = load_config(tmp_path, cli_config_path=custom)

        assert config.repository == "me/kcl"
        assert config.timeout is None

    def test_cli_overrides_win(self, tmp_path: Path) -> None:
        (tmp_path / ".kclserver.yml").write_text("install_dir: from-file\n")

        config = load_config(tmp_path, cli_overrides={"install_dir": "from-cli"})

        assert config.install_dir == tmp_path / "from-cli"
        assert config.sources[-1] == "cli"

    def test_missing_custom_config(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config(tmp_path, cli_config_path=tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        (tmp_path / ".kclserver.yml").write_text("timeout: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(tmp_path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        (tmp_path / ".kclserver.yml").write_text("timeout: -3\n")

        with pytest.raises(ConfigError, match="positive"):
            load_config(tmp_path)

    def test_unknown_key_only_warns(self, tmp_path: Path) -> None:
        (tmp_path / ".kclserver.yml").write_text("timout: 3\n")

        config = load_config(tmp_path)

        assert config.timeout is None

    def test_install_dir_at_project_root_is_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "main.k").write_text("a = 1\n")
        (tmp_path / ".kclserver.yml").write_text("install_dir: .\n")

        with pytest.raises(ConfigError, match="project directory"):
            load_config(tmp_path)

        assert (tmp_path / "main.k").exists()

    def test_install_dir_above_project_is_rejected(self, tmp_path: Path) -> None:
        project = tmp_path / "project"
        project.mkdir()

        with pytest.raises(ConfigError, match="install_dir"):
            load_config(project, cli_overrides={"install_dir": ".."})

    def test_install_dir_at_user_home_is_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="home directory"):
            load_config(tmp_path, cli_overrides={"install_dir": "~"})

    def test_install_dir_at_kclserver_home_is_rejected(
        self, tmp_path: Path, isolated_home: Path
    ) -> None:
        with pytest.raises(ConfigError, match="kclserver home"):
            load_config(tmp_path, cli_overrides={"install_dir": str(isolated_home)})
