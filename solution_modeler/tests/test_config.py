"""Tests for run configuration loading."""

import pytest

from solution_modeler.core.config import (
    CONFIG_FILE_NAME,
    ConfigError,
    ModelerConfig,
    find_config_file,
    load_config,
)

FULL_CONFIG = """
projects:
  exclude_markers: [Test, Bench]
output:
  default_extension: txt
logging:
  level: debug
run:
  wait_after_end: true
"""


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    for name in ("SOLUTION_MODELER_EXCLUDE_PROJECTS", "SOLUTION_MODELER_LOG_LEVEL", "SOLUTION_MODELER_WAIT"):
        monkeypatch.delenv(name, raising=False)


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestDefaults:
    def test_no_file(self):
        config = load_config()
        assert config == ModelerConfig()
        assert config.exclude_markers == ("Test", "Example", "Sample")
        assert config.default_extension == ".puml"
        assert config.log_level == "INFO"
        assert config.wait_after_end is False


class TestFile:
    def test_explicit_file(self, tmp_path):
        config = load_config(_write(tmp_path / "custom.yaml", FULL_CONFIG))
        assert config.exclude_markers == ("Test", "Bench")
        assert config.default_extension == ".txt"
        assert config.log_level == "DEBUG"
        assert config.wait_after_end is True

    def test_file_beside_solution(self, tmp_path):
        _write(tmp_path / CONFIG_FILE_NAME, "logging:\n  level: WARNING\n")
        solution = _write(tmp_path / "App.sln", "")
        assert find_config_file(solution) == str(tmp_path / CONFIG_FILE_NAME)
        assert load_config(solution_path=solution).log_level == "WARNING"

    def test_no_file_beside_solution(self, tmp_path):
        solution = _write(tmp_path / "App.sln", "")
        assert find_config_file(solution) is None
        assert load_config(solution_path=solution) == ModelerConfig()

    def test_empty_file(self, tmp_path):
        assert load_config(_write(tmp_path / "empty.yaml", "")) == ModelerConfig()

    def test_markers_as_string(self, tmp_path):
        config = load_config(_write(tmp_path / "c.yaml", "projects:\n  exclude_markers: 'Mock, Demo'\n"))
        assert config.exclude_markers == ("Mock", "Demo")

    @pytest.mark.parametrize("text", [
        "- just\n- a list\n",
        "projects: [1, 2]\n",
        "logging:\n  level: LOUD\n",
        "run:\n  wait_after_end: sometimes\n",
        "projects:\n  exclude_markers: 42\n",
        "key: [unclosed\n",
    ])
    def test_invalid_file(self, tmp_path, text):
        with pytest.raises(ConfigError):
            load_config(_write(tmp_path / "bad.yaml", text))

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / "absent.yaml"))


class TestOverrides:
    def test_environment_over_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SOLUTION_MODELER_EXCLUDE_PROJECTS", "Spec, Fake")
        monkeypatch.setenv("SOLUTION_MODELER_LOG_LEVEL", "error")
        monkeypatch.setenv("SOLUTION_MODELER_WAIT", "no")
        config = load_config(_write(tmp_path / "c.yaml", FULL_CONFIG))
        assert config.exclude_markers == ("Spec", "Fake")
        assert config.log_level == "ERROR"
        assert config.wait_after_end is False

    def test_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("SOLUTION_MODELER_WAIT", "perhaps")
        with pytest.raises(ConfigError):
            load_config()

    def test_command_line_over_everything(self, monkeypatch):
        monkeypatch.setenv("SOLUTION_MODELER_LOG_LEVEL", "ERROR")
        config = load_config().with_overrides(
            exclude_markers="Only", log_level="DEBUG", wait_after_end=True
        )
        assert config.exclude_markers == ("Only",)
        assert config.log_level == "DEBUG"
        assert config.wait_after_end is True

    def test_none_leaves_values(self):
        config = ModelerConfig(log_level="WARNING")
        assert config.with_overrides() == config
