"""Tests for the command-line entry point."""

import logging

import pytest

from solution_modeler.__main__ import USAGE, main

PROJECT_FILE = '<Project Sdk="Microsoft.NET.Sdk"></Project>\n'

SHAPES_SOURCE = '''
namespace Shapes
{
    public interface IShape { }
    public class Circle : IShape { public double Radius { get; set; } }
}
'''


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch, tmp_path):
    for name in ("SOLUTION_MODELER_EXCLUDE_PROJECTS", "SOLUTION_MODELER_LOG_LEVEL", "SOLUTION_MODELER_WAIT"):
        monkeypatch.delenv(name, raising=False)
    # .env lookup starts in the working directory
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _make_project(root):
    project_dir = root / "Shapes"
    project_dir.mkdir()
    (project_dir / "Shapes.csproj").write_text(PROJECT_FILE, encoding="utf-8")
    (project_dir / "Circle.cs").write_text(SHAPES_SOURCE, encoding="utf-8")
    return str(project_dir / "Shapes.csproj")


class TestArguments:
    def test_no_arguments(self, capsys):
        assert main([]) == 0
        assert capsys.readouterr().out.strip() == USAGE

    def test_one_argument(self, capsys):
        assert main(["App.sln"]) == 0
        assert capsys.readouterr().out.strip() == USAGE

    def test_solution_not_found(self, tmp_path, capsys):
        missing = tmp_path / "Missing.sln"
        assert main([str(missing), str(tmp_path / "out.puml")]) == 0
        assert capsys.readouterr().out.strip() == f"Solution not found: {missing}"
        assert not (tmp_path / "out-Shapes.puml").exists()

    def test_invalid_config(self, tmp_path, capsys):
        project = _make_project(tmp_path)
        bad = tmp_path / "bad.yaml"
        bad.write_text("logging:\n  level: LOUD\n", encoding="utf-8")
        assert main([project, str(tmp_path / "out.puml"), "--config", str(bad)]) == 0
        assert "Configuration error" in capsys.readouterr().out
        assert not (tmp_path / "out-Shapes.puml").exists()


class TestRun:
    def test_generates_diagram(self, tmp_path, capsys):
        project = _make_project(tmp_path)
        output = tmp_path / "diagrams" / "model.puml"

        assert main([project, str(output), "--log-level", "INFO"]) == 0

        written = output.parent / "model-Shapes.puml"
        assert written.exists()
        lines = written.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "@startuml"
        assert "IShape <|.. Circle" in lines
        assert lines[-1] == "@enduml"

        out = capsys.readouterr().out
        assert "Loading solution:" in out
        assert "Processing project: Shapes" in out
        assert "Public types found: 2" in out
        assert "PlantUML diagram written to: model-Shapes.puml" in out

    def test_excluded_project(self, tmp_path):
        project = _make_project(tmp_path)
        output = tmp_path / "model.puml"
        assert main([project, str(output), "--exclude-projects", "shapes"]) == 0
        assert not (tmp_path / "model-Shapes.puml").exists()

    def test_wait_prompts(self, tmp_path, monkeypatch):
        project = _make_project(tmp_path)
        prompts = []
        monkeypatch.setattr("builtins.input", lambda prompt="": prompts.append(prompt) or "")
        assert main([project, str(tmp_path / "model.puml"), "--wait"]) == 0
        assert prompts == ["Press [Enter] to exit..."]

    def test_no_wait_by_default(self, tmp_path, monkeypatch):
        project = _make_project(tmp_path)
        prompts = []
        monkeypatch.setattr("builtins.input", lambda prompt="": prompts.append(prompt) or "")
        assert main([project, str(tmp_path / "model.puml")]) == 0
        assert prompts == []

    def test_help_states_wait_default(self, capsys):
        with pytest.raises(SystemExit):
            main(["--help"])
        # argparse wraps help text to the terminal width
        assert "default: off" in " ".join(capsys.readouterr().out.split())
