"""Tests for solution and project loading."""

import logging
import os

import pytest

from solution_modeler.core.symbols import SolutionLoadError, Workspace
from solution_modeler.core.symbols.workspace import ProjectInfo, read_project, read_solution


CSHARP_PROJECT_GUID = "FAE04EC0-301F-11D3-BF4B-00C04F79EFBC"
FOLDER_GUID = "2150E333-8FDC-42A3-9474-1A3956D46DE8"

SDK_PROJECT = '''<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <TargetFramework>net8.0</TargetFramework>
    <ImplicitUsings>enable</ImplicitUsings>
  </PropertyGroup>
  <ItemGroup>
    <Compile Remove="Legacy\\**" />
    <Using Include="Shapes.Common" />
  </ItemGroup>
</Project>
'''

EXPLICIT_PROJECT = '''<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <EnableDefaultCompileItems>false</EnableDefaultCompileItems>
  </PropertyGroup>
  <ItemGroup>
    <Compile Include="Only.cs" />
  </ItemGroup>
</Project>
'''


def _sln_entry(name, path, type_guid=CSHARP_PROJECT_GUID, index=1):
    return (
        f'Project("{{{type_guid}}}") = "{name}", "{path}", '
        f'"{{00000000-0000-0000-0000-00000000000{index}}}"\nEndProject\n'
    )


def _make_solution(root, entries):
    header = "Microsoft Visual Studio Solution File, Format Version 12.00\n"
    body = "".join(_sln_entry(*entry, index=i) for i, entry in enumerate(entries))
    path = root / "App.sln"
    path.write_text(header + body, encoding="utf-8")
    return str(path)


def _make_project(root, name, project_xml=SDK_PROJECT, files=None):
    project_dir = root / name
    project_dir.mkdir(parents=True, exist_ok=True)
    (project_dir / f"{name}.csproj").write_text(project_xml, encoding="utf-8")
    for rel_path, text in (files or {}).items():
        target = project_dir / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
    return project_dir


# =========================================================================
# Tests: Solution files
# =========================================================================

class TestReadSolution:
    def test_sln_projects(self, tmp_path):
        sln = _make_solution(tmp_path, [
            ("Shapes", "Shapes\\Shapes.csproj"),
            ("Docs", "Docs", FOLDER_GUID),
            ("Legacy", "Legacy\\Legacy.vbproj"),
        ])
        projects = read_solution(sln)
        assert [p.name for p in projects] == ["Shapes"]
        assert projects[0].path == os.path.join(str(tmp_path), "Shapes", "Shapes.csproj")

    def test_slnx_projects(self, tmp_path):
        slnx = tmp_path / "App.slnx"
        slnx.write_text(
            '<Solution>\n'
            '  <Folder Name="/src/">\n'
            '    <Project Path="src/Shapes/Shapes.csproj" />\n'
            '  </Folder>\n'
            '</Solution>\n',
            encoding="utf-8",
        )
        projects = read_solution(str(slnx))
        assert [p.name for p in projects] == ["Shapes"]

    def test_single_project_file(self, tmp_path):
        project_dir = _make_project(tmp_path, "Shapes")
        projects = read_solution(str(project_dir / "Shapes.csproj"))
        assert [p.name for p in projects] == ["Shapes"]

    def test_unsupported_file(self, tmp_path):
        other = tmp_path / "notes.txt"
        other.write_text("nothing", encoding="utf-8")
        with pytest.raises(SolutionLoadError):
            read_solution(str(other))


# =========================================================================
# Tests: Project files
# =========================================================================

class TestReadProject:
    def test_default_compile_items(self, tmp_path):
        project_dir = _make_project(tmp_path, "Shapes", files={
            "Circle.cs": "",
            "Round/Ellipse.cs": "",
            "Legacy/Old.cs": "",
            "obj/Debug/Generated.cs": "",
            "bin/Copied.cs": "",
            "readme.md": "",
        })
        sources = read_project(ProjectInfo("Shapes", str(project_dir / "Shapes.csproj")))
        names = sorted(os.path.relpath(f, str(project_dir)) for f in sources.files)
        assert names == ["Circle.cs", os.path.join("Round", "Ellipse.cs")]

    def test_implicit_usings(self, tmp_path):
        project_dir = _make_project(tmp_path, "Shapes")
        sources = read_project(ProjectInfo("Shapes", str(project_dir / "Shapes.csproj")))
        assert "System" in sources.implicit_usings
        assert "System.Collections.Generic" in sources.implicit_usings
        assert sources.implicit_usings[-1] == "Shapes.Common"

    def test_explicit_compile_items(self, tmp_path):
        project_dir = _make_project(tmp_path, "Shapes", EXPLICIT_PROJECT, files={
            "Only.cs": "",
            "Ignored.cs": "",
        })
        sources = read_project(ProjectInfo("Shapes", str(project_dir / "Shapes.csproj")))
        assert [os.path.basename(f) for f in sources.files] == ["Only.cs"]
        assert sources.implicit_usings == []


# =========================================================================
# Tests: Workspace
# =========================================================================

class TestWorkspace:
    def test_exclusion_markers(self):
        workspace = Workspace()
        assert workspace.is_excluded("Shapes.Tests")
        assert workspace.is_excluded("SAMPLEApp")
        assert workspace.is_excluded("Examples")
        assert not workspace.is_excluded("Shapes")

    def test_custom_markers(self):
        workspace = Workspace(["Bench"])
        assert workspace.is_excluded("Shapes.Benchmarks")
        assert not workspace.is_excluded("Shapes.Tests")

    def test_open_solution(self, tmp_path, caplog):
        _make_project(tmp_path, "Shapes", files={
            "Circle.cs": "namespace Shapes { public class Circle { } }",
        })
        _make_project(tmp_path, "Shapes.Tests", files={
            "CircleTests.cs": "namespace Shapes.Tests { public class CircleTests { } }",
        })
        sln = _make_solution(tmp_path, [
            ("Shapes", "Shapes\\Shapes.csproj"),
            ("Shapes.Tests", "Shapes.Tests\\Shapes.Tests.csproj"),
        ])

        with caplog.at_level(logging.INFO):
            modules = Workspace().open_solution(sln)

        assert [m.name for m in modules] == ["Shapes"]
        shapes = modules[0].global_namespace.namespaces[0]
        assert [t.display_name for t in shapes.types] == ["Circle"]
        assert f"Loading solution: {sln}" in caplog.text
        assert "Processing project: Shapes" in caplog.text
        assert "Processing project: Shapes.Tests" not in caplog.text

    def test_failing_project_does_not_abort(self, tmp_path, caplog):
        _make_project(tmp_path, "Shapes", files={
            "Circle.cs": "namespace Shapes { public class Circle { } }",
        })
        broken_dir = tmp_path / "Broken"
        broken_dir.mkdir()
        (broken_dir / "Broken.csproj").write_text("<Project", encoding="utf-8")
        sln = _make_solution(tmp_path, [
            ("Broken", "Broken\\Broken.csproj"),
            ("Missing", "Missing\\Missing.csproj"),
            ("Shapes", "Shapes\\Shapes.csproj"),
        ])

        with caplog.at_level(logging.INFO):
            modules = Workspace().open_solution(sln)

        assert [m.name for m in modules] == ["Shapes"]
        assert "Project Broken failed to load" in caplog.text
        assert "Project Missing failed to load" in caplog.text
