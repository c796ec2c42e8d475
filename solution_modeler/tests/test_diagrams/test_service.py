"""End-to-end tests for DiagramService over compiled sources."""

import logging
import os

import pytest

from solution_modeler.core.diagrams import DiagramService, OutputTarget, OutputWriter
from solution_modeler.core.symbols import compile_sources


def _make_modules(*sources):
    files = {f"File{i}.cs": text for i, text in enumerate(sources)}
    return [compile_sources(files, project_name="Shapes")]


def _make_service(tmp_path, base="out.puml"):
    return DiagramService(OutputWriter(OutputTarget.from_path(str(tmp_path / base))))


CIRCLE_AND_SQUARE = '''
namespace Shapes
{
    public class Circle { public double Radius { get; set; } }
    public class Square { public double Side { get; set; } }
}
'''

SCENARIO_ONE_DIAGRAM = """@startuml
set namespaceSeparator none
package "Shapes" {
  class Circle {
    + Radius : double
  }
  class Square {
    + Side : double
  }
}
@enduml
"""


class TestScenarios:
    def test_two_unrelated_classes(self, tmp_path):
        written = _make_service(tmp_path, "base.puml").run(_make_modules(CIRCLE_AND_SQUARE))

        assert [os.path.basename(p) for p in written] == ["base-Shapes.puml"]
        with open(written[0], "r", encoding="utf-8") as f:
            assert f.read() == SCENARIO_ONE_DIAGRAM

    def test_interface_realization(self):
        diagrams = DiagramService().generate(_make_modules('''
namespace Shapes
{
    public interface IShape { }
    public class Circle : IShape { }
}
'''))
        assert len(diagrams) == 1
        assert "IShape <|.. Circle" in diagrams[0].content.splitlines()

    @pytest.mark.parametrize("payload_type", ["Item", "Optional<Item>"])
    def test_association(self, payload_type):
        diagrams = DiagramService().generate(_make_modules(f'''
namespace Store
{{
    public class Item {{ }}
    public class Optional<T> {{ }}
    public class Container {{ public {payload_type} Payload {{ get; set; }} }}
}}
'''))
        assert "Container --> Item" in diagrams[0].content.splitlines()

    def test_non_public_type_absent(self):
        diagrams = DiagramService().generate(_make_modules('''
namespace Shapes
{
    internal class Helper { }
    public class Circle { public Helper Assist { get; set; } }
    public class Square : Helper { }
}
'''))
        for diagram in diagrams:
            assert "class Helper" not in diagram.content
            assert not any(e.source == "Helper" or e.target == "Helper" for e in diagram.edges)

    def test_file_per_namespace(self, tmp_path):
        written = _make_service(tmp_path).run(_make_modules(
            "namespace A { public class One { } }",
            "namespace B.C { public class Two { } }",
        ))
        assert sorted(os.path.basename(p) for p in written) == ["out-A.puml", "out-B-C.puml"]

    def test_global_namespace_file(self, tmp_path):
        written = _make_service(tmp_path).run(_make_modules("public class Loose { }"))
        assert [os.path.basename(p) for p in written] == ["out.puml"]


class TestService:
    def test_groups_in_namespace_order(self):
        diagrams = DiagramService().generate(_make_modules(
            "namespace Zeta { public class Z { } }",
            "namespace Alpha { public class A { } }",
        ))
        assert [d.namespace for d in diagrams] == ["Alpha", "Zeta"]

    def test_no_public_types(self, tmp_path):
        written = _make_service(tmp_path).run(_make_modules("class Hidden { }"))
        assert written == []
        assert not os.path.exists(tmp_path / "out.puml")

    def test_top_level_program_hidden(self):
        diagrams = DiagramService().generate(_make_modules(
            'System.Console.WriteLine("hi");\npublic class Tool { }\n'
        ))
        assert "class Program" not in diagrams[0].content
        assert "class Tool {" in diagrams[0].content

    def test_generate_is_repeatable(self):
        modules = _make_modules(CIRCLE_AND_SQUARE)
        first = [d.content for d in DiagramService().generate(modules)]
        second = [d.content for d in DiagramService().generate(modules)]
        assert first == second

    def test_cross_namespace_edges(self):
        diagrams = DiagramService().generate(_make_modules(
            "namespace Core { public class Entity { } }",
            "using Core;\nnamespace App { public class User : Entity { } }",
        ))
        app = next(d for d in diagrams if d.namespace == "App")
        assert "Entity <|-- User" in app.content.splitlines()

    def test_public_types_logged(self, caplog):
        with caplog.at_level(logging.INFO):
            DiagramService().generate(_make_modules(CIRCLE_AND_SQUARE))
        assert "Public types found: 2" in caplog.text

    def test_run_requires_writer(self):
        with pytest.raises(ValueError):
            DiagramService().run([])


class TestSignatures:
    def test_params_array_in_signature(self):
        diagrams = DiagramService().generate(_make_modules('''
namespace Shapes
{
    public static class Extensions
    {
        public static void Apply(this string s, ref int x, out int y, in double z, params int[] rest) { y = 0; }
    }
}
'''))
        lines = diagrams[0].content.splitlines()
        assert "    + Apply(string s, int x, int y, double z, int[] rest) : void" in lines

    def test_nested_type_member_display(self):
        diagrams = DiagramService().generate(_make_modules('''
namespace Shapes
{
    public class Canvas
    {
        public class Layer { }
        public Layer Top { get; set; }
        public void Add(Layer layer) { }
    }
}
'''))
        lines = diagrams[0].content.splitlines()
        assert "    + Top : Canvas.Layer" in lines
        assert "    + Add(Canvas.Layer layer) : void" in lines
        assert "Canvas --> Layer" in lines
