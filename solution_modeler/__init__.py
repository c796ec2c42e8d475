"""solution-modeler: PlantUML class diagrams from C# solutions.

Loads a solution with tree-sitter, builds a read-only symbol model and renders
one deterministic PlantUML document per namespace.
"""

__version__ = "0.1.0"
