"""
Graph model and connectivity validation.
"""

from gbnfgraph.core.graph import (
    NodeKind,
    Position,
    Node,
    Edge,
    GrammarGraph,
    export_filename,
    unescape_literal,
)
from gbnfgraph.core.validation import (
    ValidationReport,
    GraphValidationError,
    validate_graph,
)

__all__ = [
    # graph
    "NodeKind",
    "Position",
    "Node",
    "Edge",
    "GrammarGraph",
    "export_filename",
    "unescape_literal",
    # validation
    "ValidationReport",
    "GraphValidationError",
    "validate_graph",
]
