"""
Connectivity checks run before compilation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from gbnfgraph.core.graph import Edge, Node, NodeKind


@dataclass
class ValidationReport:
    """Outcome of validating a graph."""
    valid: bool
    problems: list[str] = field(default_factory=list)  # Display names of badly connected nodes


class GraphValidationError(ValueError):
    """Raised when compiling a graph that failed validation."""

    def __init__(self, report: ValidationReport):
        self.report = report
        super().__init__(
            "Grammar is incomplete; some nodes are not properly connected: "
            + ", ".join(report.problems)
        )


def validate_graph(nodes: Sequence[Node], edges: Sequence[Edge]) -> ValidationReport:
    """
    Check that every node is wired into the graph.

    The start node needs an outgoing edge, the end node an incoming one,
    and every other node both.
    """
    sources = {edge.source for edge in edges}
    targets = {edge.target for edge in edges}

    problems = []
    for node in nodes:
        has_outgoing = node.id in sources
        has_incoming = node.id in targets

        if node.kind is NodeKind.START:
            ok = has_outgoing
        elif node.kind is NodeKind.END:
            ok = has_incoming
        else:
            ok = has_incoming and has_outgoing

        if not ok:
            problems.append(node.display_name)

    return ValidationReport(valid=not problems, problems=problems)
