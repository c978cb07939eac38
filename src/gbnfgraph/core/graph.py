"""
Graph model for grammar diagrams.

Nodes and edges are produced by the visual editor. This module gives them
a typed shape and knows how to read the editor's saved-grammar JSON.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

logger = logging.getLogger(__name__)


class NodeKind(Enum):
    """Closed set of node variants, valued by the editor's type tag."""
    START = "startNode"
    END = "endNode"
    STRING = "stringNode"
    CHAR_SET = "charSetNode"
    LETTER = "letterNode"
    DIGIT = "digitNode"
    NON_NEWLINE = "nonNewlineNode"
    IDENTIFIER = "identifierNode"
    TIME = "timeNode"
    ROUTER = "routerNode"

    @property
    def label(self) -> str:
        return _KIND_LABELS[self]

    @property
    def is_sentinel(self) -> bool:
        """Start and end nodes frame the graph and carry no pattern."""
        return self in (NodeKind.START, NodeKind.END)

    @classmethod
    def from_tag(cls, tag: str) -> NodeKind:
        try:
            return cls(tag)
        except ValueError:
            available = ", ".join(k.value for k in cls)
            raise ValueError(f"Unknown node type: {tag}. Available: {available}") from None


_KIND_LABELS = {
    NodeKind.START: "Start",
    NodeKind.END: "End",
    NodeKind.STRING: "String Match",
    NodeKind.CHAR_SET: "Character Set",
    NodeKind.LETTER: "Letter",
    NodeKind.DIGIT: "Digit",
    NodeKind.NON_NEWLINE: "Non-Newline",
    NodeKind.IDENTIFIER: "Identifier",
    NodeKind.TIME: "Time Duration",
    NodeKind.ROUTER: "Router",
}


@dataclass(frozen=True)
class Position:
    """Canvas coordinates; y grows downwards."""
    x: float = 0
    y: float = 0


@dataclass
class Node:
    """A vertex in the diagram."""
    id: str
    kind: NodeKind
    position: Position = field(default_factory=Position)
    name: str | None = None      # User-assigned rule name
    label: str | None = None     # Editor label, defaults to the kind's label
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        """Name shown to the user when reporting problems with this node."""
        if self.name and not self.kind.is_sentinel:
            return self.name
        return self.label or self.kind.label

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Node:
        """Build a node from the editor's JSON shape."""
        kind = NodeKind.from_tag(data["type"])
        pos = data.get("position") or {}
        payload = data.get("data") or {}

        properties = dict(payload.get("properties") or {})
        # The editor keeps literal values escaped; store the raw text
        if kind is NodeKind.STRING and isinstance(properties.get("value"), str):
            properties["value"] = unescape_literal(properties["value"])

        return cls(
            id=str(data["id"]),
            kind=kind,
            position=Position(pos.get("x", 0), pos.get("y", 0)),
            name=payload.get("name") or None,
            label=payload.get("label") or None,
            properties=properties,
        )


@dataclass(frozen=True)
class Edge:
    """A directed "may be followed by" connection."""
    source: str
    target: str
    source_handle: str | None = None
    target_handle: str | None = None

    @property
    def key(self) -> str:
        """Composite identifier the renderer uses to look an edge up."""
        parts = [self.source, self.source_handle, self.target, self.target_handle]
        return "->".join(p for p in parts if p)

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Edge:
        return cls(
            source=str(data["source"]),
            target=str(data["target"]),
            source_handle=data.get("sourceHandle") or None,
            target_handle=data.get("targetHandle") or None,
        )


_ESCAPES = {"\\": "\\", '"': '"', "n": "\n", "r": "\r", "t": "\t"}
_ESCAPE_RE = re.compile(r'\\([\\"nrt])')


def unescape_literal(text: str) -> str:
    """Undo the editor's escaping of string-match values."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(1)], text)


def export_filename(name: str | None) -> str:
    """File name the editor offers when downloading a grammar."""
    if not name:
        return "grammar.gbnf"
    return re.sub(r"[^a-z0-9_]", "_", name.lower()) + ".gbnf"


@dataclass
class GrammarGraph:
    """A named snapshot of the editor's nodes and edges."""
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    name: str | None = None
    id: str | None = None

    def get_node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    @classmethod
    def initial(cls) -> GrammarGraph:
        """The two-node graph a fresh editor starts with."""
        return cls(
            nodes=[
                Node("start", NodeKind.START, Position(0, 0), label="Start"),
                Node("end", NodeKind.END, Position(1000, 0), label="End"),
            ],
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GrammarGraph:
        """
        Build a graph from a saved grammar or a bare ``{nodes, edges}`` document.

        Raises:
            ValueError: If the document has no node or edge list
        """
        if not isinstance(data, dict) or "nodes" not in data or "edges" not in data:
            raise ValueError("Graph document must contain 'nodes' and 'edges'")

        return cls(
            nodes=[Node.from_dict(n) for n in data["nodes"]],
            edges=[Edge.from_dict(e) for e in data["edges"]],
            name=data.get("name"),
            id=data.get("id"),
        )

    @classmethod
    def load(cls, path: Path | str, grammar: str | None = None) -> GrammarGraph:
        """
        Load a graph from a JSON file.

        The file may hold a single saved grammar, a bare graph, or the list
        of saved grammars the editor keeps; in the last case ``grammar``
        selects an entry by id or name (the first entry if omitted).

        Args:
            path: JSON file to read
            grammar: Id or name of the saved grammar to pick from a list

        Raises:
            ValueError: If the requested grammar is not in the list
        """
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        if isinstance(data, list):
            data = _select_saved(data, grammar)
        elif grammar is not None:
            logger.warning(f"{path} holds a single grammar; ignoring selector {grammar!r}")

        graph = cls.from_dict(data)
        logger.debug(f"Loaded {len(graph.nodes)} nodes and {len(graph.edges)} edges from {path}")
        return graph


def _select_saved(entries: Iterable[dict[str, Any]], grammar: str | None) -> dict[str, Any]:
    entries = list(entries)
    if not entries:
        raise ValueError("Saved grammar list is empty")
    if grammar is None:
        return entries[0]

    for entry in entries:
        if grammar in (entry.get("id"), entry.get("name")):
            return entry

    available = ", ".join(str(e.get("name") or e.get("id")) for e in entries)
    raise ValueError(f"Unknown grammar: {grammar}. Available: {available}")
