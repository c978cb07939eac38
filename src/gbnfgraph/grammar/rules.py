"""
Rule synthesis.

Every node becomes a grammar rule: a name, the pattern the node matches on
its own (its intrinsic), and the rules that may follow it.
"""

from __future__ import annotations

import logging
import re
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Callable, Sequence

from gbnfgraph.core.graph import Edge, Node, NodeKind

logger = logging.getLogger(__name__)

ROOT = "root"


@dataclass
class Rule:
    """A grammar production without its successors."""
    name: str
    intrinsic: str = ""


@dataclass
class RuleSet:
    """
    Working state for one compilation.

    ``rules`` holds every real rule; ``adjacency`` maps a rule name to the
    ordered names that may follow it. Successor entries may also be the
    empty end name or an inlined pattern fragment, neither of which has a
    rule of its own.
    """
    rules: dict[str, Rule] = field(default_factory=dict)
    adjacency: dict[str, list[str]] = field(default_factory=dict)

    def successors(self, name: str) -> list[str]:
        return self.adjacency.get(name, [])

    def reference_counts(self) -> dict[str, int]:
        """How many edges point at each name, in first-seen order."""
        counts = {name: 0 for name in self.adjacency}
        for targets in self.adjacency.values():
            for target in targets:
                counts[target] = counts.get(target, 0) + 1
        return counts

    def find_mentioner(self, name: str) -> str | None:
        """First rule whose successors include ``name``."""
        for source, targets in self.adjacency.items():
            if name in targets:
                return source
        return None

    def remove(self, name: str):
        self.rules.pop(name, None)
        self.adjacency.pop(name, None)

    def copy(self) -> RuleSet:
        return deepcopy(self)


def normalize_identifier(name: str) -> str:
    """Lowercase, map anything outside ``[a-z0-9_]`` to ``_``, never start with a digit."""
    normalized = re.sub(r"[^a-z0-9_]", "_", name.lower())
    return f"_{normalized}" if normalized[:1].isdigit() else normalized


def make_unique_name(name: str, existing: set[str]) -> str:
    """Append the smallest positive counter that makes ``name`` unused."""
    if name not in existing:
        return name
    counter = 1
    while f"{name}{counter}" in existing:
        counter += 1
    return f"{name}{counter}"


def quote_literal(text: str) -> str:
    escaped = (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def _no_pattern(node: Node) -> str:
    return ""


def _fixed(pattern: str) -> Callable[[Node], str]:
    return lambda node: pattern


INTRINSICS: dict[NodeKind, Callable[[Node], str]] = {
    NodeKind.START: _no_pattern,
    NodeKind.END: _no_pattern,
    NodeKind.ROUTER: _no_pattern,
    NodeKind.STRING: lambda node: quote_literal(str(node.properties.get("value") or "")),
    NodeKind.CHAR_SET: lambda node: str(node.properties.get("pattern") or "[]"),
    NodeKind.LETTER: _fixed("[a-zA-Z]"),
    NodeKind.DIGIT: _fixed("[0-9]"),
    NodeKind.NON_NEWLINE: _fixed("[^\\n]"),
    NodeKind.IDENTIFIER: _fixed("[a-zA-Z_][a-zA-Z0-9_]*"),
    NodeKind.TIME: _fixed('[0-9] [0-9]? ("s" | "m" | "h" | "d" | "w" | "mo" | "y")'),
}


def intrinsic_pattern(node: Node) -> str:
    """The pattern a node matches independent of its connections."""
    return INTRINSICS[node.kind](node)


class RuleSynthesizer:
    """
    Turns a node/edge snapshot into a fresh RuleSet.

    Naming happens in two passes so user-chosen names always win over
    generated ``_rule<index>`` names.
    """

    def synthesize(self, nodes: Sequence[Node], edges: Sequence[Edge]) -> RuleSet:
        names = self.assign_names(nodes)
        rule_set = RuleSet()

        for node in nodes:
            name = names[node.id]
            # The end node only terminates alternatives
            if node.kind is NodeKind.END or name in rule_set.rules:
                continue
            rule_set.rules[name] = Rule(name=name, intrinsic=intrinsic_pattern(node))

        for edge in edges:
            if edge.source not in names or edge.target not in names:
                logger.warning(f"Skipping edge {edge.key}: unknown endpoint")
                continue
            source = names[edge.source]
            rule_set.adjacency.setdefault(source, []).append(names[edge.target])

        logger.debug(f"Synthesized {len(rule_set.rules)} rules from {len(nodes)} nodes")
        return rule_set

    def assign_names(self, nodes: Sequence[Node]) -> dict[str, str]:
        """Map node id to rule name."""
        existing = {ROOT}
        claimed = {}

        for node in nodes:
            if node.name and not node.kind.is_sentinel:
                unique = make_unique_name(normalize_identifier(node.name), existing)
                claimed[node.id] = unique
                existing.add(unique)

        names = {}
        for index, node in enumerate(nodes):
            if node.kind is NodeKind.START:
                names[node.id] = ROOT
            elif node.kind is NodeKind.END:
                names[node.id] = ""
            elif node.id in claimed:
                names[node.id] = claimed[node.id]
            else:
                default = make_unique_name(f"_rule{index}", existing)
                existing.add(default)
                names[node.id] = default

        return names


def synthesize_rules(nodes: Sequence[Node], edges: Sequence[Edge]) -> RuleSet:
    return RuleSynthesizer().synthesize(nodes, edges)
