"""
Graph-to-grammar compilation.

Runs validation, rule synthesis, optimization and emission over one
snapshot of the editor's nodes and edges.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from gbnfgraph.core.graph import Edge, GrammarGraph, Node
from gbnfgraph.core.validation import GraphValidationError, ValidationReport, validate_graph
from gbnfgraph.grammar.emitter import emit_grammar
from gbnfgraph.grammar.optimizer import optimize
from gbnfgraph.grammar.rules import RuleSet, RuleSynthesizer

logger = logging.getLogger(__name__)


@dataclass
class CompilerConfig:
    """Configuration for the compiler."""

    # Run the rule rewriter before emitting
    optimize: bool = True

    # Feedback ranking used by the ``cycles`` command
    ranking: str = "geometric"

    @classmethod
    def from_config_file(cls, path: Path | str) -> "CompilerConfig":
        """
        Load config from a TOML file.

        Expected format:
```toml
        [compiler]
        optimize = true

        [cycles]
        ranking = "geometric"
```
        """
        import tomllib

        with open(path, "rb") as f:
            data = tomllib.load(f)

        config = cls()
        if "compiler" in data:
            config.optimize = data["compiler"].get("optimize", config.optimize)
        if "cycles" in data:
            config.ranking = data["cycles"].get("ranking", config.ranking)

        return config


@dataclass
class CompileResult:
    """Result of compiling a graph."""
    grammar: str
    rule_set: RuleSet
    rewrites: int
    report: ValidationReport


class GrammarCompiler:
    """Compiles editor graphs into GBNF."""

    def __init__(self, config: CompilerConfig | None = None):
        self.config = config or CompilerConfig()
        self._synthesizer = RuleSynthesizer()

    def validate(self, graph: GrammarGraph) -> ValidationReport:
        return validate_graph(graph.nodes, graph.edges)

    def compile(self, graph: GrammarGraph) -> CompileResult:
        """
        Compile a graph.

        Raises:
            GraphValidationError: If the graph is not fully connected; no
                grammar is produced in that case
        """
        report = self.validate(graph)
        if not report.valid:
            raise GraphValidationError(report)

        # Work on copies so the caller's snapshot is never touched
        nodes = list(graph.nodes)
        edges = list(graph.edges)

        logger.info(f"Synthesizing rules for {len(nodes)} nodes, {len(edges)} edges")
        rule_set = self._synthesizer.synthesize(nodes, edges)

        rewrites = 0
        if self.config.optimize:
            rewrites = optimize(rule_set)
            logger.info(f"Optimized to {len(rule_set.rules)} rules ({rewrites} rewrites)")

        grammar = emit_grammar(rule_set)
        return CompileResult(
            grammar=grammar,
            rule_set=rule_set,
            rewrites=rewrites,
            report=report,
        )


def compile_grammar(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    config: CompilerConfig | None = None,
) -> str:
    """
    Compile nodes and edges into GBNF text.

    Raises:
        GraphValidationError: If validation fails
    """
    graph = GrammarGraph(nodes=list(nodes), edges=list(edges))
    return GrammarCompiler(config).compile(graph).grammar
