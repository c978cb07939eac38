"""
Rule synthesis, optimization and GBNF emission.
"""

from gbnfgraph.grammar.rules import (
    ROOT,
    Rule,
    RuleSet,
    RuleSynthesizer,
    synthesize_rules,
)
from gbnfgraph.grammar.optimizer import optimize
from gbnfgraph.grammar.emitter import emit_grammar
from gbnfgraph.grammar.compiler import (
    CompilerConfig,
    CompileResult,
    GrammarCompiler,
    compile_grammar,
)

__all__ = [
    "ROOT",
    "Rule",
    "RuleSet",
    "RuleSynthesizer",
    "synthesize_rules",
    "optimize",
    "emit_grammar",
    "CompilerConfig",
    "CompileResult",
    "GrammarCompiler",
    "compile_grammar",
]
