"""
GBNF text emission.
"""

from __future__ import annotations

from gbnfgraph.grammar.rules import ROOT, RuleSet


def render_alternatives(alternatives: list[str]) -> str:
    """
    Render a successor list.

    Empty names come from edges into the end node; dropping them makes the
    whole group optional.
    """
    non_empty = [a for a in alternatives if a]
    if not non_empty:
        return ""

    if len(non_empty) == 1:
        joined = non_empty[0]
    else:
        joined = f"({' | '.join(non_empty)})"

    return joined if len(non_empty) == len(alternatives) else f"{joined}?"


def rule_body(rule_set: RuleSet, name: str) -> str:
    rule = rule_set.rules[name]
    return f"{rule.intrinsic} {render_alternatives(rule_set.successors(name))}".strip()


def emit_grammar(rule_set: RuleSet) -> str:
    """
    Serialize the rules, root first and the rest by code point order,
    skipping empty bodies.

    A root with an empty body is still written as ``root ::= ""`` whenever
    other rules are emitted, since the decoder always starts from root.
    """
    names = sorted(n for n in rule_set.rules if n != ROOT)

    lines = []
    for name in names:
        body = rule_body(rule_set, name)
        if body:
            lines.append(f"{name} ::= {body}")

    root_body = rule_body(rule_set, ROOT) if ROOT in rule_set.rules else ""
    if root_body:
        lines.insert(0, f"{ROOT} ::= {root_body}")
    elif lines:
        lines.insert(0, f'{ROOT} ::= ""')

    return "\n".join(lines)
