"""
Rule set optimizations.

Each rewrite removes exactly one rule and reports whether it fired, so the
driver loop in ``optimize`` always terminates. The root rule is never a
candidate.
"""

from __future__ import annotations

import logging
import re

from gbnfgraph.grammar.rules import ROOT, RuleSet

logger = logging.getLogger(__name__)

# One quoted literal or one bracket expression
_ATOM_RE = re.compile(r'^(?:"(?:[^"\\]|\\.)*"|\[(?:[^\]\\]|\\.)*\])$')


def _single_reference_candidates(rule_set: RuleSet):
    """Yield ``(rule, mentioner)`` for rules referenced by exactly one edge."""
    for name, count in rule_set.reference_counts().items():
        if name == ROOT or count != 1 or name not in rule_set.rules:
            continue
        mentioner = rule_set.find_mentioner(name)
        if mentioner is None or mentioner == name or mentioner not in rule_set.rules:
            continue
        yield name, mentioner


def inline_single_references(rule_set: RuleSet) -> bool:
    """
    Fuse a rule into its only mentioner when that mentioner has no other
    successor, collapsing linear chains.
    """
    for name, mentioner_name in _single_reference_candidates(rule_set):
        if len(rule_set.successors(mentioner_name)) != 1:
            continue

        mentioner = rule_set.rules[mentioner_name]
        mentioned = rule_set.rules[name]
        mentioner.intrinsic = f"{mentioner.intrinsic} {mentioned.intrinsic}".strip()
        rule_set.adjacency[mentioner_name] = list(rule_set.successors(name))
        rule_set.remove(name)

        logger.debug(f"Inlined {name} into {mentioner_name}")
        return True

    return False


def merge_identical_rules(rule_set: RuleSet) -> bool:
    """Fold a rule into an earlier one with the same intrinsic and successors."""
    entries = [(n, r) for n, r in rule_set.rules.items() if n != ROOT]

    for i, (keep_name, keep) in enumerate(entries):
        for drop_name, drop in entries[i + 1:]:
            if keep.intrinsic != drop.intrinsic:
                continue
            if rule_set.successors(keep_name) != rule_set.successors(drop_name):
                continue

            for source, targets in rule_set.adjacency.items():
                rule_set.adjacency[source] = [
                    keep_name if t == drop_name else t for t in targets
                ]
            rule_set.remove(drop_name)

            logger.debug(f"Merged {drop_name} into {keep_name}")
            return True

    return False


def inline_fragment(intrinsic: str) -> str:
    """Text that stands in for a rule when it is inlined into a successor list."""
    if _ATOM_RE.match(intrinsic):
        return intrinsic
    return f"({intrinsic})"


def inline_single_mentioner_rules(rule_set: RuleSet) -> bool:
    """
    Replace a singly referenced rule by its pattern when everything it can
    lead to is already reachable from its mentioner.

    Rules whose successors are not a subset of the mentioner's are left
    alone.
    """
    for name, mentioner_name in _single_reference_candidates(rule_set):
        mentioner_targets = rule_set.successors(mentioner_name)
        if not all(t in mentioner_targets for t in rule_set.successors(name)):
            continue

        fragment = inline_fragment(rule_set.rules[name].intrinsic)
        rule_set.adjacency[mentioner_name] = [
            fragment if t == name else t for t in mentioner_targets
        ]
        rule_set.remove(name)

        logger.debug(f"Inlined {name} into {mentioner_name} as {fragment}")
        return True

    return False


def apply_basic_optimizations(rule_set: RuleSet) -> bool:
    return inline_single_references(rule_set) or merge_identical_rules(rule_set)


def optimize(rule_set: RuleSet) -> int:
    """
    Rewrite ``rule_set`` in place until no optimization applies.

    Returns:
        Number of rewrites applied
    """
    rewrites = 0

    while True:
        applied = False

        while apply_basic_optimizations(rule_set):
            rewrites += 1
            applied = True

        if inline_single_mentioner_rules(rule_set):
            rewrites += 1
            applied = True

        if not applied:
            break

    logger.debug(f"Optimizer applied {rewrites} rewrites, {len(rule_set.rules)} rules left")
    return rewrites
