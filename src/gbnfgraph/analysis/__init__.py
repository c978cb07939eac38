"""
Cycle analysis for the renderer.
"""

from gbnfgraph.analysis.cycles import (
    FeedbackRanking,
    GeometricRanking,
    FeedbackAnalysis,
    CycleAnalyzer,
    find_feedback_edges,
    get_ranking,
)

__all__ = [
    "FeedbackRanking",
    "GeometricRanking",
    "FeedbackAnalysis",
    "CycleAnalyzer",
    "find_feedback_edges",
    "get_ranking",
]
