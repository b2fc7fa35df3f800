"""
Scoring package — weighted composite DemandRank scores.

Public API:
    ScoringEngine, ScoreSnapshot, WeightVector, FactorRegistry,
    ScoreAggregator, WeightedSumAggregator
"""

from scoring.aggregation import WeightedSumAggregator
from scoring.engine import ScoreSnapshot, ScoringEngine
from scoring.protocols import ScoreAggregator
from scoring.registry import BUILTIN_FACTORS, Factor, FactorRegistry
from scoring.weights import WeightVector

__all__ = [
    "ScoreAggregator",
    "WeightedSumAggregator",
    "ScoringEngine",
    "ScoreSnapshot",
    "Factor",
    "FactorRegistry",
    "BUILTIN_FACTORS",
    "WeightVector",
]
