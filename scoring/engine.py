"""Scoring engine — derives composite scores for every loaded record."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import numpy as np

from demand_core.logging import get_logger
from demand_core.types import Chunk, FeatureRecord, ScoredFeature
from scoring.aggregation import WeightedSumAggregator
from scoring.protocols import ScoreAggregator
from scoring.registry import FactorRegistry
from scoring.weights import WeightVector

logger = get_logger("scoring")


@dataclass(frozen=True)
class ScoreSnapshot:
    """
    Composite scores for one weight vector, keyed by chunk index.

    Arrays are read-only and aligned with ``chunk.records``.
    """
    weights: WeightVector
    composites: Dict[int, np.ndarray]
    originals: Dict[int, np.ndarray]

    @property
    def record_count(self) -> int:
        return sum(len(a) for a in self.composites.values())

    def scored_features(self, chunk: Chunk) -> List[ScoredFeature]:
        """Pair each record of *chunk* with its scores."""
        composite = self.composites[chunk.index]
        original = self.originals[chunk.index]
        return [
            ScoredFeature(
                record=record,
                composite_score=float(composite[i]),
                original_composite_score=float(original[i]),
                chunk_index=chunk.index,
            )
            for i, record in enumerate(chunk.records)
        ]


class ScoringEngine:
    """
    Recomputes composite scores from a weight vector.

    The first time a chunk is scored, each record's original composite is
    captured: the demand value shipped with the data when present, else the
    composite computed on that first pass.  Later passes never touch it.

    Args:
        aggregator: Optional aggregator (defaults to WeightedSumAggregator).
        registry: Optional factor registry (defaults to the built-in factors).
    """

    def __init__(
        self,
        aggregator: Optional[ScoreAggregator] = None,
        registry: Optional[FactorRegistry] = None,
    ):
        self.aggregator = aggregator or WeightedSumAggregator()
        self.registry = registry or FactorRegistry()
        self._originals: Dict[int, np.ndarray] = {}

    def recompute(self, weights: WeightVector, chunks: Iterable[Chunk]) -> ScoreSnapshot:
        """
        Score every record of every chunk, active or not.

        Args:
            weights: Weight vector to apply.
            chunks: All loaded chunks.

        Returns:
            ScoreSnapshot with one composite array per chunk.
        """
        if not weights.is_balanced():
            heaviest = max(self.registry.names, key=lambda n: weights[n])
            logger.warning(
                "Weights sum to %.0f%% rather than 100%%; composites are not normalized "
                "(heaviest factor: %s)",
                weights.total * 100, self.registry.labels[heaviest],
            )

        weight_array = weights.as_array()
        composites: Dict[int, np.ndarray] = {}

        for chunk in chunks:
            composite = self.aggregator.aggregate(chunk.factor_matrix, weight_array)
            composite.setflags(write=False)
            composites[chunk.index] = composite

            if chunk.index not in self._originals:
                self._originals[chunk.index] = self._capture_originals(chunk, composite)

        originals = {idx: self._originals[idx] for idx in composites}
        snapshot = ScoreSnapshot(weights=weights, composites=composites, originals=originals)
        logger.debug("Recomputed %d composites across %d chunks", snapshot.record_count, len(composites))
        return snapshot

    def score(self, weights: WeightVector, record: FeatureRecord) -> float:
        """Composite score of a single record."""
        row = np.array([record.factors], dtype=np.float64)
        return float(self.aggregator.aggregate(row, weights.as_array())[0])

    @staticmethod
    def _capture_originals(chunk: Chunk, composite: np.ndarray) -> np.ndarray:
        shipped = np.array(
            [np.nan if r.demand_rank is None else r.demand_rank for r in chunk.records],
            dtype=np.float64,
        )
        original = np.where(np.isnan(shipped), composite, shipped)
        original.setflags(write=False)
        return original
