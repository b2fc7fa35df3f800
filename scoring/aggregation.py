"""Score aggregation strategies."""

import numpy as np

from scoring.protocols import ScoreAggregator


class WeightedSumAggregator(ScoreAggregator):
    """
    Raw weighted sum, no normalization.

    Weights that do not sum to 1 scale the composite accordingly; the total
    weight is surfaced to the UI by WeightVector.is_balanced, never corrected
    here.
    """

    def aggregate(self, factors: np.ndarray, weights: np.ndarray) -> np.ndarray:
        if factors.shape[0] == 0:
            return np.zeros(0, dtype=np.float64)
        return factors @ weights
