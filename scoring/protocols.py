"""Abstract base classes for the scoring system."""

from abc import ABC, abstractmethod

import numpy as np


class ScoreAggregator(ABC):
    """Protocol for combining per-factor scores into a composite score."""

    @abstractmethod
    def aggregate(self, factors: np.ndarray, weights: np.ndarray) -> np.ndarray:
        """
        Combine a factor matrix into one composite value per row.

        Args:
            factors: (N, F) matrix, one row per record in factor order.
            weights: (F,) weight array in the same factor order.

        Returns:
            (N,) array of composite scores.
        """
        ...
