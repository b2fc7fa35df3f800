"""
Render budgeter — caps the records handed to the renderer.

Above the ceiling, records inside the view are preferred and the rest are
Bernoulli-sampled, so the output size is right in expectation only.  The
random source is an injectable numpy Generator; seed it for exact tests.
"""

from typing import List, Optional, Sequence

import numpy as np

from demand_core.config import config
from demand_core.logging import get_logger
from demand_core.types import BoundingBox, ScoredFeature

logger = get_logger("render_budget")


class RenderBudgeter:
    """
    Args:
        max_features: Global render ceiling (``rendering.max_features``).
        rng: Random generator; defaults to one seeded from ``rendering.seed``
            (unseeded when that is unset).
    """

    def __init__(
        self,
        max_features: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.max_features = (
            max_features if max_features is not None else config.get("rendering.max_features")
        )
        if self.max_features <= 0:
            raise ValueError("max_features must be positive")
        self.rng = rng if rng is not None else np.random.default_rng(config.get("rendering.seed"))

    def in_view_mask(self, features: Sequence[ScoredFeature], bounds: BoundingBox) -> np.ndarray:
        """Point-in-rectangle test of each representative position."""
        if not features:
            return np.zeros(0, dtype=bool)
        positions = np.array([f.position for f in features], dtype=np.float64)
        lon, lat = positions[:, 0], positions[:, 1]
        return (
            (lon >= bounds.west) & (lon <= bounds.east)
            & (lat >= bounds.south) & (lat <= bounds.north)
        )

    def cap(self, features: Sequence[ScoredFeature], bounds: BoundingBox) -> List[ScoredFeature]:
        """
        Return at most about ``max_features`` records, in input order.

        Args:
            features: Filtered records.
            bounds: Current view bounds.

        Returns:
            The input unchanged when within the ceiling, otherwise a sample.
        """
        total = len(features)
        ceiling = self.max_features
        if total <= ceiling:
            return list(features)

        in_view = self.in_view_mask(features, bounds)
        in_count = int(in_view.sum())
        out_count = total - in_count
        draws = self.rng.random(total)

        if in_count < ceiling:
            probability = (ceiling - in_count) / out_count
            keep = in_view | (draws < probability)
        else:
            probability = ceiling / in_count
            keep = in_view & (draws < probability)

        sampled = [f for f, k in zip(features, keep) if k]
        logger.debug(
            "Sampled %d of %d records (%d in view, p=%.3f, ceiling %d)",
            len(sampled), total, in_count, probability, ceiling,
        )
        return sampled
