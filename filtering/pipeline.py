"""
Filter pipeline — narrows the active records by validity, score range,
boolean toggles and an optional preset.

All stages are conjunctive and order-preserving, so the pipeline is
idempotent: filtering its own output returns the same records.
"""

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from demand_core.logging import get_logger
from demand_core.types import FilterCriteria, ScoredFeature
from filtering.presets import PresetRegistry

logger = get_logger("filtering")

Stage = Callable[[ScoredFeature], bool]


def has_valid_position(feature: ScoredFeature) -> bool:
    """Finite lon in [-180, 180], lat in [-90, 90], and a finite composite."""
    position = feature.position
    if position is None or len(position) != 2:
        return False
    lon, lat = position
    if not (math.isfinite(lon) and math.isfinite(lat)):
        return False
    if not (-180 <= lon <= 180 and -90 <= lat <= 90):
        return False
    return math.isfinite(feature.composite_score)


@dataclass
class FilterResult:
    features: List[ScoredFeature]
    rejected: Dict[str, int] = field(default_factory=dict)


class FilterPipeline:
    """
    Args:
        presets: Preset registry (defaults to the built-in presets).
    """

    def __init__(self, presets: Optional[PresetRegistry] = None):
        self.presets = presets or PresetRegistry()

    def stages(self, criteria: FilterCriteria) -> List[Tuple[str, Stage]]:
        """Ordered (name, test) stages for *criteria*."""
        low, high = criteria.min_score, criteria.max_score
        stages: List[Tuple[str, Stage]] = [
            ("validity", has_valid_position),
            ("score_range", lambda f: low <= f.composite_score <= high),
        ]
        if criteria.pedestrian_feasible_only:
            stages.append(("pedestrian_feasible", lambda f: f.record.pedestrian_feasible))
        if criteria.urban_only:
            stages.append(("urban_context", lambda f: f.record.urban_context))
        if criteria.preset:
            preset = self.presets.resolve(criteria.preset)
            stages.append((f"preset:{preset.name}", preset.predicate.matches))
        return stages

    def run(self, features: Iterable[ScoredFeature], criteria: FilterCriteria) -> FilterResult:
        """Filter *features*, counting rejections per stage."""
        stages = self.stages(criteria)
        rejected = {name: 0 for name, _ in stages}
        kept = []
        for feature in features:
            for name, test in stages:
                if not test(feature):
                    rejected[name] += 1
                    break
            else:
                kept.append(feature)

        if rejected["validity"]:
            logger.debug("Dropped %d records with invalid position or score", rejected["validity"])
        return FilterResult(features=kept, rejected=rejected)

    def apply(self, features: Iterable[ScoredFeature], criteria: FilterCriteria) -> List[ScoredFeature]:
        return self.run(features, criteria).features
