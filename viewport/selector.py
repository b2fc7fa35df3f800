"""
Viewport selector — picks the active chunks for the current view.

Candidates are the chunks whose bounding box overlaps the view (plain AABB
test, no antimeridian wraparound), ordered by raw lon/lat distance from the
chunk centroid to the view center, ties broken by chunk index.  Chunks are
admitted whole while the running record count stays within the zoom budget;
the first chunk that would overflow ends the walk.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from demand_core.logging import get_logger
from demand_core.types import Chunk, ViewportState
from viewport.budget import ZoomBudget

logger = get_logger("viewport")


@dataclass(frozen=True)
class Selection:
    """Active chunks for one viewport, nearest first."""
    chunks: Tuple[Chunk, ...]
    budget: int
    candidate_count: int

    @property
    def indices(self) -> Tuple[int, ...]:
        return tuple(c.index for c in self.chunks)

    @property
    def record_count(self) -> int:
        return sum(len(c) for c in self.chunks)


class ViewportSelector:
    """
    Args:
        budget: Zoom budget table (defaults to ``viewport.zoom_thresholds``).
    """

    def __init__(self, budget: Optional[ZoomBudget] = None):
        self.budget = budget or ZoomBudget()

    def candidates(self, viewport: ViewportState, chunks: Iterable[Chunk]) -> List[Chunk]:
        """Chunks intersecting the view, nearest centroid first."""
        center = viewport.center_point
        hits = [
            c for c in chunks
            if c.bounding_box is not None and c.bounding_box.intersects(viewport.bounds)
        ]
        hits.sort(key=lambda c: (c.bounding_box.distance_to(center), c.index))
        return hits

    def select(self, viewport: ViewportState, chunks: Iterable[Chunk]) -> Selection:
        """Replace the active set for *viewport*; never admits a partial chunk."""
        budget = self.budget.for_zoom(viewport.zoom)
        candidates = self.candidates(viewport, chunks)

        active = []
        feature_count = 0
        for chunk in candidates:
            if feature_count + len(chunk) > budget:
                break
            active.append(chunk)
            feature_count += len(chunk)

        logger.debug(
            "Zoom %.1f: %d/%d candidate chunks active (%d of %d budget)",
            viewport.zoom, len(active), len(candidates), feature_count, budget,
        )
        return Selection(chunks=tuple(active), budget=budget, candidate_count=len(candidates))
