"""Application state and render frames."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from demand_core.types import FilterCriteria, ScoredFeature, ViewportState
from rendering.layers import RenderLayer
from scoring.engine import ScoreSnapshot
from scoring.weights import WeightVector
from viewport.selector import Selection


@dataclass(frozen=True)
class ApplicationState:
    """
    Everything a recompute cycle reads.

    Replaced wholesale on every change; a cycle works on the instance it
    started with, so its result is internally consistent.
    """
    weights: WeightVector
    criteria: FilterCriteria
    viewport: Optional[ViewportState] = None
    snapshot: Optional[ScoreSnapshot] = None
    selection: Optional[Selection] = None


@dataclass(frozen=True)
class RenderFrame:
    """Output of one recompute cycle, tagged with its generation."""
    generation: int
    viewport: ViewportState
    active_chunks: Tuple[int, ...]
    budget: int
    filtered: List[ScoredFeature]
    rendered: List[ScoredFeature]
    layers: List[RenderLayer]
    rejected: Dict[str, int] = field(default_factory=dict)

    @property
    def filtered_count(self) -> int:
        return len(self.filtered)

    @property
    def rendered_count(self) -> int:
        return len(self.rendered)
