"""
Domain types for the DemandRank pipeline.

Lightweight dataclasses that define the vocabulary of the entire system.
Base records and chunks are immutable once ingested; derived scores live in
ScoredFeature views produced by the scoring engine, never on the records.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

import numpy as np

# ---------------------------------------------------------------------------
# Input data contract
# ---------------------------------------------------------------------------

FACTOR_FIELDS: Dict[str, str] = {
    "census": "census_score",
    "crash": "crash_risk_score",
    "funcClass": "functional_class_score",
    "school": "school_proximity_score",
    "trail": "trail_proximity_score",
    "rail": "rail_proximity_score",
    "bus": "bus_proximity_score",
}
"""Factor name -> property field, in factor-column order."""

FACTOR_NAMES: Tuple[str, ...] = tuple(FACTOR_FIELDS)

DEMAND_FIELDS: Tuple[str, ...] = ("demand_rank", "DemandRank")
"""Accepted spellings of the composite demand value, first wins."""

ORIGINAL_DEMAND_FIELD = "original_demand_rank"
ID_FIELD = "id"
PEDESTRIAN_FEASIBLE_FIELD = "pedestrian_feasible"
URBAN_CONTEXT_FIELD = "urban_context"
SIDEWALK_FIELD = "sidewalks"

LonLat = Tuple[float, float]


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned lon/lat rectangle.  No antimeridian handling."""
    north: float
    south: float
    east: float
    west: float

    @property
    def centroid(self) -> LonLat:
        return ((self.east + self.west) / 2, (self.north + self.south) / 2)

    def intersects(self, other: "BoundingBox") -> bool:
        return not (
            self.west > other.east
            or self.east < other.west
            or self.north < other.south
            or self.south > other.north
        )

    def contains(self, lon: float, lat: float) -> bool:
        return self.west <= lon <= self.east and self.south <= lat <= self.north

    def distance_to(self, point: LonLat) -> float:
        """Euclidean distance in raw degrees from the centroid to *point*."""
        cx, cy = self.centroid
        return math.hypot(cx - point[0], cy - point[1])


# ---------------------------------------------------------------------------
# Records and chunks
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class FeatureRecord:
    """
    One road/path segment (or point) as ingested.

    *position* is the representative coordinate: the point itself, or the
    first vertex of a line.  *factors* follows FACTOR_NAMES order.
    *demand_rank* is the composite value shipped with the data, if any.
    """
    position: LonLat
    factors: Tuple[float, ...]
    pedestrian_feasible: bool
    urban_context: bool
    has_sidewalk: bool
    feature_id: Optional[Any] = None
    demand_rank: Optional[float] = None
    geometry: Dict[str, Any] = field(default_factory=dict, repr=False)
    properties: Dict[str, Any] = field(default_factory=dict, repr=False)

    def factor(self, name: str) -> float:
        return self.factors[FACTOR_NAMES.index(name)]


@dataclass(frozen=True, eq=False)
class Chunk:
    """
    An immutable batch of records loaded together from one partition.

    *bounding_box* covers every vertex of every geometry in the partition
    and is None when the partition held no usable geometry.
    """
    index: int
    records: Tuple[FeatureRecord, ...]
    bounding_box: Optional[BoundingBox]
    factor_matrix: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        matrix = np.array(
            [r.factors for r in self.records], dtype=np.float64
        ).reshape(len(self.records), len(FACTOR_NAMES))
        matrix.setflags(write=False)
        object.__setattr__(self, "factor_matrix", matrix)

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True, eq=False)
class ScoredFeature:
    """A record paired with the composite scores derived for it."""
    record: FeatureRecord
    composite_score: float
    original_composite_score: float
    chunk_index: int = -1

    @property
    def position(self) -> LonLat:
        return self.record.position


# ---------------------------------------------------------------------------
# View and filter state
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ViewportState:
    """Visible bounds plus zoom; *center* defaults to the bounds centroid."""
    bounds: BoundingBox
    zoom: float
    center: Optional[LonLat] = None

    @property
    def center_point(self) -> LonLat:
        return self.center if self.center is not None else self.bounds.centroid


@dataclass(frozen=True)
class FilterCriteria:
    """
    Score range (inclusive), boolean toggles and at most one preset name.

    *show_sidewalks* does not narrow the set; it asks the renderer to split
    records with an existing sidewalk into their own layer.
    """
    min_score: float = 0.0
    max_score: float = 100.0
    pedestrian_feasible_only: bool = False
    urban_only: bool = False
    show_sidewalks: bool = False
    preset: Optional[str] = None

    def with_min_score(self, value: float) -> "FilterCriteria":
        """Move the lower bound, dragging the upper bound up if needed."""
        return replace(self, min_score=value, max_score=max(self.max_score, value))

    def with_max_score(self, value: float) -> "FilterCriteria":
        """Move the upper bound, dragging the lower bound down if needed."""
        return replace(self, max_score=value, min_score=min(self.min_score, value))
