"""
Shared pytest fixtures for the DemandRank pipeline tests.

The conftest resets the Config singleton to an empty in-memory config so
every test sees schema defaults, whatever config.json sits in the working
directory.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

# Ensure project root is on sys.path so imports work from tests/
sys.path.insert(0, str(Path(__file__).parent.parent))

from demand_core.config import config

config._config = {}

import pytest

from chunks.ingest import build_chunk
from demand_core.types import FACTOR_FIELDS, FACTOR_NAMES, FeatureRecord, ScoredFeature

DEFAULT_FACTORS = (10, 10, 7, 10, 7, 7, 10)


def _make_feature(
    lon: float = -72.7,
    lat: float = 41.6,
    factors: Sequence[float] = DEFAULT_FACTORS,
    demand: Optional[float] = None,
    pedestrian_feasible: int = 1,
    urban_context: int = 1,
    sidewalks: int = 0,
    line_to: Optional[List[float]] = None,
    **extra: Any,
) -> Dict[str, Any]:
    """Raw GeoJSON feature; a LineString from (lon, lat) when *line_to* is given."""
    properties: Dict[str, Any] = dict(zip(FACTOR_FIELDS.values(), factors))
    properties.update(
        pedestrian_feasible=pedestrian_feasible,
        urban_context=urban_context,
        sidewalks=sidewalks,
    )
    if demand is not None:
        properties["demand_rank"] = demand
    properties.update(extra)

    if line_to is None:
        geometry = {"type": "Point", "coordinates": [lon, lat]}
    else:
        geometry = {"type": "LineString", "coordinates": [[lon, lat], line_to]}
    return {"type": "Feature", "geometry": geometry, "properties": properties}


def _make_box_chunk(index: int, west: float, east: float, south: float, north: float, count: int = 1):
    """Chunk whose bounding box is exactly [west,east] x [south,north]."""
    features = [_make_feature(west, south, line_to=[east, north]) for _ in range(count)]
    chunk, _stats = build_chunk(index, features)
    return chunk


def _make_scored(
    composite: float,
    crash: float = 10,
    sidewalk: bool = False,
    pedestrian_feasible: bool = True,
    urban_context: bool = True,
    position=(-72.7, 41.6),
) -> ScoredFeature:
    factors = [5.0] * len(FACTOR_NAMES)
    factors[FACTOR_NAMES.index("crash")] = crash
    record = FeatureRecord(
        position=position,
        factors=tuple(factors),
        pedestrian_feasible=pedestrian_feasible,
        urban_context=urban_context,
        has_sidewalk=sidewalk,
    )
    return ScoredFeature(record=record, composite_score=composite, original_composite_score=composite)


@pytest.fixture(autouse=True)
def _reset_config():
    """Restore the empty in-memory config around every test."""
    config._config = {}
    yield
    config._config = {}


@pytest.fixture
def make_feature():
    return _make_feature


@pytest.fixture
def make_box_chunk():
    return _make_box_chunk


@pytest.fixture
def make_scored():
    return _make_scored
