"""
Feature normalization and chunk construction.

Turns raw GeoJSON features into immutable FeatureRecords and computes the
bounding box of a partition.  The bounding box scans every vertex of every
line, while a line's rendered position is only its first vertex.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from demand_core.logging import get_logger
from demand_core.types import (
    DEMAND_FIELDS,
    FACTOR_FIELDS,
    ID_FIELD,
    PEDESTRIAN_FEASIBLE_FIELD,
    SIDEWALK_FIELD,
    URBAN_CONTEXT_FIELD,
    BoundingBox,
    Chunk,
    FeatureRecord,
    LonLat,
)

logger = get_logger("ingest")


@dataclass
class IngestStats:
    """Counters for one or more ingested partitions."""
    features_seen: int = 0
    records_kept: int = 0
    dropped_no_position: int = 0

    def merge(self, other: "IngestStats") -> None:
        self.features_seen += other.features_seen
        self.records_kept += other.records_kept
        self.dropped_no_position += other.dropped_no_position


# ---------------------------------------------------------------------------
# Coordinate helpers
# ---------------------------------------------------------------------------

def _as_vertex(value: Any) -> Optional[LonLat]:
    """Return (lon, lat) from a coordinate pair, or None if unusable."""
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        return None
    lon, lat = value[0], value[1]
    if isinstance(lon, bool) or isinstance(lat, bool):
        return None
    if not isinstance(lon, (int, float)) or not isinstance(lat, (int, float)):
        return None
    return (float(lon), float(lat))


def _vertices(geometry: Dict[str, Any]) -> List[LonLat]:
    """All usable vertices of a Point or LineString; other types yield none."""
    geom_type = geometry.get("type")
    coords = geometry.get("coordinates")
    if geom_type == "Point":
        vertex = _as_vertex(coords)
        return [vertex] if vertex else []
    if geom_type == "LineString" and isinstance(coords, (list, tuple)):
        return [v for v in (_as_vertex(c) for c in coords) if v]
    return []


def representative_position(geometry: Optional[Dict[str, Any]]) -> Optional[LonLat]:
    """The point itself for a Point, the first vertex for a LineString."""
    if not isinstance(geometry, dict):
        return None
    geom_type = geometry.get("type")
    coords = geometry.get("coordinates")
    if geom_type == "Point":
        return _as_vertex(coords)
    if geom_type == "LineString" and isinstance(coords, (list, tuple)) and coords:
        return _as_vertex(coords[0])
    return None


def compute_bounds(features: Sequence[Dict[str, Any]]) -> Optional[BoundingBox]:
    """
    Bounding box over every geometry vertex in *features*.

    Returns None when no feature carries a usable Point or LineString.
    """
    min_lat = min_lng = math.inf
    max_lat = max_lng = -math.inf
    scanned = False

    for feature in features:
        geometry = feature.get("geometry") if isinstance(feature, dict) else None
        if not isinstance(geometry, dict):
            continue
        for lon, lat in _vertices(geometry):
            scanned = True
            min_lng = min(min_lng, lon)
            max_lng = max(max_lng, lon)
            min_lat = min(min_lat, lat)
            max_lat = max(max_lat, lat)

    if not scanned:
        return None
    return BoundingBox(north=max_lat, south=min_lat, east=max_lng, west=min_lng)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

def _as_float(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _as_flag(value: Any) -> bool:
    # Flags are shipped as integers; only an exact 1 counts as set.
    return not isinstance(value, str) and value == 1


def _demand_value(properties: Dict[str, Any]) -> Optional[float]:
    for field_name in DEMAND_FIELDS:
        if properties.get(field_name) is not None:
            value = _as_float(properties[field_name])
            return None if math.isnan(value) else value
    return None


def normalize_feature(feature: Any) -> Optional[FeatureRecord]:
    """
    Build a FeatureRecord from a raw GeoJSON feature.

    Returns None when the feature has no usable position.  Missing factor
    values become NaN so the record's composite is rejected downstream; a
    non-mapping ``properties`` member is treated as empty.
    """
    if not isinstance(feature, dict):
        return None
    geometry = feature.get("geometry")
    position = representative_position(geometry)
    if position is None:
        return None

    properties = feature.get("properties")
    if not isinstance(properties, dict):
        properties = {}
    factors = tuple(_as_float(properties.get(f)) for f in FACTOR_FIELDS.values())

    return FeatureRecord(
        position=position,
        factors=factors,
        pedestrian_feasible=_as_flag(properties.get(PEDESTRIAN_FEASIBLE_FIELD)),
        urban_context=_as_flag(properties.get(URBAN_CONTEXT_FIELD)),
        has_sidewalk=_as_flag(properties.get(SIDEWALK_FIELD)),
        feature_id=properties.get(ID_FIELD, feature.get("id")),
        demand_rank=_demand_value(properties),
        geometry=geometry,
        properties=dict(properties),
    )


def extract_features(payload: Any) -> List[Any]:
    """Features of a FeatureCollection, or the payload itself if it is a list."""
    if isinstance(payload, dict):
        features = payload.get("features")
        return list(features) if isinstance(features, list) else []
    if isinstance(payload, list):
        return payload
    return []


def build_chunk(index: int, features: Sequence[Any]) -> Tuple[Chunk, IngestStats]:
    """
    Normalize *features* into a Chunk.

    Args:
        index: Partition index of the chunk.
        features: Raw GeoJSON feature dicts.

    Returns:
        (chunk, stats) — stats counts records dropped for lacking a position.
    """
    stats = IngestStats(features_seen=len(features))
    records = []
    for feature in features:
        record = normalize_feature(feature)
        if record is None:
            stats.dropped_no_position += 1
            continue
        records.append(record)
    stats.records_kept = len(records)

    if stats.dropped_no_position:
        logger.debug(
            "Chunk %d: dropped %d of %d features without a usable position",
            index, stats.dropped_no_position, stats.features_seen,
        )

    bounds = compute_bounds([f for f in features if isinstance(f, dict)])
    return Chunk(index=index, records=tuple(records), bounding_box=bounds), stats
