"""Geographic export — the filtered records as a FeatureCollection."""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from demand_core.config import config
from demand_core.errors import EmptyExportError
from demand_core.logging import get_logger
from demand_core.types import DEMAND_FIELDS, ORIGINAL_DEMAND_FIELD, ScoredFeature

logger = get_logger("export")

GEOJSON_FILENAME = "pedestrian_demandrank.geojson"


def feature_properties(feature: ScoredFeature) -> Dict[str, Any]:
    """
    Source properties with the current composite written back.

    The composite goes under whichever demand spelling the record shipped
    with (``demand_rank`` by default) next to ``original_demand_rank``.
    """
    properties = dict(feature.record.properties)
    demand_key = next((k for k in DEMAND_FIELDS if k in properties), DEMAND_FIELDS[0])
    properties[demand_key] = feature.composite_score
    properties[ORIGINAL_DEMAND_FIELD] = feature.original_composite_score
    return properties


def to_feature(feature: ScoredFeature) -> Dict[str, Any]:
    return {
        "type": "Feature",
        "geometry": feature.record.geometry,
        "properties": feature_properties(feature),
    }


def to_feature_collection(features: Sequence[ScoredFeature]) -> Dict[str, Any]:
    if not features:
        raise EmptyExportError("GeoJSON")
    return {
        "type": "FeatureCollection",
        "features": [to_feature(f) for f in features],
    }


def write_geojson(features: Sequence[ScoredFeature], path: Optional[str] = None) -> Path:
    """Write the FeatureCollection to *path* (default: exports dir)."""
    target = Path(path) if path else Path(config.get("paths.exports_dir")) / GEOJSON_FILENAME
    collection = to_feature_collection(features)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w") as f:
        json.dump(collection, f)
    logger.info(f"Exported {len(features)} features to {target}")
    return target
