"""
Shareable view-state tokens.

A token is compact JSON, zlib-compressed and URL-safe base64 encoded
without padding, so it can sit in a link's query string.
"""

import base64
import binascii
import json
import zlib
from dataclasses import dataclass
from typing import Any, Dict

from demand_core.errors import DemandConfigError, ShareTokenError
from demand_core.types import BoundingBox, FilterCriteria, ViewportState
from scoring.weights import WeightVector

TOKEN_VERSION = 1


@dataclass(frozen=True)
class ViewState:
    viewport: ViewportState
    criteria: FilterCriteria
    weights: WeightVector


def _payload(state: ViewState) -> Dict[str, Any]:
    viewport, criteria = state.viewport, state.criteria
    bounds = viewport.bounds
    payload = {
        "v": TOKEN_VERSION,
        "c": list(viewport.center_point),
        "z": viewport.zoom,
        "b": [bounds.north, bounds.south, bounds.east, bounds.west],
        "f": {
            "min": criteria.min_score,
            "max": criteria.max_score,
            "ped": int(criteria.pedestrian_feasible_only),
            "urb": int(criteria.urban_only),
            "sw": int(criteria.show_sidewalks),
        },
        "w": state.weights.as_dict(),
    }
    if criteria.preset:
        payload["p"] = criteria.preset
    return payload


def encode_view_state(state: ViewState) -> str:
    raw = json.dumps(_payload(state), separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(zlib.compress(raw, level=9)).decode("ascii").rstrip("=")


def decode_view_state(token: str) -> ViewState:
    """
    Rebuild the viewport, filter criteria and weights from *token*.

    Raises:
        ShareTokenError: The token is malformed or from another version.
    """
    try:
        padded = token + "=" * (-len(token) % 4)
        payload = json.loads(zlib.decompress(base64.urlsafe_b64decode(padded)))
    except (binascii.Error, zlib.error, ValueError) as e:
        raise ShareTokenError(str(e))

    if not isinstance(payload, dict) or payload.get("v") != TOKEN_VERSION:
        raise ShareTokenError("unsupported token version")

    try:
        north, south, east, west = payload["b"]
        lon, lat = payload["c"]
        filters = payload["f"]
        viewport = ViewportState(
            bounds=BoundingBox(north=north, south=south, east=east, west=west),
            zoom=payload["z"],
            center=(lon, lat),
        )
        criteria = FilterCriteria(
            min_score=filters["min"],
            max_score=filters["max"],
            pedestrian_feasible_only=bool(filters["ped"]),
            urban_only=bool(filters["urb"]),
            show_sidewalks=bool(filters["sw"]),
            preset=payload.get("p"),
        )
        weights = WeightVector(payload["w"])
    except (KeyError, TypeError, ValueError, DemandConfigError) as e:
        raise ShareTokenError(f"missing or malformed field: {e}")

    return ViewState(viewport=viewport, criteria=criteria, weights=weights)
