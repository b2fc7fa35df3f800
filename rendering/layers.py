"""Render layers handed to the external map overlay."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from demand_core.types import ScoredFeature
from rendering.styles import RGB, SIDEWALK_STYLE, style_for_score
from scoring.registry import FactorRegistry

ROAD_LAYER = "road-layer"
SIDEWALK_LAYER = "sidewalk-layer"


@dataclass(frozen=True)
class RenderLayer:
    """One overlay layer: records plus one line color per record."""
    layer_id: str
    features: List[ScoredFeature]
    colors: List[RGB]

    def __len__(self) -> int:
        return len(self.features)


def split_layers(features: Sequence[ScoredFeature], show_sidewalks: bool) -> List[RenderLayer]:
    """
    Build the road layer (score colors) and, when *show_sidewalks* is on,
    a separate green layer for records with an existing sidewalk.

    Empty layers are omitted.
    """
    if show_sidewalks:
        roads = [f for f in features if not f.record.has_sidewalk]
        sidewalks = [f for f in features if f.record.has_sidewalk]
    else:
        roads, sidewalks = list(features), []

    layers = []
    if roads:
        layers.append(RenderLayer(
            ROAD_LAYER, roads, [style_for_score(f.composite_score).rgb for f in roads],
        ))
    if sidewalks:
        layers.append(RenderLayer(
            SIDEWALK_LAYER, sidewalks, [SIDEWALK_STYLE.rgb] * len(sidewalks),
        ))
    return layers


def describe_feature(feature: ScoredFeature, registry: Optional[FactorRegistry] = None) -> Dict[str, str]:
    """Hover tooltip fields for one record."""
    labels = (registry or FactorRegistry()).labels
    record = feature.record
    return {
        "DemandRank": f"{feature.composite_score:.2f}",
        f"{labels['census']} Score": f"{record.factor('census'):g}",
        f"{labels['crash']} Score": f"{record.factor('crash'):g}",
        "Pedestrian Feasible": "Yes" if record.pedestrian_feasible else "No",
        "Urban Context": "Urban" if record.urban_context else "Rural",
        "Existing Sidewalks": "Yes" if record.has_sidewalk else "No",
    }
