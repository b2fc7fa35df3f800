"""
Rendering package — render budget, score colors and overlay layers.

Public API:
    RenderBudgeter, style_for_score, Style, legend, RenderLayer,
    split_layers, describe_feature
"""

from rendering.budgeter import RenderBudgeter
from rendering.layers import (
    ROAD_LAYER,
    SIDEWALK_LAYER,
    RenderLayer,
    describe_feature,
    split_layers,
)
from rendering.styles import (
    LOWEST_STYLE,
    SCORE_BUCKETS,
    SIDEWALK_STYLE,
    Style,
    hex_to_rgb,
    legend,
    style_for_score,
)

__all__ = [
    "RenderBudgeter",
    "Style",
    "SCORE_BUCKETS",
    "LOWEST_STYLE",
    "SIDEWALK_STYLE",
    "hex_to_rgb",
    "legend",
    "style_for_score",
    "RenderLayer",
    "ROAD_LAYER",
    "SIDEWALK_LAYER",
    "split_layers",
    "describe_feature",
]
