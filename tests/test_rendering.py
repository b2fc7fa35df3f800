"""Tests for rendering/ — render budget, color buckets, layers."""

import math

import numpy as np
import pytest

from demand_core.types import BoundingBox
from rendering import (
    LOWEST_STYLE,
    ROAD_LAYER,
    SIDEWALK_LAYER,
    SIDEWALK_STYLE,
    RenderBudgeter,
    describe_feature,
    hex_to_rgb,
    legend,
    split_layers,
    style_for_score,
)

VIEW = BoundingBox(north=1.0, south=0.0, east=1.0, west=0.0)
INSIDE = (0.5, 0.5)
OUTSIDE = (10.0, 10.0)


@pytest.fixture
def population(make_scored):
    """Build *inside* in-view records followed by *outside* out-of-view ones."""
    def _build(inside, outside):
        return (
            [make_scored(40, position=INSIDE) for _ in range(inside)]
            + [make_scored(40, position=OUTSIDE) for _ in range(outside)]
        )
    return _build


# ── Render budget ─────────────────────────────────────────────

class TestRenderBudgeter:
    def test_under_ceiling_passes_through(self, population):
        features = population(3, 5)
        budgeter = RenderBudgeter(max_features=8, rng=np.random.default_rng(0))
        assert budgeter.cap(features, VIEW) == features

    def test_invalid_ceiling(self):
        with pytest.raises(ValueError):
            RenderBudgeter(max_features=-1)
        with pytest.raises(ValueError):
            RenderBudgeter(max_features=0)

    def test_config_default(self):
        assert RenderBudgeter().max_features == 50000

    def test_seeded_reproducible(self, population):
        features = population(10, 500)
        first = RenderBudgeter(100, np.random.default_rng(42)).cap(features, VIEW)
        second = RenderBudgeter(100, np.random.default_rng(42)).cap(features, VIEW)
        assert [id(f) for f in first] == [id(f) for f in second]

    def test_in_view_always_kept_below_ceiling(self, population):
        features = population(30, 970)
        kept = RenderBudgeter(100, np.random.default_rng(1)).cap(features, VIEW)
        assert all(f in kept for f in features[:30])

    def test_out_of_view_dropped_when_view_is_full(self, population):
        features = population(300, 300)
        kept = RenderBudgeter(100, np.random.default_rng(2)).cap(features, VIEW)
        assert kept
        assert all(f.position == INSIDE for f in kept)

    def test_order_preserved(self, population, make_scored):
        features = population(5, 0) + [make_scored(s, position=OUTSIDE) for s in range(200)]
        kept = RenderBudgeter(50, np.random.default_rng(3)).cap(features, VIEW)
        outside = [f.composite_score for f in kept if f.position == OUTSIDE]
        assert outside == sorted(outside)

    def test_expected_size_matches_ceiling(self, population):
        features = population(20, 980)
        budgeter = RenderBudgeter(100, np.random.default_rng(7))
        sizes = [len(budgeter.cap(features, VIEW)) for _ in range(200)]
        assert abs(np.mean(sizes) - 100) < 3

    def test_expected_size_when_view_is_full(self, population):
        features = population(400, 600)
        budgeter = RenderBudgeter(100, np.random.default_rng(11))
        sizes = [len(budgeter.cap(features, VIEW)) for _ in range(200)]
        assert abs(np.mean(sizes) - 100) < 3

    def test_in_view_mask(self, population):
        mask = RenderBudgeter(10).in_view_mask(population(2, 3), VIEW)
        assert mask.tolist() == [True, True, False, False, False]


# ── Styles ────────────────────────────────────────────────────

class TestStyles:
    @pytest.mark.parametrize("score,label", [
        (100, "Very High"),
        (70, "Very High"),
        (69.999, "High"),
        (60, "High"),
        (50, "Medium-High"),
        (40, "Medium"),
        (30, "Medium-Low"),
        (20, "Low"),
        (19.99, "Very Low"),
        (0, "Very Low"),
        (-5, "Very Low"),
        (math.nan, "Very Low"),
    ])
    def test_buckets(self, score, label):
        assert style_for_score(score).label == label

    def test_colors(self):
        assert style_for_score(75).color == "#7f0000"
        assert LOWEST_STYLE.color == "#ffcdd2"
        assert SIDEWALK_STYLE.rgb == (76, 175, 80)

    def test_hex_to_rgb(self):
        assert hex_to_rgb("#7f0000") == (127, 0, 0)
        with pytest.raises(ValueError):
            hex_to_rgb("#fff")

    def test_legend(self):
        rows = legend()
        assert rows[0] == ("70-100", "Very High", "#7f0000")
        assert rows[-1] == ("0-20", "Very Low", "#ffcdd2")
        assert len(rows) == 7


# ── Layers ────────────────────────────────────────────────────

class TestLayers:
    def test_single_road_layer(self, make_scored):
        features = [make_scored(75, sidewalk=True), make_scored(10)]
        layers = split_layers(features, show_sidewalks=False)
        assert [l.layer_id for l in layers] == [ROAD_LAYER]
        assert layers[0].colors == [(127, 0, 0), hex_to_rgb("#ffcdd2")]

    def test_sidewalk_split(self, make_scored):
        features = [make_scored(75, sidewalk=True), make_scored(10), make_scored(55, sidewalk=True)]
        layers = {l.layer_id: l for l in split_layers(features, show_sidewalks=True)}
        assert len(layers[ROAD_LAYER]) == 1
        assert len(layers[SIDEWALK_LAYER]) == 2
        assert set(layers[SIDEWALK_LAYER].colors) == {SIDEWALK_STYLE.rgb}

    def test_empty_layers_omitted(self, make_scored):
        assert split_layers([], show_sidewalks=True) == []
        layers = split_layers([make_scored(30, sidewalk=True)], show_sidewalks=True)
        assert [l.layer_id for l in layers] == [SIDEWALK_LAYER]

    def test_describe_feature(self, make_scored):
        summary = describe_feature(make_scored(54.321, crash=10, sidewalk=True, urban_context=False))
        assert summary["DemandRank"] == "54.32"
        assert summary["Crash Risk Score"] == "10"
        assert summary["Census Score"] == "5"
        assert summary["Pedestrian Feasible"] == "Yes"
        assert summary["Urban Context"] == "Rural"
        assert summary["Existing Sidewalks"] == "Yes"
