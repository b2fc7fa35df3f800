"""Tests for filtering/ — validity, score range, toggles and presets."""

import math

import pytest

from demand_core.errors import UnknownPresetError
from demand_core.types import FilterCriteria
from filtering import (
    And,
    FieldEquals,
    FilterField,
    FilterPipeline,
    Preset,
    PresetRegistry,
    ScoreAtLeast,
    has_valid_position,
)

EPS = 1e-6


@pytest.fixture
def pipeline():
    return FilterPipeline()


# ── Validity ──────────────────────────────────────────────────

class TestValidity:
    def test_valid(self, make_scored):
        assert has_valid_position(make_scored(40))

    @pytest.mark.parametrize("position", [
        (-72.7, 95.0),
        (-181.0, 41.0),
        (math.nan, 41.0),
        (-72.7, math.inf),
    ])
    def test_invalid_positions(self, make_scored, position):
        assert not has_valid_position(make_scored(40, position=position))

    def test_nan_composite_invalid(self, make_scored):
        assert not has_valid_position(make_scored(math.nan))

    def test_edges_valid(self, make_scored):
        assert has_valid_position(make_scored(40, position=(180.0, -90.0)))


# ── Score range ───────────────────────────────────────────────

class TestScoreRange:
    def test_bounds_inclusive(self, pipeline, make_scored):
        criteria = FilterCriteria(min_score=20, max_score=60)
        features = [make_scored(s) for s in (20 - EPS, 20, 40, 60, 60 + EPS)]
        kept = pipeline.apply(features, criteria)
        assert [f.composite_score for f in kept] == [20, 40, 60]

    def test_min_drags_max(self):
        criteria = FilterCriteria(min_score=10, max_score=30).with_min_score(50)
        assert (criteria.min_score, criteria.max_score) == (50, 50)

    def test_max_drags_min(self):
        criteria = FilterCriteria(min_score=10, max_score=30).with_max_score(5)
        assert (criteria.min_score, criteria.max_score) == (5, 5)


# ── Toggles ───────────────────────────────────────────────────

class TestToggles:
    def test_pedestrian_feasible(self, pipeline, make_scored):
        features = [make_scored(40, pedestrian_feasible=True), make_scored(40, pedestrian_feasible=False)]
        assert len(pipeline.apply(features, FilterCriteria())) == 2
        kept = pipeline.apply(features, FilterCriteria(pedestrian_feasible_only=True))
        assert kept == [features[0]]

    def test_urban(self, pipeline, make_scored):
        features = [make_scored(40, urban_context=False), make_scored(40, urban_context=True)]
        kept = pipeline.apply(features, FilterCriteria(urban_only=True))
        assert kept == [features[1]]

    def test_show_sidewalks_does_not_filter(self, pipeline, make_scored):
        features = [make_scored(40, sidewalk=True), make_scored(40)]
        assert len(pipeline.apply(features, FilterCriteria(show_sidewalks=True))) == 2


# ── Presets ───────────────────────────────────────────────────

class TestPresets:
    def test_hotspot_excludes_composite_49(self, pipeline, make_scored):
        criteria = FilterCriteria(preset="sidewalk_gap_hotspots")
        low = make_scored(49, crash=10, sidewalk=False, pedestrian_feasible=True)
        high = make_scored(50, crash=10, sidewalk=False, pedestrian_feasible=True)
        assert pipeline.apply([low, high], criteria) == [high]

    def test_hotspot_other_clauses(self, pipeline, make_scored):
        criteria = FilterCriteria(preset="sidewalk_gap_hotspots")
        features = [
            make_scored(60, crash=7),
            make_scored(60, sidewalk=True),
            make_scored(60, pedestrian_feasible=False),
        ]
        assert pipeline.apply(features, criteria) == []

    def test_unknown_preset(self, pipeline, make_scored):
        with pytest.raises(UnknownPresetError):
            pipeline.apply([make_scored(40)], FilterCriteria(preset="everything"))

    def test_builtin_names(self):
        assert set(PresetRegistry().names) == {
            "sidewalk_gap_hotspots", "high_crash_risk", "missing_sidewalks", "top_demand",
        }

    def test_custom_preset(self, make_scored):
        registry = PresetRegistry([Preset("urban_only", "Urban", FieldEquals(FilterField.URBAN_CONTEXT, 1))])
        pipeline = FilterPipeline(presets=registry)
        features = [make_scored(40, urban_context=False), make_scored(40)]
        assert pipeline.apply(features, FilterCriteria(preset="urban_only")) == [features[1]]

    def test_predicates_structural(self, make_scored):
        predicate = And((ScoreAtLeast(30), FieldEquals(FilterField.CRASH_RISK, 10)))
        assert predicate.matches(make_scored(30, crash=10))
        assert not predicate.matches(make_scored(29.9, crash=10))
        assert not predicate.matches(make_scored(80, crash=9))
        assert predicate == And((ScoreAtLeast(30), FieldEquals(FilterField.CRASH_RISK, 10)))


# ── Pipeline properties ───────────────────────────────────────

class TestPipeline:
    def test_order_preserved(self, pipeline, make_scored):
        features = [make_scored(s) for s in (70, 10, 55, 35, 90)]
        kept = pipeline.apply(features, FilterCriteria(min_score=30, max_score=80))
        assert [f.composite_score for f in kept] == [70, 55, 35]

    def test_idempotent(self, pipeline, make_scored):
        features = [
            make_scored(s, crash=c, sidewalk=sw, pedestrian_feasible=p)
            for s, c, sw, p in [
                (55, 10, False, True), (45, 10, False, True), (75, 3, True, False),
                (math.nan, 10, False, True), (65, 10, False, True),
            ]
        ]
        criteria = FilterCriteria(min_score=40, max_score=70, pedestrian_feasible_only=True,
                                  preset="high_crash_risk")
        once = pipeline.apply(features, criteria)
        assert pipeline.apply(once, criteria) == once
        assert [f.composite_score for f in once] == [55, 45, 65]

    def test_rejection_counts(self, pipeline, make_scored):
        features = [make_scored(math.nan), make_scored(5), make_scored(50, pedestrian_feasible=False)]
        result = pipeline.run(features, FilterCriteria(min_score=10, pedestrian_feasible_only=True))
        assert result.features == []
        assert result.rejected == {"validity": 1, "score_range": 1, "pedestrian_feasible": 1}
