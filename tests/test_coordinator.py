"""End-to-end tests for the recompute coordinator."""

import asyncio

import pytest

from chunks.sources import CollectionSource
from coordinator import DemandMapCoordinator
from demand_core.errors import DatasetEmptyError, UnknownPresetError
from demand_core.types import BoundingBox, FilterCriteria, ViewportState
from exporting import decode_view_state, encode_view_state
from scoring.weights import WeightVector

HIGH = (60,) * 7
LOW = (20,) * 7
AREA_A = BoundingBox(north=42.0, south=41.0, east=-72.0, west=-73.0)


@pytest.fixture
def collection(make_feature):
    """Two partitions of two records: chunk 0 in Connecticut, chunk 1 far away."""
    return {
        "type": "FeatureCollection",
        "features": [
            make_feature(-72.7, 41.6, factors=HIGH, id="a1"),
            make_feature(-72.6, 41.7, factors=LOW, id="a2"),
            make_feature(10.0, 10.0, factors=HIGH, id="b1"),
            make_feature(10.1, 10.1, factors=LOW, id="b2"),
        ],
    }


@pytest.fixture
def loaded(collection):
    """A coordinator with *collection* loaded and every frame recorded."""
    frames = []
    coordinator = DemandMapCoordinator(on_frame=frames.append)
    report = asyncio.run(coordinator.load(CollectionSource(collection, chunk_size=2)))
    return coordinator, frames, report


def ids(features):
    return sorted(f.record.feature_id for f in features)


# ── Loading ───────────────────────────────────────────────────

class TestLoad:
    def test_first_frame(self, loaded):
        coordinator, frames, report = loaded
        assert sorted(report.loaded) == [0, 1]
        assert len(frames) == 1
        assert frames[0].active_chunks == (0, 1)
        assert frames[0].filtered_count == 4
        assert coordinator.frame is frames[0]

    def test_default_viewport_covers_data(self, loaded):
        coordinator, _, _ = loaded
        viewport = coordinator.state.viewport
        assert viewport.bounds.west == -72.7
        assert (viewport.bounds.south, viewport.bounds.north) == (10.0, 41.7)
        assert viewport.zoom == 8.0

    def test_empty_dataset(self):
        coordinator = DemandMapCoordinator()
        empty = CollectionSource({"type": "FeatureCollection", "features": []})
        with pytest.raises(DatasetEmptyError):
            asyncio.run(coordinator.load(empty))
        assert coordinator.frame is None

    def test_refresh_before_load(self):
        assert DemandMapCoordinator().refresh() is None


# ── Triggers ──────────────────────────────────────────────────

class TestTriggers:
    def test_criteria(self, loaded):
        coordinator, _, _ = loaded
        frame = coordinator.set_criteria(FilterCriteria(min_score=50))
        assert ids(frame.filtered) == ["a1", "b1"]

    def test_unknown_preset_leaves_state(self, loaded):
        coordinator, _, _ = loaded
        before = coordinator.state
        with pytest.raises(UnknownPresetError):
            coordinator.set_criteria(FilterCriteria(preset="nope"))
        assert coordinator.state is before

    def test_viewport_narrows_active_chunks(self, loaded):
        coordinator, _, _ = loaded
        frame = coordinator.set_viewport(ViewportState(bounds=AREA_A, zoom=12))
        assert frame.active_chunks == (0,)
        assert frame.budget == 25000
        assert ids(frame.filtered) == ["a1", "a2"]

    def test_weights_rescore_keeps_originals(self, loaded):
        coordinator, _, _ = loaded
        frame = coordinator.set_weights(WeightVector({"census": 0.5}))
        scores = {f.record.feature_id: (f.composite_score, f.original_composite_score) for f in frame.filtered}
        assert scores["a1"] == pytest.approx((30.0, 60.0))
        assert scores["b2"] == pytest.approx((10.0, 20.0))

    def test_weights_then_criteria(self, loaded):
        coordinator, _, _ = loaded
        coordinator.set_weights(WeightVector({"census": 0.5}))
        frame = coordinator.set_criteria(FilterCriteria(min_score=50))
        assert frame.filtered_count == 0

    def test_sidewalk_layer(self, make_feature):
        collection = {"type": "FeatureCollection", "features": [
            make_feature(-72.7, 41.6, sidewalks=1),
            make_feature(-72.6, 41.7),
        ]}
        coordinator = DemandMapCoordinator()
        asyncio.run(coordinator.load(CollectionSource(collection)))
        frame = coordinator.set_criteria(FilterCriteria(show_sidewalks=True))
        assert [len(layer) for layer in frame.layers] == [1, 1]

    def test_shipped_demand_is_original(self, make_feature):
        collection = {"type": "FeatureCollection", "features": [
            make_feature(-72.7, 41.6, factors=HIGH, demand=77.0),
        ]}
        coordinator = DemandMapCoordinator()
        asyncio.run(coordinator.load(CollectionSource(collection)))
        feature = coordinator.frame.filtered[0]
        assert feature.original_composite_score == 77.0
        assert feature.composite_score == pytest.approx(60.0)


# ── View state ────────────────────────────────────────────────

class TestViewState:
    def test_share_and_restore(self, loaded, collection):
        coordinator, _, _ = loaded
        coordinator.set_weights(WeightVector({"census": 0.5}))
        coordinator.set_viewport(ViewportState(bounds=AREA_A, zoom=12))
        coordinator.set_criteria(FilterCriteria(min_score=25))
        token = encode_view_state(coordinator.view_state())

        other = DemandMapCoordinator()
        asyncio.run(other.load(CollectionSource(collection, chunk_size=2)))
        frame = other.apply_view_state(decode_view_state(token))
        assert frame.active_chunks == (0,)
        assert ids(frame.filtered) == ["a1"]
        assert other.state.weights == coordinator.state.weights


# ── Generations ───────────────────────────────────────────────

class TestGenerations:
    def test_generations_increase(self, loaded):
        coordinator, frames, _ = loaded
        coordinator.set_criteria(FilterCriteria(min_score=10))
        coordinator.set_criteria(FilterCriteria(min_score=20))
        generations = [f.generation for f in frames]
        assert generations == sorted(generations)
        assert len(set(generations)) == 3

    def test_stale_frame_discarded(self, loaded):
        coordinator, frames, _ = loaded
        old_state = coordinator.state
        old_generation = coordinator._next_generation()

        newer = coordinator.set_criteria(FilterCriteria(min_score=50))
        stale = coordinator.build_frame(old_state, old_generation)

        assert coordinator._publish(stale) is None
        assert coordinator.frame is newer
        assert frames[-1] is newer

    def test_concurrent_refresh(self, loaded):
        coordinator, _, _ = loaded

        async def run():
            return await asyncio.gather(coordinator.refresh_async(), coordinator.refresh_async())

        results = asyncio.run(run())
        published = [r for r in results if r is not None]
        assert published
        assert coordinator.frame.generation == coordinator._generation

    def test_debounced_viewport(self, collection):
        frames = []

        async def run():
            coordinator = DemandMapCoordinator(on_frame=frames.append, debounce_seconds=0.05)
            await coordinator.load(CollectionSource(collection, chunk_size=2))
            far = BoundingBox(north=11.0, south=9.0, east=11.0, west=9.0)
            coordinator.request_viewport(ViewportState(bounds=far, zoom=10))
            coordinator.request_viewport(ViewportState(bounds=far, zoom=12))
            coordinator.request_viewport(ViewportState(bounds=AREA_A, zoom=14))
            await asyncio.sleep(0.2)

        asyncio.run(run())
        assert len(frames) == 2
        assert frames[-1].viewport.zoom == 14
        assert frames[-1].active_chunks == (0,)
