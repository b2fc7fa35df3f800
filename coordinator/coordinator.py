"""
Recompute coordinator — owns the application state and drives
scoring -> selection -> filtering -> sampling -> layers.

Entry points by trigger:
    weights change   -> rescore, then refresh
    viewport change  -> reselect, then refresh (debounced via request_viewport)
    criteria change  -> refresh

Every cycle takes a monotonically increasing generation number.  A frame is
published only if no newer frame has been published, so a superseded cycle
finishing late (see refresh_async) never overwrites a newer result.
"""

import asyncio
from dataclasses import replace
from typing import Callable, List, Optional

from chunks.sources import PartitionSource
from chunks.store import ChunkStore, LoadReport
from coordinator.state import ApplicationState, RenderFrame
from demand_core.config import config
from demand_core.errors import DatasetEmptyError
from demand_core.logging import get_logger
from demand_core.types import BoundingBox, FilterCriteria, ScoredFeature, ViewportState
from exporting.view_state import ViewState
from filtering.pipeline import FilterPipeline
from rendering.budgeter import RenderBudgeter
from rendering.layers import split_layers
from scoring.engine import ScoringEngine
from scoring.weights import WeightVector
from viewport.debounce import Debouncer
from viewport.selector import ViewportSelector

logger = get_logger("coordinator")

FrameCallback = Callable[[RenderFrame], None]


class DemandMapCoordinator:
    """
    Args:
        store: Chunk store (a fresh one by default).
        engine: Scoring engine.
        selector: Viewport selector.
        filters: Filter pipeline.
        budgeter: Render budgeter.
        on_frame: Called with every published frame (the external renderer).
        debounce_seconds: Quiescence window for request_viewport().
    """

    def __init__(
        self,
        store: Optional[ChunkStore] = None,
        engine: Optional[ScoringEngine] = None,
        selector: Optional[ViewportSelector] = None,
        filters: Optional[FilterPipeline] = None,
        budgeter: Optional[RenderBudgeter] = None,
        on_frame: Optional[FrameCallback] = None,
        debounce_seconds: Optional[float] = None,
    ):
        self.store = store or ChunkStore()
        self.engine = engine or ScoringEngine()
        self.selector = selector or ViewportSelector()
        self.filters = filters or FilterPipeline()
        self.budgeter = budgeter or RenderBudgeter()
        self.on_frame = on_frame

        self.state = ApplicationState(
            weights=WeightVector.default(),
            criteria=FilterCriteria(
                min_score=config.get("filters.min_score"),
                max_score=config.get("filters.max_score"),
            ),
        )
        self.frame: Optional[RenderFrame] = None
        self._generation = 0
        self._published_generation = 0
        self._viewport_debouncer = Debouncer(self.set_viewport, wait=debounce_seconds)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self, source: PartitionSource) -> LoadReport:
        """Load every partition of *source*, score it and render the first frame."""
        try:
            report = await self.store.load_all(source)
        finally:
            await source.close()

        self._rescore()
        viewport = self.state.viewport or self.default_viewport()
        self._reselect(viewport)
        self.refresh()
        return report

    def default_viewport(self) -> ViewportState:
        """Configured center and zoom, bounded by the extent of the loaded data."""
        boxes = [c.bounding_box for c in self.store.spatial_chunks]
        if not boxes:
            raise DatasetEmptyError("no loaded chunk has a bounding box")
        extent = BoundingBox(
            north=max(b.north for b in boxes),
            south=min(b.south for b in boxes),
            east=max(b.east for b in boxes),
            west=min(b.west for b in boxes),
        )
        return ViewportState(
            bounds=extent,
            zoom=config.get("map.zoom"),
            center=(config.get("map.center_lng"), config.get("map.center_lat")),
        )

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def set_weights(self, weights: WeightVector) -> Optional[RenderFrame]:
        self.state = replace(self.state, weights=weights)
        self._rescore()
        return self.refresh()

    def set_viewport(self, viewport: ViewportState) -> Optional[RenderFrame]:
        self._reselect(viewport)
        return self.refresh()

    def request_viewport(self, viewport: ViewportState) -> None:
        """Debounced set_viewport() for rapid pan/zoom events."""
        self._viewport_debouncer.trigger(viewport)

    def set_criteria(self, criteria: FilterCriteria) -> Optional[RenderFrame]:
        if criteria.preset:
            self.filters.presets.resolve(criteria.preset)
        self.state = replace(self.state, criteria=criteria)
        return self.refresh()

    def apply_view_state(self, view_state: ViewState) -> Optional[RenderFrame]:
        """Restore weights, filters and viewport from a decoded share token."""
        if view_state.criteria.preset:
            self.filters.presets.resolve(view_state.criteria.preset)
        self.state = replace(self.state, weights=view_state.weights, criteria=view_state.criteria)
        self._rescore()
        self._reselect(view_state.viewport)
        return self.refresh()

    def view_state(self) -> ViewState:
        viewport = self.state.viewport or self.default_viewport()
        return ViewState(viewport=viewport, criteria=self.state.criteria, weights=self.state.weights)

    # ------------------------------------------------------------------
    # Recompute cycle
    # ------------------------------------------------------------------

    def refresh(self) -> Optional[RenderFrame]:
        """Run filter -> sample -> layers synchronously and publish the frame.

        No-op (returns None) until data has been loaded.
        """
        if self.state.snapshot is None:
            return None
        generation = self._next_generation()
        return self._publish(self.build_frame(self.state, generation))

    async def refresh_async(self) -> Optional[RenderFrame]:
        """
        Like refresh() but computes the frame in a worker thread.

        Returns None when a newer frame was published while this one was
        being computed.
        """
        if self.state.snapshot is None:
            return None
        generation = self._next_generation()
        state = self.state
        frame = await asyncio.to_thread(self.build_frame, state, generation)
        return self._publish(frame)

    def build_frame(self, state: ApplicationState, generation: int) -> RenderFrame:
        """Active records -> filtered -> budgeted -> layers, reading only *state*."""
        if state.snapshot is None or state.selection is None or state.viewport is None:
            raise DatasetEmptyError("no data loaded")

        active: List[ScoredFeature] = []
        for chunk in state.selection.chunks:
            active.extend(state.snapshot.scored_features(chunk))

        result = self.filters.run(active, state.criteria)
        rendered = self.budgeter.cap(result.features, state.viewport.bounds)
        layers = split_layers(rendered, state.criteria.show_sidewalks)

        return RenderFrame(
            generation=generation,
            viewport=state.viewport,
            active_chunks=state.selection.indices,
            budget=state.selection.budget,
            filtered=result.features,
            rendered=rendered,
            layers=layers,
            rejected=result.rejected,
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _rescore(self) -> None:
        if not len(self.store):
            return
        snapshot = self.engine.recompute(self.state.weights, self.store.chunks)
        self.state = replace(self.state, snapshot=snapshot)

    def _reselect(self, viewport: ViewportState) -> None:
        selection = self.selector.select(viewport, self.store.spatial_chunks)
        self.state = replace(self.state, viewport=viewport, selection=selection)

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _publish(self, frame: RenderFrame) -> Optional[RenderFrame]:
        if frame.generation < self._published_generation:
            logger.debug(
                "Discarding stale frame %d (published %d)",
                frame.generation, self._published_generation,
            )
            return None
        self._published_generation = frame.generation
        self.frame = frame
        logger.info(
            f"Frame {frame.generation}: {len(frame.active_chunks)} chunks, "
            f"{frame.filtered_count} filtered, {frame.rendered_count} rendered",
            extra={"context": {"generation": frame.generation, "zoom": frame.viewport.zoom, "budget": frame.budget}},
        )
        if self.on_frame is not None:
            self.on_frame(frame)
        return frame
