"""
Chunk store — loads a partitioned series and indexes each chunk by bounding box.

Partitions are probed concurrently in windows of ``loading.probe_window``
indices; every attempt in a window settles (loaded, not found or failed)
before the next window starts.  Probing stops after a window in which every
index was not found.  Chunks are kept for the lifetime of the store with no
eviction, so memory grows with the size of the series.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from chunks.ingest import IngestStats, build_chunk, extract_features
from chunks.sources import PartitionSource
from demand_core.config import config
from demand_core.errors import DatasetEmptyError, PartitionLoadError, PartitionNotFound
from demand_core.logging import get_logger
from demand_core.types import Chunk

logger = get_logger("chunk_store")

LOADED = "loaded"
NOT_FOUND = "not_found"
FAILED = "failed"


@dataclass
class LoadReport:
    """Outcome of one load_all() call."""
    attempted: int = 0
    loaded: List[int] = field(default_factory=list)
    not_found: List[int] = field(default_factory=list)
    failed: Dict[int, str] = field(default_factory=dict)
    ingest: IngestStats = field(default_factory=IngestStats)

    @property
    def dropped_records(self) -> int:
        return self.ingest.dropped_no_position


class ChunkStore:
    """
    Owns every loaded chunk.

    Args:
        probe_window: Partition indices probed concurrently per round.
        max_partitions: Hard cap on probed indices.
    """

    def __init__(
        self,
        probe_window: Optional[int] = None,
        max_partitions: Optional[int] = None,
    ):
        self.probe_window = (
            probe_window if probe_window is not None else config.get("loading.probe_window")
        )
        self.max_partitions = (
            max_partitions if max_partitions is not None else config.get("loading.max_partitions")
        )
        if self.probe_window <= 0 or self.max_partitions <= 0:
            raise ValueError("probe_window and max_partitions must be positive")

        self._chunks: List[Chunk] = []
        self._by_index: Dict[int, Chunk] = {}

    # -- access ---------------------------------------------------------------

    @property
    def chunks(self) -> Tuple[Chunk, ...]:
        """Loaded chunks in the order their loads settled."""
        return tuple(self._chunks)

    @property
    def spatial_chunks(self) -> Tuple[Chunk, ...]:
        """Chunks that have a bounding box."""
        return tuple(c for c in self._chunks if c.bounding_box is not None)

    @property
    def record_count(self) -> int:
        return sum(len(c) for c in self._chunks)

    def get(self, index: int) -> Optional[Chunk]:
        return self._by_index.get(index)

    def __len__(self) -> int:
        return len(self._chunks)

    # -- loading --------------------------------------------------------------

    def add_features(self, index: int, features: List[dict]) -> Chunk:
        """Ingest an already-parsed feature list as partition *index*."""
        chunk, _stats = build_chunk(index, features)
        self._add(chunk)
        return chunk

    async def load_all(self, source: PartitionSource) -> LoadReport:
        """
        Probe *source* from index 0 until the series ends.

        Not-found partitions end the series silently; other failures are
        logged and skipped.  The load itself never aborts on a partition.

        Raises:
            DatasetEmptyError: No usable record was loaded at all.
        """
        report = LoadReport()
        index = 0

        while index < self.max_partitions:
            window = range(index, min(index + self.probe_window, self.max_partitions))
            outcomes = await asyncio.gather(
                *(self._load_one(source, i, report) for i in window)
            )
            index = window.stop
            if all(o == NOT_FOUND for o in outcomes):
                break
        else:
            logger.warning("Stopped probing at the partition cap (%d)", self.max_partitions)

        logger.info(
            "Loaded %d partitions (%d failed, %d records, %d dropped without position)",
            len(report.loaded), len(report.failed),
            report.ingest.records_kept, report.ingest.dropped_no_position,
        )

        if self.record_count == 0:
            logger.error("No usable records after loading %d partition attempts", report.attempted)
            raise DatasetEmptyError(
                f"{len(report.loaded)} partitions loaded, {len(report.failed)} failed"
            )
        return report

    async def _load_one(self, source: PartitionSource, index: int, report: LoadReport) -> str:
        if index in self._by_index:
            return LOADED
        report.attempted += 1

        try:
            payload = await source.fetch(index)
            chunk, stats = build_chunk(index, extract_features(payload))
        except PartitionNotFound:
            report.not_found.append(index)
            return NOT_FOUND
        except PartitionLoadError as e:
            logger.error(str(e))
            report.failed[index] = str(e)
            return FAILED
        except Exception as e:
            logger.error(f"Error loading partition {index}: {e}")
            report.failed[index] = f"{type(e).__name__}: {e}"
            return FAILED

        self._add(chunk)
        report.loaded.append(index)
        report.ingest.merge(stats)

        total = source.total_hint
        logger.info(
            f"Loading data: {len(report.loaded)}/{total if total is not None else '?'} chunks",
            extra={"context": {"chunk": index, "records": len(chunk), "dropped": stats.dropped_no_position}},
        )
        return LOADED

    def _add(self, chunk: Chunk) -> None:
        self._chunks.append(chunk)
        self._by_index[chunk.index] = chunk
