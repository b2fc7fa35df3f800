"""
Chunk store package — partitioned loading and bounding-box indexing.

Public API:
    ChunkStore, LoadReport, PartitionSource, DirectoryPartitionSource,
    HttpPartitionSource, CollectionSource, build_chunk, compute_bounds
"""

from chunks.ingest import IngestStats, build_chunk, compute_bounds, normalize_feature
from chunks.sources import (
    CollectionSource,
    DirectoryPartitionSource,
    HttpPartitionSource,
    PartitionSource,
)
from chunks.store import ChunkStore, LoadReport

__all__ = [
    "ChunkStore",
    "LoadReport",
    "PartitionSource",
    "DirectoryPartitionSource",
    "HttpPartitionSource",
    "CollectionSource",
    "IngestStats",
    "build_chunk",
    "compute_bounds",
    "normalize_feature",
]
