"""
demand_core — minimal core library for the DemandRank map pipeline.

Every pipeline package imports from this one.  It provides:
- Domain types (FeatureRecord, Chunk, BoundingBox, ViewportState, ...)
- Singleton configuration loader
- Custom exception hierarchy
- Structured JSON logger

This package contains **zero** pipeline logic — only primitives and
contracts.
"""

# Errors first: no internal deps
from demand_core.errors import (
    DatasetEmptyError,
    DemandConfigError,
    DemandError,
    EmptyExportError,
    PartitionLoadError,
    PartitionNotFound,
    ShareTokenError,
    UnknownPresetError,
)

# Logging
from demand_core.logging import get_logger

# Configuration
from demand_core.config import CONFIG_SCHEMA, Config, config

# Domain types
from demand_core.types import (
    DEMAND_FIELDS,
    FACTOR_FIELDS,
    FACTOR_NAMES,
    BoundingBox,
    Chunk,
    FeatureRecord,
    FilterCriteria,
    ScoredFeature,
    ViewportState,
)

__all__ = [
    # Errors
    "DemandError",
    "DemandConfigError",
    "PartitionNotFound",
    "PartitionLoadError",
    "DatasetEmptyError",
    "UnknownPresetError",
    "ShareTokenError",
    "EmptyExportError",
    # Logging
    "get_logger",
    # Config
    "CONFIG_SCHEMA",
    "Config",
    "config",
    # Types
    "FACTOR_FIELDS",
    "FACTOR_NAMES",
    "DEMAND_FIELDS",
    "BoundingBox",
    "FeatureRecord",
    "Chunk",
    "ScoredFeature",
    "ViewportState",
    "FilterCriteria",
]
