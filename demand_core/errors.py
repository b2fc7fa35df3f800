"""
Exception hierarchy for the DemandRank map pipeline.

Pipeline failures raise domain-specific subclasses of DemandError so callers
can catch at the granularity they need.  PartitionNotFound is the normal
end-of-series signal of a partitioned source and is consumed by the chunk
store; it never reaches application code.
"""


class DemandError(Exception):
    """Base exception for all pipeline errors."""


class DemandConfigError(DemandError):
    """Raised when a required configuration key is missing or invalid."""

    def __init__(self, key: str, reason: str = "missing or None"):
        self.key = key
        super().__init__(f"Configuration error for '{key}': {reason}")


class PartitionNotFound(DemandError):
    """Raised by a partition source when the probed index does not exist."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"Partition {index} does not exist")


class PartitionLoadError(DemandError):
    """Raised when a partition exists (or may exist) but could not be loaded."""

    def __init__(self, index: int, detail: str):
        self.index = index
        super().__init__(f"Partition {index} failed to load: {detail}")


class DatasetEmptyError(DemandError):
    """Raised when no valid records remain after ingestion."""

    def __init__(self, detail: str):
        super().__init__(f"No usable records: {detail}")


class UnknownPresetError(DemandError):
    """Raised when a filter preset name is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown filter preset '{name}'")


class ShareTokenError(DemandError):
    """Raised when a shareable view-state token cannot be decoded."""

    def __init__(self, detail: str):
        super().__init__(f"Invalid view-state token: {detail}")


class EmptyExportError(DemandError):
    """Raised when an export is requested for an empty filtered set."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"No data to export as {kind}; adjust the filters")
