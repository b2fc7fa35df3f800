"""
Partition sources for the chunk store.

A partitioned series is probed by index starting at 0.  Sources signal the
end of the series by raising PartitionNotFound; any other failure is a
PartitionLoadError.  No source retries.

Supported sources:
- DirectoryPartitionSource - local files from a ``{chunk}`` path pattern
- HttpPartitionSource - HTTP(S) URLs from a ``{chunk}`` URL pattern (aiohttp)
- CollectionSource - one monolithic FeatureCollection split into chunks
"""

import asyncio
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiohttp

from chunks.ingest import extract_features
from demand_core.config import config
from demand_core.errors import PartitionLoadError, PartitionNotFound
from demand_core.logging import get_logger

logger = get_logger("partition_sources")

CHUNK_PLACEHOLDER = "{chunk}"


class PartitionSource(ABC):
    """Base class for partition sources."""

    @abstractmethod
    async def fetch(self, index: int) -> Any:
        """
        Load the raw payload of partition *index*.

        Raises:
            PartitionNotFound: The partition does not exist (end of series).
            PartitionLoadError: Any other failure.
        """
        raise NotImplementedError("Subclasses must implement fetch()")

    async def close(self) -> None:
        """Release transport resources.  No-op by default."""

    @property
    def total_hint(self) -> Optional[int]:
        """Number of partitions, when the source knows it up front."""
        return None


class DirectoryPartitionSource(PartitionSource):
    """
    Reads ``demandrank_{chunk}.geojson``-style files from disk.

    A missing file is the end-of-series signal.
    """

    def __init__(self, pattern: Optional[str] = None):
        self.pattern = pattern or config.get("data.chunk_pattern")
        if CHUNK_PLACEHOLDER not in self.pattern:
            raise ValueError(f"Partition pattern must contain {CHUNK_PLACEHOLDER}: {self.pattern}")

    def path_for(self, index: int) -> Path:
        return Path(self.pattern.replace(CHUNK_PLACEHOLDER, str(index)))

    async def fetch(self, index: int) -> Any:
        return await asyncio.to_thread(self._read, index)

    def _read(self, index: int) -> Any:
        path = self.path_for(index)
        try:
            with open(path, "r") as fh:
                return json.load(fh)
        except FileNotFoundError:
            raise PartitionNotFound(index)
        except (OSError, ValueError) as e:
            raise PartitionLoadError(index, f"{path}: {e}")


class HttpPartitionSource(PartitionSource):
    """
    Fetches partitions over HTTP with aiohttp.

    HTTP 404 is the end-of-series signal; any other non-2xx status, transport
    error or timeout is a load failure.  The client timeout is the only
    timeout applied.
    """

    def __init__(
        self,
        url_pattern: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.url_pattern = url_pattern or config.get("data.url_pattern")
        if not self.url_pattern or CHUNK_PLACEHOLDER not in self.url_pattern:
            raise ValueError(f"URL pattern must contain {CHUNK_PLACEHOLDER}: {self.url_pattern}")
        self.timeout = timeout if timeout is not None else config.get("loading.request_timeout_seconds")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        self._session = session
        self._owns_session = session is None

    def url_for(self, index: int) -> str:
        return self.url_pattern.replace(CHUNK_PLACEHOLDER, str(index))

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"Accept": "application/geo+json, application/json"},
            )
        return self._session

    async def fetch(self, index: int) -> Any:
        url = self.url_for(index)
        session = self._get_session()
        try:
            async with session.get(url) as response:
                if response.status == 404:
                    raise PartitionNotFound(index)
                if response.status >= 400:
                    raise PartitionLoadError(index, f"HTTP {response.status} from {url}")
                return await response.json(content_type=None)
        except asyncio.TimeoutError:
            raise PartitionLoadError(index, f"timeout fetching {url}")
        except aiohttp.ClientError as e:
            raise PartitionLoadError(index, f"{type(e).__name__}: {e}")
        except ValueError as e:
            raise PartitionLoadError(index, f"invalid JSON from {url}: {e}")

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None


class CollectionSource(PartitionSource):
    """
    Serves one monolithic collection as consecutive partitions.

    The collection is split into slices of *chunk_size* features so the
    viewport selector can still work with per-chunk bounding boxes.
    """

    def __init__(self, collection: Any, chunk_size: Optional[int] = None):
        self.chunk_size = chunk_size if chunk_size is not None else config.get("data.chunk_size")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        features = extract_features(collection)
        self._slices: List[Dict[str, Any]] = [
            {"type": "FeatureCollection", "features": features[i:i + self.chunk_size]}
            for i in range(0, len(features), self.chunk_size)
        ]

    @classmethod
    def from_file(cls, path: str, chunk_size: Optional[int] = None) -> "CollectionSource":
        with open(path, "r") as fh:
            return cls(json.load(fh), chunk_size=chunk_size)

    @property
    def total_hint(self) -> Optional[int]:
        return len(self._slices)

    async def fetch(self, index: int) -> Any:
        if index < 0 or index >= len(self._slices):
            raise PartitionNotFound(index)
        return self._slices[index]
