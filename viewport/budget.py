"""Zoom-dependent feature budgets."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from demand_core.config import config
from demand_core.errors import DemandConfigError


@dataclass(frozen=True)
class ZoomThreshold:
    zoom: float
    max_features: int


class ZoomBudget:
    """
    Step function zoom -> maximum feature count.

    The budget is that of the smallest threshold whose zoom is >= the
    current zoom; beyond the last threshold the last budget applies.
    """

    def __init__(self, thresholds: Optional[Sequence[Any]] = None):
        raw = thresholds if thresholds is not None else config.get("viewport.zoom_thresholds")
        parsed = [self._parse(t) for t in raw]
        if not parsed:
            raise DemandConfigError("viewport.zoom_thresholds", reason="empty threshold table")
        self.thresholds: List[ZoomThreshold] = sorted(parsed, key=lambda t: t.zoom)

    @staticmethod
    def _parse(entry: Any) -> ZoomThreshold:
        if isinstance(entry, ZoomThreshold):
            return entry
        if isinstance(entry, dict):
            try:
                return ZoomThreshold(zoom=float(entry["zoom"]), max_features=int(entry["max_features"]))
            except (KeyError, TypeError, ValueError):
                pass
        raise DemandConfigError("viewport.zoom_thresholds", reason=f"bad entry {entry!r}")

    def for_zoom(self, zoom: float) -> int:
        for threshold in self.thresholds:
            if zoom <= threshold.zoom:
                return threshold.max_features
        return self.thresholds[-1].max_features

    def as_config(self) -> List[Dict[str, Any]]:
        return [{"zoom": t.zoom, "max_features": t.max_features} for t in self.thresholds]
