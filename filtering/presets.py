"""Named one-click filter presets."""

from dataclasses import dataclass
from typing import Dict, List, Optional

from demand_core.errors import UnknownPresetError
from filtering.predicates import And, FieldEquals, FilterField, Predicate, ScoreAtLeast


@dataclass(frozen=True)
class Preset:
    name: str
    label: str
    predicate: Predicate


BUILTIN_PRESETS = [
    Preset(
        "sidewalk_gap_hotspots",
        "High demand, max crash risk, no sidewalk",
        And((
            ScoreAtLeast(50),
            FieldEquals(FilterField.CRASH_RISK, 10),
            FieldEquals(FilterField.SIDEWALK, 0),
            FieldEquals(FilterField.PEDESTRIAN_FEASIBLE, 1),
        )),
    ),
    Preset(
        "high_crash_risk",
        "Maximum crash risk",
        FieldEquals(FilterField.CRASH_RISK, 10),
    ),
    Preset(
        "missing_sidewalks",
        "Feasible segments without a sidewalk",
        And((
            FieldEquals(FilterField.SIDEWALK, 0),
            FieldEquals(FilterField.PEDESTRIAN_FEASIBLE, 1),
        )),
    ),
    Preset(
        "top_demand",
        "Very high demand",
        ScoreAtLeast(70),
    ),
]


class PresetRegistry:
    """Registry for presets — register, lookup by name."""

    def __init__(self, presets: Optional[List[Preset]] = None):
        self._presets: Dict[str, Preset] = {}
        for p in (presets if presets is not None else BUILTIN_PRESETS):
            self.register(p)

    def register(self, preset: Preset) -> None:
        """Register a preset (replaces existing with same name)."""
        self._presets[preset.name] = preset

    def get(self, name: str) -> Optional[Preset]:
        return self._presets.get(name)

    def resolve(self, name: str) -> Preset:
        """Like :meth:`get` but raises UnknownPresetError."""
        preset = self._presets.get(name)
        if preset is None:
            raise UnknownPresetError(name)
        return preset

    @property
    def names(self) -> List[str]:
        return list(self._presets.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._presets
