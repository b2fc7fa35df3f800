"""
Structural predicates over scored features.

Presets are built from these tagged variants and evaluated by field
comparison; there is no query syntax.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from demand_core.types import ScoredFeature


class FilterField(str, Enum):
    """Fields a predicate may reference."""
    COMPOSITE = "composite"
    CRASH_RISK = "crash"
    SIDEWALK = "sidewalk"
    PEDESTRIAN_FEASIBLE = "pedestrian_feasible"
    URBAN_CONTEXT = "urban_context"


def field_value(feature: ScoredFeature, field: FilterField) -> Union[float, int]:
    """Value of *field* on *feature*; boolean flags read as 0/1."""
    record = feature.record
    if field is FilterField.COMPOSITE:
        return feature.composite_score
    if field is FilterField.CRASH_RISK:
        return record.factor("crash")
    if field is FilterField.SIDEWALK:
        return int(record.has_sidewalk)
    if field is FilterField.PEDESTRIAN_FEASIBLE:
        return int(record.pedestrian_feasible)
    if field is FilterField.URBAN_CONTEXT:
        return int(record.urban_context)
    raise ValueError(f"Unsupported filter field: {field}")


class Predicate(ABC):
    """A boolean test over one scored feature."""

    @abstractmethod
    def matches(self, feature: ScoredFeature) -> bool:
        ...


@dataclass(frozen=True)
class ScoreAtLeast(Predicate):
    threshold: float

    def matches(self, feature: ScoredFeature) -> bool:
        return feature.composite_score >= self.threshold


@dataclass(frozen=True)
class FieldEquals(Predicate):
    field: FilterField
    value: float

    def matches(self, feature: ScoredFeature) -> bool:
        return field_value(feature, self.field) == self.value


@dataclass(frozen=True)
class And(Predicate):
    clauses: Tuple[Predicate, ...]

    def matches(self, feature: ScoredFeature) -> bool:
        return all(clause.matches(feature) for clause in self.clauses)
