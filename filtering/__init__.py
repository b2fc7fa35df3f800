"""
Filtering package — multi-criteria narrowing of the active records.

Public API:
    FilterPipeline, FilterResult, PresetRegistry, Preset, BUILTIN_PRESETS,
    Predicate, ScoreAtLeast, FieldEquals, And, FilterField
"""

from filtering.pipeline import FilterPipeline, FilterResult, has_valid_position
from filtering.predicates import And, FieldEquals, FilterField, Predicate, ScoreAtLeast
from filtering.presets import BUILTIN_PRESETS, Preset, PresetRegistry

__all__ = [
    "FilterPipeline",
    "FilterResult",
    "has_valid_position",
    "Predicate",
    "ScoreAtLeast",
    "FieldEquals",
    "And",
    "FilterField",
    "Preset",
    "PresetRegistry",
    "BUILTIN_PRESETS",
]
