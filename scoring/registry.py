"""Factor registry for discovery and management."""

from dataclasses import dataclass
from typing import Dict, List, Optional

from demand_core.types import FACTOR_FIELDS


@dataclass(frozen=True)
class Factor:
    """One normalized sub-score carried by every record."""
    name: str
    field: str
    label: str


BUILTIN_FACTORS = [
    Factor("census", FACTOR_FIELDS["census"], "Census"),
    Factor("crash", FACTOR_FIELDS["crash"], "Crash Risk"),
    Factor("funcClass", FACTOR_FIELDS["funcClass"], "Functional Class"),
    Factor("school", FACTOR_FIELDS["school"], "School Proximity"),
    Factor("trail", FACTOR_FIELDS["trail"], "Trail Proximity"),
    Factor("rail", FACTOR_FIELDS["rail"], "Rail Proximity"),
    Factor("bus", FACTOR_FIELDS["bus"], "Bus Proximity"),
]


class FactorRegistry:
    """Registry for scoring factors — lookup by name, ordered like the factor matrix."""

    def __init__(self, factors: Optional[List[Factor]] = None):
        self._factors: Dict[str, Factor] = {}
        for f in (factors or BUILTIN_FACTORS):
            self._factors[f.name] = f

    def get(self, name: str) -> Optional[Factor]:
        return self._factors.get(name)

    @property
    def names(self) -> List[str]:
        """Ordered list of factor names."""
        return list(self._factors.keys())

    @property
    def labels(self) -> Dict[str, str]:
        return {f.name: f.label for f in self._factors.values()}

    def __len__(self) -> int:
        return len(self._factors)

    def __contains__(self, name: str) -> bool:
        return name in self._factors
