"""Weight vector over the seven demand factors."""

import math
from typing import Dict, Mapping, Optional

import numpy as np

from demand_core.config import config
from demand_core.errors import DemandConfigError
from demand_core.types import FACTOR_NAMES


def _checked_weight(name: str, value: object) -> float:
    """A finite weight in [0, 1]; anything else is a configuration error."""
    if isinstance(value, bool):
        raise DemandConfigError("scoring.weights", reason=f"weight for '{name}' is not a number")
    try:
        weight = float(value)
    except (TypeError, ValueError):
        raise DemandConfigError("scoring.weights", reason=f"weight for '{name}' is not a number")
    if not (math.isfinite(weight) and 0.0 <= weight <= 1.0):
        raise DemandConfigError("scoring.weights", reason=f"weight for '{name}' must be in [0, 1], got {value!r}")
    return weight


class WeightVector:
    """
    Immutable mapping factor name -> weight in [0, 1].

    Factors absent from the input mapping weigh 0; a non-finite weight or one
    outside [0, 1] raises DemandConfigError.  The weights are not
    required to sum to 1; see :meth:`is_balanced`.
    """

    def __init__(self, weights: Mapping[str, float]):
        unknown = set(weights) - set(FACTOR_NAMES)
        if unknown:
            raise DemandConfigError(
                "scoring.weights", reason=f"unknown factors {sorted(unknown)}"
            )
        self._weights: Dict[str, float] = {
            name: _checked_weight(name, weights.get(name, 0.0)) for name in FACTOR_NAMES
        }

    @classmethod
    def default(cls) -> "WeightVector":
        return cls(config.get("scoring.default_weights"))

    # -- access -------------------------------------------------------------

    def __getitem__(self, name: str) -> float:
        return self._weights[name]

    def as_dict(self) -> Dict[str, float]:
        return dict(self._weights)

    def as_array(self) -> np.ndarray:
        """Weights in FACTOR_NAMES order."""
        return np.array([self._weights[n] for n in FACTOR_NAMES], dtype=np.float64)

    # -- total weight feedback ---------------------------------------------

    @property
    def total(self) -> float:
        return sum(self._weights.values())

    def is_balanced(self, tolerance: Optional[float] = None) -> bool:
        """True when the total weight is within *tolerance* of 1.0."""
        if tolerance is None:
            tolerance = config.get("scoring.balance_tolerance")
        return abs(self.total - 1.0) <= tolerance

    # -- updates -------------------------------------------------------------

    def with_weight(self, name: str, value: float) -> "WeightVector":
        """Return a copy with one factor set, clamped to [0, 1] like a slider."""
        if name not in self._weights:
            raise DemandConfigError("scoring.weights", reason=f"unknown factor '{name}'")
        updated = dict(self._weights)
        updated[name] = min(max(float(value), 0.0), 1.0)
        return WeightVector(updated)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WeightVector):
            return NotImplemented
        return self._weights == other._weights

    def __hash__(self) -> int:
        return hash(tuple(self._weights.items()))

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={v:g}" for k, v in self._weights.items())
        return f"WeightVector({body})"
