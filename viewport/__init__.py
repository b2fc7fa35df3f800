"""
Viewport package — working-set selection for the current map view.

Public API:
    ViewportSelector, Selection, ZoomBudget, ZoomThreshold, Debouncer
"""

from viewport.budget import ZoomBudget, ZoomThreshold
from viewport.debounce import Debouncer
from viewport.selector import Selection, ViewportSelector

__all__ = [
    "ViewportSelector",
    "Selection",
    "ZoomBudget",
    "ZoomThreshold",
    "Debouncer",
]
