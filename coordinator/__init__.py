"""
Coordinator package — application state and the recompute cycle.

Public API:
    DemandMapCoordinator, ApplicationState, RenderFrame
"""

from coordinator.coordinator import DemandMapCoordinator
from coordinator.state import ApplicationState, RenderFrame

__all__ = ["DemandMapCoordinator", "ApplicationState", "RenderFrame"]
