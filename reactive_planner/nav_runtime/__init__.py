from .planner import Planner, PlannerState, StepResult, Diagnostics
from .waypoint_controller import WaypointController, WaypointResult

__all__ = ['Planner', 'PlannerState', 'StepResult', 'Diagnostics', 'WaypointController', 'WaypointResult']
