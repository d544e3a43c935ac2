#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Planner - reactive grid planner with a cached baseline distance field.

Key design:
- The static distance/cost field is computed once per map load or reset and cached
- Every cycle restores the cached baseline, overlays the latest laser obstacles
  and re-runs the path search from the goal
- Goal / pose / laser setters may be called from other threads; they only touch
  the SharedStateGuard, which is never held across expensive computation
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from reactive_planner.common.exceptions import ConfigurationError, OutOfBoundsError
from reactive_planner.config.models import PlannerConfig
from reactive_planner.controller.motion_controller import MotionController, VelocityCommand
from reactive_planner.core.coordinate_utils import FrameManager
from reactive_planner.core.dynamic_obstacles import DynamicObstacleRasterizer
from reactive_planner.core.grid_preprocess import build_cost_field
from reactive_planner.core.interfaces import (
    IDistanceTransformEngine,
    IMotionController,
    IObstacleRasterizer,
    IPathSearchEngine,
)
from reactive_planner.core.map_model import StaticMapState
from reactive_planner.nav_runtime.waypoint_controller import WaypointController
from reactive_planner.path_planner.distance_cache import DistanceFieldCache
from reactive_planner.path_planner.distance_transform import DistanceTransformEngine
from reactive_planner.path_planner.path_search import DijkstraPathSearch, extract_path
from reactive_planner.service.data_hub import DisplayFields, SharedStateGuard, StateSnapshot
from reactive_planner.ui.display import DisplayMode, render_display

Cell = Tuple[int, int]

MISSING_LASER_WARNING = "laser data not available"


class PlannerState(Enum):
    IDLE = 0           # No active goal
    INITIALIZING = 1   # Computing the baseline distance/cost field
    CYCLING = 2        # Steady state replanning


@dataclass
class Diagnostics:
    """Per-cycle report returned by step()."""
    state: PlannerState = PlannerState.IDLE
    have_goal: bool = False
    path_length: int = 0
    target_cell: Optional[Cell] = None
    is_final_waypoint: bool = False
    obstacle_cells: int = 0
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    dmap_ms: float = 0.0
    path_ms: float = 0.0
    cycle_ms: float = 0.0


@dataclass
class StepResult:
    velocity: VelocityCommand
    goal_reached: bool
    diagnostics: Diagnostics


class Planner:
    """Reactive 2D planner context object.

    Lifecycle:
        IDLE -> setGoal() + step() -> INITIALIZING (first cycle after loadMap/reset) -> CYCLING
        CYCLING -> cancelGoal() / goal reached / reset() -> IDLE

    Collaborators default to the in-process implementations but any object
    implementing the interfaces in core.interfaces can be injected.
    """

    def __init__(
        self,
        config: Optional[PlannerConfig] = None,
        distance_engine: Optional[IDistanceTransformEngine] = None,
        path_engine: Optional[IPathSearchEngine] = None,
        rasterizer: Optional[IObstacleRasterizer] = None,
        motion_controller: Optional[IMotionController] = None,
    ):
        self.cfg_ = config if config is not None else PlannerConfig()

        self.frames_ = FrameManager()
        self.map_ = StaticMapState(self.frames_)
        self.shared_ = SharedStateGuard()
        self.shared_.set_display_mode(self.cfg_.display.mode)

        engine = distance_engine or DistanceTransformEngine(
            treat_unknown_as_obstacle=self.cfg_.cost.treat_unknown_as_obstacle
        )
        self.cache_ = DistanceFieldCache(engine)
        self.path_engine_ = path_engine or DijkstraPathSearch()
        self.rasterizer_ = rasterizer or DynamicObstacleRasterizer()
        self.motion_controller_ = motion_controller or MotionController.from_config(self.cfg_.control)
        self.waypoints_ = WaypointController(self.motion_controller_, self.cfg_.control.lookahead_distance)

        # Cycle-local state, only touched by step()/cancelGoal()
        self._state = PlannerState.IDLE
        self._restart = True
        self._velocities = VelocityCommand.zero()
        self._path: List[Cell] = []

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def config(self) -> PlannerConfig:
        return self.cfg_

    @property
    def frames(self) -> FrameManager:
        return self.frames_

    @property
    def map_state(self) -> StaticMapState:
        return self.map_

    @property
    def cache(self) -> DistanceFieldCache:
        return self.cache_

    @property
    def state(self) -> PlannerState:
        return self._state

    @property
    def have_goal(self) -> bool:
        return self.shared_.have_goal

    @property
    def velocities(self) -> VelocityCommand:
        return self._velocities

    @property
    def path(self) -> List[Cell]:
        return list(self._path)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def loadMap(
        self,
        image: np.ndarray,
        resolution: float,
        origin: Sequence[float],
        occ_threshold: float,
        free_threshold: float,
    ) -> None:
        """Load a new static map. The baseline field is rebuilt on the next step().

        Raises:
            ConfigurationError: malformed map parameters; the previous map stays active.
        """
        with self.shared_.locked() as shared:
            try:
                self.map_.load_map(image, resolution, origin, occ_threshold, free_threshold)
            except ConfigurationError as e:
                logger.error(f"Map load rejected, keeping previous map: {e}")
                raise
            shared.rebase_unlocked(self.frames_.pose_bundle)

        self.cache_.invalidate()
        self.waypoints_.set_resolution(self.frames_.resolution)
        self.rasterizer_.set_resolution(self.frames_.resolution)
        self.rasterizer_.set_grid_shape(self.frames_.shape)
        self._restart = True

    def reset(self) -> None:
        """Drop the goal, rebuild the classification grid and schedule a baseline recompute."""
        logger.info("Resetting planner")
        self._restart = True
        self.cancelGoal()

        if self.map_.loaded:
            with self.shared_.locked():
                self.map_.reclassify()
        self.cache_.invalidate()
        self.rasterizer_.clear_points()

    def cancelGoal(self) -> None:
        """Clear the goal and stop the robot immediately."""
        if self.shared_.clear_goal():
            logger.info("Goal cancelled")
        self._stopRobot()
        self._state = PlannerState.IDLE

    def _completeGoal(self, snap: StateSnapshot) -> None:
        """Clear the goal this cycle was driving to, unless setGoal() replaced it meanwhile."""
        self._stopRobot()
        if self.shared_.clear_goal(expected=snap.goal):
            self._state = PlannerState.IDLE
        else:
            logger.info("Goal replaced during the cycle, keeping the new goal")

    def _stopRobot(self) -> None:
        self._velocities = VelocityCommand.zero()
        self.motion_controller_.reset_velocities()

    # =========================================================================
    # Setters (thread safe)
    # =========================================================================

    def setGoal(self, world_pose: Sequence[float]) -> None:
        bundle = self.shared_.set_goal(world_pose, self.frames_.pose_bundle)
        logger.info(f"Setting goal: world={bundle.world.tolist()}, pixel={bundle.pixel}")

    def setRobotPose(self, world_pose: Sequence[float]) -> None:
        self.shared_.set_robot_pose(world_pose, self.frames_.pose_bundle)

    def setSensorPoints(self, points: np.ndarray) -> None:
        self.shared_.set_laser_points(points)

    def setDisplayMode(self, mode: DisplayMode) -> None:
        self.shared_.set_display_mode(mode)

    # =========================================================================
    # Planning cycle
    # =========================================================================

    def step(self) -> StepResult:
        """Run one planning cycle."""
        time_start = time.perf_counter()
        snap = self.shared_.snapshot()
        diag = Diagnostics(state=self._state, have_goal=snap.have_goal)

        if not snap.have_goal:
            self._state = PlannerState.IDLE
            diag.state = self._state
            if not self.cfg_.display.enable:
                return self._finish(diag, time_start)

        if not self.map_.loaded:
            return self._abort(diag, time_start, "map not loaded")

        if snap.robot is None and snap.have_goal:
            return self._abort(diag, time_start, "robot pose not available")

        try:
            self._checkBounds(snap)
        except OutOfBoundsError as e:
            logger.error(f"Skipping cycle: {e}")
            return self._abort(diag, time_start, str(e))

        if self._restart or not self.cache_.initialized:
            self._state = PlannerState.INITIALIZING
            self._initializeBaseline()
            self._restart = False

        self._state = PlannerState.CYCLING if snap.have_goal else PlannerState.IDLE
        diag.state = self._state

        time_dmap_start = time.perf_counter()
        distance, obstacle_cells = self._overlayObstacles(snap, diag)
        cost = self._buildCost(distance)
        diag.dmap_ms = (time.perf_counter() - time_dmap_start) * 1000.0
        diag.obstacle_cells = int(obstacle_cells.shape[0])
        logger.debug(f"DMapCalculator: {diag.dmap_ms:.1f} ms")

        if not snap.have_goal:
            self._publishDisplay(distance, cost, [], obstacle_cells)
            return self._finish(diag, time_start)

        if MISSING_LASER_WARNING in diag.warnings and self.cfg_.sensor.stop_on_missing_scan:
            self._path = []
            self._stopRobot()
            self._publishDisplay(distance, cost, [], obstacle_cells)
            return self._finish(diag, time_start)

        time_path_start = time.perf_counter()
        self._path = self._computePath(cost, snap.goal.pixel, snap.robot.pixel)
        diag.path_ms = (time.perf_counter() - time_path_start) * 1000.0
        diag.path_length = len(self._path)
        self._publishDisplay(distance, cost, self._path, obstacle_cells)

        if not self._path:
            logger.warning("No path to goal, commanding zero velocity")
            self._stopRobot()
            return self._finish(diag, time_start)

        try:
            wp = self.waypoints_.compute(self._path, snap.robot.image, snap.goal.image, self.frames_)
        except OutOfBoundsError as e:
            logger.error(f"Skipping cycle: {e}")
            return self._abort(diag, time_start, str(e))

        diag.target_cell = wp.target_cell
        diag.is_final_waypoint = wp.is_final

        if wp.goal_reached:
            logger.info("Goal reached")
            self._completeGoal(snap)
            diag.state = self._state
            diag.have_goal = self.shared_.have_goal
            return self._finish(diag, time_start, goal_reached=True)

        self._velocities = wp.velocity
        return self._finish(diag, time_start)

    def _checkBounds(self, snap: StateSnapshot) -> None:
        if snap.robot is not None and not self.frames_.in_bounds(snap.robot.pixel):
            raise OutOfBoundsError(snap.robot.pixel, self.frames_.shape)
        if snap.have_goal and not self.frames_.in_bounds(snap.goal.pixel):
            raise OutOfBoundsError(snap.goal.pixel, self.frames_.shape)

    def _initializeBaseline(self) -> None:
        max_radius = self.cfg_.cost.safety_region / self.frames_.resolution
        self.cache_.initialize_baseline(
            self.map_.classification,
            max_radius,
            self._buildCost,
        )

    def _buildCost(self, distance_cells: np.ndarray) -> np.ndarray:
        cost_cfg = self.cfg_.cost
        return build_cost_field(
            distance_cells,
            self.frames_.resolution,
            cost_cfg.robot_radius,
            cost_cfg.safety_region,
            cost_cfg.min_cost,
            cost_cfg.max_cost,
        )

    def _overlayObstacles(self, snap: StateSnapshot, diag: Diagnostics) -> Tuple[np.ndarray, np.ndarray]:
        """Restore the baseline and add the current laser obstacles on top of it."""
        self.cache_.restore()
        engine = self.cache_.engine
        obstacle_cells = np.empty((0, 2), dtype=np.int64)

        if snap.robot is None:
            # Display-only cycle before the first pose: laser points cannot be placed
            logger.debug("Robot pose not available, skipping laser overlay")
        elif snap.laser_points is not None and snap.laser_points.shape[0] > 0:
            self.rasterizer_.set_resolution(self.frames_.resolution)
            self.rasterizer_.set_grid_shape(self.frames_.shape)
            self.rasterizer_.set_robot_pose(snap.robot.image)
            self.rasterizer_.set_points(snap.laser_points)
            self.rasterizer_.compute()
            obstacle_cells = self.rasterizer_.occupied_cells()

            engine.seed_obstacles(obstacle_cells, self.cache_.max_index)
            engine.compute()
        else:
            logger.warning("WARNING: laser data not available.")
            diag.warnings.append(MISSING_LASER_WARNING)

        return engine.field, obstacle_cells

    def _computePath(self, cost: np.ndarray, goal: Cell, robot: Cell) -> List[Cell]:
        self.path_engine_.set_max_cost(self.cfg_.cost.max_cost - 1)
        self.path_engine_.set_cost_field(cost)
        self.path_engine_.set_goals([goal])
        path_map = self.path_engine_.compute()
        return extract_path(path_map, robot)

    def _publishDisplay(self, distance: np.ndarray, cost: np.ndarray, path: List[Cell], obstacle_cells: np.ndarray) -> None:
        if not self.cfg_.display.enable:
            return
        self.shared_.set_display_fields(DisplayFields(
            distance=distance * np.float32(self.frames_.resolution),
            cost=cost,
            path=list(path),
            obstacle_cells=obstacle_cells,
        ))

    def _abort(self, diag: Diagnostics, time_start: float, error: str) -> StepResult:
        self._path = []
        self._stopRobot()
        diag.errors.append(error)
        return self._finish(diag, time_start)

    def _finish(self, diag: Diagnostics, time_start: float, goal_reached: bool = False) -> StepResult:
        diag.cycle_ms = (time.perf_counter() - time_start) * 1000.0
        logger.debug(f"Cycle {diag.cycle_ms:.1f} ms")
        return StepResult(velocity=self._velocities, goal_reached=goal_reached, diagnostics=diag)

    # =========================================================================
    # Display
    # =========================================================================

    def displayImage(self) -> Optional[np.ndarray]:
        """Render the last published fields for the current display mode."""
        if not self.map_.loaded:
            return None
        snap = self.shared_.snapshot()
        fields = self.shared_.get_display_fields()
        return render_display(
            snap.display_mode,
            self.map_.classification,
            distance_m=fields.distance,
            cost=fields.cost,
            safety_region=self.cfg_.cost.safety_region,
            max_cost=self.cfg_.cost.max_cost,
            robot_pixel=snap.robot.pixel if snap.robot is not None else None,
            goal_pixel=snap.goal.pixel if snap.have_goal and snap.goal is not None else None,
            obstacle_cells=fields.obstacle_cells,
            path=fields.path,
        )
