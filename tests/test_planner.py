#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""规划周期端到端测试"""

import numpy as np
import pytest

from reactive_planner.common.exceptions import ConfigurationError
from reactive_planner.config import DisplayConfig, PlannerConfig, SensorConfig
from reactive_planner.controller.motion_controller import MotionController
from reactive_planner.nav_runtime.planner import MISSING_LASER_WARNING, Planner, PlannerState
from reactive_planner.ui.display import DisplayMode

from conftest import OCCUPIED, RESOLUTION, free_image, laser_at, world_of


def test_straight_line_on_open_map(make_planner):
    planner = make_planner(free_image(50, 150))
    planner.setRobotPose(world_of(planner, (0, 0)))
    planner.setGoal(world_of(planner, (0, 100)))

    result = planner.step()
    diag = result.diagnostics

    assert planner.path == [(0, c) for c in range(101)]
    assert diag.path_length == 101
    assert diag.target_cell == (0, 20)
    assert not diag.is_final_waypoint
    assert diag.state == PlannerState.CYCLING
    assert MISSING_LASER_WARNING in diag.warnings
    assert not result.goal_reached
    assert result.velocity.linear == pytest.approx(0.5)
    assert result.velocity.angular == pytest.approx(0.0, abs=1e-6)


def test_laser_obstacle_reroutes_path(make_planner):
    planner = make_planner(free_image(100, 200))
    robot = world_of(planner, (50, 20))
    planner.setRobotPose(robot)
    planner.setGoal(world_of(planner, (50, 150)))
    planner.setSensorPoints(laser_at(planner, robot, [(50, 80)]))

    result = planner.step()
    assert result.diagnostics.obstacle_cells == 1
    assert not result.diagnostics.warnings

    path = np.array(planner.path)
    assert len(path) > 0
    assert tuple(path[0]) == (50, 20)
    clearance = np.hypot(path[:, 0] - 50, path[:, 1] - 80)
    assert clearance.min() >= 5.5
    baseline = planner.cache.baseline_distance.copy()

    # 障碍消失后回到直线
    planner.setSensorPoints(np.empty((0, 2)))
    result = planner.step()
    assert MISSING_LASER_WARNING in result.diagnostics.warnings
    assert planner.path == [(50, c) for c in range(20, 151)]
    assert np.array_equal(planner.cache.baseline_distance, baseline)


def test_goal_reached_stops_and_clears_goal(make_planner):
    planner = make_planner(free_image(30, 30))
    planner.setRobotPose(world_of(planner, (10, 10)))
    planner.setGoal(world_of(planner, (10, 11)))

    result = planner.step()
    assert result.goal_reached
    assert result.velocity.is_zero
    assert result.diagnostics.is_final_waypoint
    assert not planner.have_goal
    assert planner.state == PlannerState.IDLE

    result = planner.step()
    assert not result.goal_reached
    assert result.velocity.is_zero
    assert not result.diagnostics.have_goal


def test_wall_without_gap_gives_zero_velocity(make_planner):
    image = free_image(40, 100)
    image[:, 50] = OCCUPIED
    planner = make_planner(image)
    planner.setRobotPose(world_of(planner, (20, 10)))
    planner.setGoal(world_of(planner, (20, 90)))

    result = planner.step()
    assert planner.path == []
    assert result.velocity.is_zero
    assert not result.goal_reached
    assert planner.have_goal
    assert planner.state == PlannerState.CYCLING


def test_robot_outside_map_skips_cycle(make_planner):
    planner = make_planner(free_image(20, 20))
    planner.setGoal(world_of(planner, (5, 5)))
    planner.setRobotPose((-5.0, -5.0, 0.0))

    result = planner.step()
    assert result.diagnostics.errors
    assert result.velocity.is_zero
    assert planner.path == []


def test_missing_robot_pose_skips_cycle(make_planner):
    planner = make_planner(free_image(20, 20))
    planner.setGoal(world_of(planner, (5, 5)))

    result = planner.step()
    assert result.diagnostics.errors
    assert result.velocity.is_zero


def test_rejected_map_keeps_previous_one(make_planner):
    planner = make_planner(free_image(20, 30))
    with pytest.raises(ConfigurationError):
        planner.loadMap(free_image(5, 5), 0.0, (0.0, 0.0, 0.0), 0.65, 0.196)
    assert planner.frames.shape == (20, 30)
    assert planner.frames.resolution == pytest.approx(RESOLUTION)


def test_step_without_goal_is_idle(make_planner):
    planner = make_planner(free_image(20, 20))
    planner.setRobotPose(world_of(planner, (5, 5)))

    result = planner.step()
    assert result.diagnostics.state == PlannerState.IDLE
    assert result.velocity.is_zero
    assert not planner.cache.initialized


def test_display_refreshes_without_goal(make_planner):
    config = PlannerConfig(display=DisplayConfig(enable=True, mode=DisplayMode.COST))
    image = free_image(30, 40)
    image[15, 20] = OCCUPIED
    planner = make_planner(image, config)
    planner.setRobotPose(world_of(planner, (5, 5)))

    result = planner.step()
    assert result.diagnostics.state == PlannerState.IDLE
    assert planner.cache.initialized

    shown = planner.displayImage()
    assert shown.shape == (30, 40)
    assert shown.dtype == np.float32
    assert shown[15, 20] == pytest.approx(1.0)
    assert shown[29, 39] == pytest.approx(0.2)


def test_stop_on_missing_scan(make_planner):
    config = PlannerConfig(sensor=SensorConfig(stop_on_missing_scan=True))
    planner = make_planner(free_image(30, 60), config)
    planner.setRobotPose(world_of(planner, (10, 5)))
    planner.setGoal(world_of(planner, (10, 50)))

    result = planner.step()
    assert MISSING_LASER_WARNING in result.diagnostics.warnings
    assert result.velocity.is_zero
    assert planner.path == []
    assert planner.have_goal


def test_reset_returns_to_idle(make_planner):
    planner = make_planner(free_image(30, 60))
    planner.setRobotPose(world_of(planner, (10, 5)))
    planner.setGoal(world_of(planner, (10, 50)))
    planner.step()
    assert planner.cache.initialized

    planner.reset()
    assert planner.state == PlannerState.IDLE
    assert not planner.have_goal
    assert not planner.cache.initialized
    assert planner.velocities.is_zero


def test_cancel_goal_stops_robot(make_planner):
    planner = make_planner(free_image(30, 60))
    planner.setRobotPose(world_of(planner, (10, 5)))
    planner.setGoal(world_of(planner, (10, 50)))
    assert not planner.step().velocity.is_zero

    planner.cancelGoal()
    assert planner.velocities.is_zero
    assert planner.step().diagnostics.state == PlannerState.IDLE


def test_goal_cell_entered_outside_tolerance():
    planner = Planner()
    planner.loadMap(free_image(40, 40), 0.2, (0.0, 0.0, 0.0), 0.65, 0.196)
    goal = world_of(planner, (20, 20))
    planner.setGoal(goal)
    # 与目标同处一个栅格，但距离 0.127 米大于到达阈值
    planner.setRobotPose(goal + np.array([0.09, 0.09, 0.0]))

    result = planner.step()
    assert planner.path == [(20, 20)]
    assert result.diagnostics.is_final_waypoint
    assert not result.goal_reached
    assert not result.velocity.is_zero
    assert planner.have_goal

    planner.setRobotPose(goal + np.array([0.03, 0.03, 0.0]))
    result = planner.step()
    assert result.goal_reached
    assert not planner.have_goal


class _GoalSwitchingController(MotionController):
    """在计算速度的同时由“外部线程”下发新目标"""

    def __init__(self):
        super().__init__()
        self.planner = None
        self.next_goal = None

    def compute_velocities(self, current_pose, target_point):
        if self.next_goal is not None:
            self.planner.setGoal(self.next_goal)
            self.next_goal = None
        return super().compute_velocities(current_pose, target_point)


def test_goal_set_during_arrival_cycle_is_kept(make_planner):
    controller = _GoalSwitchingController()
    planner = make_planner(free_image(30, 60), motion_controller=controller)
    controller.planner = planner
    planner.setRobotPose(world_of(planner, (10, 10)))
    planner.setGoal(world_of(planner, (10, 11)))
    controller.next_goal = world_of(planner, (10, 50))

    result = planner.step()
    assert result.goal_reached
    assert result.diagnostics.have_goal
    assert planner.have_goal
    assert planner.state == PlannerState.CYCLING

    result = planner.step()
    assert not result.goal_reached
    assert result.diagnostics.target_cell == (10, 30)
    assert not result.velocity.is_zero


def test_display_refreshes_before_first_pose(make_planner):
    config = PlannerConfig(display=DisplayConfig(enable=True, mode=DisplayMode.DISTANCE))
    image = free_image(30, 40)
    image[15, 20] = OCCUPIED
    planner = make_planner(image, config)
    planner.setSensorPoints(np.array([[0.5, 0.0]]))

    result = planner.step()
    assert not result.diagnostics.errors
    assert result.diagnostics.obstacle_cells == 0
    assert result.diagnostics.state == PlannerState.IDLE
    assert planner.cache.initialized

    shown = planner.displayImage()
    assert shown[15, 20] == pytest.approx(0.0)
    assert shown[0, 0] == pytest.approx(1.0)
