#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""运动控制器与路点控制器测试"""

import math

import pytest

from reactive_planner.controller.heading_controller import HeadingController
from reactive_planner.controller.motion_controller import MotionController, VelocityCommand
from reactive_planner.core.coordinate_utils import FrameManager
from reactive_planner.core.interfaces import IMotionController
from reactive_planner.nav_runtime.waypoint_controller import WaypointController


class _AlwaysReached(IMotionController):
    def __init__(self):
        self.targets = []

    def compute_velocities(self, current_pose, target_point):
        self.targets.append(tuple(target_point))
        return VelocityCommand.zero(), True

    def reset_velocities(self):
        pass


def _frames(rows=50, cols=150, resolution=0.05) -> FrameManager:
    frames = FrameManager()
    frames.configure(resolution, (0.0, 0.0, 0.0), rows, cols)
    return frames


def test_within_tolerance_is_reached():
    mc = MotionController(goal_tolerance=0.1)
    cmd, reached = mc.compute_velocities((1.0, 1.0, 0.0), (1.05, 1.0))
    assert reached
    assert cmd.is_zero


def test_aligned_target_drives_forward():
    mc = MotionController(max_linear_velocity=0.5, linear_gain=1.0)
    cmd, reached = mc.compute_velocities((0.0, 0.0, 0.0), (2.0, 0.0))
    assert not reached
    assert cmd.linear == pytest.approx(0.5)
    assert cmd.angular == pytest.approx(0.0)


def test_large_heading_error_turns_in_place():
    mc = MotionController(angle_slow_turn_deg=60.0, max_angular_velocity=1.0)
    cmd, _ = mc.compute_velocities((0.0, 0.0, 0.0), (0.0, 2.0))
    assert cmd.linear == pytest.approx(0.0)
    assert cmd.angular == pytest.approx(1.0)


def test_reset_clears_integrator():
    heading = HeadingController(kp=1.0, ki=1.0, kd=0.5, max_output=2.0)
    heading.Update(0.0, 1.0, 0.1)
    heading.Update(0.0, 1.0, 0.1)
    assert heading.integral_term_ != 0.0
    assert heading.prev_error_ is not None

    heading.Reset()
    assert heading.integral_term_ == 0.0
    assert heading.prev_error_ is None


def test_heading_controller_rejects_bad_gains():
    with pytest.raises(ValueError):
        HeadingController(kp=-1.0, ki=0.0, kd=0.0, max_output=1.0)
    with pytest.raises(ValueError):
        HeadingController(kp=1.0, ki=0.0, kd=0.0, max_output=0.0)


def test_lookahead_cells_from_resolution():
    wc = WaypointController(_AlwaysReached(), lookahead_distance=1.0)
    wc.set_resolution(0.05)
    assert wc.lookahead_cells == 20


def test_intermediate_waypoint_never_reaches_goal():
    mc = _AlwaysReached()
    wc = WaypointController(mc, lookahead_distance=1.0)
    wc.set_resolution(0.05)
    frames = _frames()
    path = [(0, c) for c in range(100)]

    result = wc.compute(path, (0.025, 0.025, math.pi / 2), (0.025, 5.025, 0.0), frames)

    assert result.target_cell == (0, 20)
    assert not result.is_final
    assert not result.goal_reached
    assert mc.targets[-1] == pytest.approx((0.025, 1.025))


def test_short_path_targets_exact_goal():
    mc = _AlwaysReached()
    wc = WaypointController(mc, lookahead_distance=1.0)
    wc.set_resolution(0.05)
    path = [(0, c) for c in range(20)]

    result = wc.compute(path, (0.025, 0.025, 0.0), (0.025, 1.03, 0.0), _frames())

    assert result.is_final
    assert result.target_cell == (0, 19)
    assert result.goal_reached
    assert mc.targets[-1] == pytest.approx((0.025, 1.03))


def test_empty_path_is_rejected():
    wc = WaypointController(_AlwaysReached())
    with pytest.raises(ValueError):
        wc.select_waypoint([])
