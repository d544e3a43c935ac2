#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""测试公共夹具"""

import math

import numpy as np
import pytest

from reactive_planner.config import PlannerConfig
from reactive_planner.nav_runtime.planner import Planner

RESOLUTION = 0.05
FREE = 254
OCCUPIED = 0


def free_image(rows: int, cols: int) -> np.ndarray:
    return np.full((rows, cols), FREE, dtype=np.uint8)


def world_of(planner: Planner, cell, theta: float = 0.0) -> np.ndarray:
    """栅格中心对应的世界位姿"""
    xy = planner.frames.grid_to_world(cell)
    return np.array([xy[0], xy[1], theta])


def laser_at(planner: Planner, robot_world: np.ndarray, cells) -> np.ndarray:
    """把若干栅格中心转换为机器人局部坐标系下的激光点"""
    c, s = math.cos(robot_world[2]), math.sin(robot_world[2])
    pts = []
    for cell in cells:
        p = planner.frames.grid_to_world(cell) - robot_world[:2]
        pts.append((c * p[0] + s * p[1], -s * p[0] + c * p[1]))
    return np.array(pts)


@pytest.fixture
def make_planner():
    def _make(image: np.ndarray, config: PlannerConfig = None, **kwargs) -> Planner:
        planner = Planner(config, **kwargs)
        planner.loadMap(image, RESOLUTION, (0.0, 0.0, 0.0), 0.65, 0.196)
        return planner
    return _make
