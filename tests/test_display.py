#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""显示图像测试"""

import numpy as np
import pytest

from reactive_planner.core.map_model import CellClass
from reactive_planner.ui.display import DisplayMode, render_display


def _classification():
    grid = np.full((20, 30), CellClass.FREE, dtype=np.uint8)
    grid[0, 0] = CellClass.OCCUPIED
    grid[0, 1] = CellClass.UNKNOWN
    return grid


def test_map_shades():
    shown = render_display(DisplayMode.MAP, _classification())
    assert shown.dtype == np.float32
    assert shown[0, 0] == 0.0
    assert shown[0, 1] == pytest.approx(0.5)
    assert shown[10, 15] == 1.0


def test_distance_is_normalised_by_safety_region():
    distance = np.full((20, 30), 0.25, dtype=np.float32)
    distance[5, 5] = 3.0
    shown = render_display(DisplayMode.DISTANCE, _classification(), distance_m=distance, safety_region=0.5)
    assert shown[10, 10] == pytest.approx(0.5)
    assert shown[5, 5] == pytest.approx(1.0)


def test_cost_is_normalised_by_max_cost():
    cost = np.full((20, 30), 20.0, dtype=np.float32)
    shown = render_display("cost", _classification(), cost=cost, max_cost=100.0)
    assert shown[10, 10] == pytest.approx(0.2)


def test_missing_field_falls_back_to_map():
    shown = render_display(DisplayMode.COST, _classification())
    assert shown[0, 0] == 0.0
    assert shown[10, 15] == 1.0


def test_overlays_stay_in_range():
    path = [(10, c) for c in range(5, 25)]
    shown = render_display(
        DisplayMode.MAP,
        _classification(),
        robot_pixel=(10, 5),
        goal_pixel=(10, 25),
        obstacle_cells=np.array([[3, 3]]),
        path=path,
    )
    assert shown.min() >= 0.0
    assert shown.max() <= 1.0
    assert shown[10, 15] == pytest.approx(0.25)
