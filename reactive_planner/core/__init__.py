#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
核心模块

坐标系、静态地图、代价映射、动态障碍栅格化与协作者接口。
"""

from .coordinate_utils import FrameManager, FrameTransform, PoseBundle
from .map_model import CellClass, StaticMapState, classify_occupancy
from .grid_preprocess import distances_to_cost, build_cost_field
from .dynamic_obstacles import DynamicObstacleRasterizer

__all__ = [
    'FrameManager',
    'FrameTransform',
    'PoseBundle',
    'CellClass',
    'StaticMapState',
    'classify_occupancy',
    'distances_to_cost',
    'build_cost_field',
    'DynamicObstacleRasterizer',
]
