#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
动态障碍栅格化：把机器人局部坐标系下的激光点投影到像素栅格
"""

from typing import Sequence, Tuple

import numpy as np
from loguru import logger

from reactive_planner.core.coordinate_utils import FrameTransform
from reactive_planner.core.interfaces import IObstacleRasterizer


class DynamicObstacleRasterizer(IObstacleRasterizer):
    """
    激光点 → 占据栅格

    示例:
        ```python
        raster = DynamicObstacleRasterizer()
        raster.set_resolution(0.05)
        raster.set_grid_shape((200, 200))
        raster.set_robot_pose(robot_pose_image)
        raster.set_points(laser_points)
        raster.compute()
        cells = raster.occupied_cells()
        ```
    """

    def __init__(self) -> None:
        self.resolution_: float = 1.0
        self.shape_: Tuple[int, int] = (0, 0)
        self.robot_pose_ = np.zeros(3)
        self.points_ = np.empty((0, 2), dtype=np.float64)
        self.cells_ = np.empty((0, 2), dtype=np.int64)

    def set_resolution(self, resolution: float) -> None:
        self.resolution_ = float(resolution)

    def set_grid_shape(self, shape: Tuple[int, int]) -> None:
        self.shape_ = (int(shape[0]), int(shape[1]))

    def set_robot_pose(self, pose_image: Sequence[float]) -> None:
        self.robot_pose_ = np.asarray(pose_image, dtype=np.float64).reshape(3).copy()

    def set_points(self, points: np.ndarray) -> None:
        self.points_ = np.asarray(points, dtype=np.float64).reshape(-1, 2).copy()

    def clear_points(self) -> None:
        self.points_ = np.empty((0, 2), dtype=np.float64)
        self.cells_ = np.empty((0, 2), dtype=np.int64)

    def compute(self) -> None:
        if self.points_.shape[0] == 0:
            self.cells_ = np.empty((0, 2), dtype=np.int64)
            return

        image_pts = FrameTransform.from_pose(self.robot_pose_).apply_points(self.points_)
        cells = np.floor(image_pts / self.resolution_).astype(np.int64)

        rows, cols = self.shape_
        inside = (
            (cells[:, 0] >= 0) & (cells[:, 0] < rows)
            & (cells[:, 1] >= 0) & (cells[:, 1] < cols)
        )
        dropped = int((~inside).sum())
        if dropped:
            logger.debug(f"丢弃栅格范围外的激光点: {dropped}/{cells.shape[0]}")

        self.cells_ = np.unique(cells[inside], axis=0)

    def occupied_cells(self) -> np.ndarray:
        return self.cells_
