#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
路径跟随模块

在栅格路径上选择固定前瞻距离处的目标点，交给运动控制器计算速度。
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from reactive_planner.controller.motion_controller import VelocityCommand
from reactive_planner.core.coordinate_utils import FrameManager
from reactive_planner.core.interfaces import IMotionController

Cell = Tuple[int, int]


@dataclass
class WaypointResult:
    """路径跟随输出"""

    velocity: VelocityCommand
    goal_reached: bool
    target_cell: Optional[Cell]
    is_final: bool


class WaypointController:
    """前瞻目标点选择 + 运动控制"""

    def __init__(self, motion_controller: IMotionController, lookahead_distance: float = 1.0) -> None:
        """
        Args:
            motion_controller: 运动控制器
            lookahead_distance: 前瞻距离（米）
        """
        self.motion_controller = motion_controller
        self.lookahead_distance_ = float(lookahead_distance)
        self.lookahead_cells_: int = 1

    def set_resolution(self, resolution: float) -> None:
        """根据地图分辨率换算前瞻栅格数"""
        # 加一个极小量，避免 1.0 / 0.05 这类比值因浮点误差被截断成 19
        self.lookahead_cells_ = max(1, int(self.lookahead_distance_ / resolution + 1e-6))

    @property
    def lookahead_cells(self) -> int:
        return self.lookahead_cells_

    def select_waypoint(self, path: List[Cell]) -> Tuple[Cell, bool]:
        """
        选择目标栅格

        Returns:
            (目标栅格, 是否为最后一个路点)
        """
        if not path:
            raise ValueError("路径为空")
        n = self.lookahead_cells_
        if len(path) > n:
            return path[n], False
        return path[-1], True

    def compute(
        self,
        path: List[Cell],
        robot_pose_image: Sequence[float],
        goal_pose_image: Sequence[float],
        frames: FrameManager,
    ) -> WaypointResult:
        """
        计算本周期的速度指令

        最后一个路点直接以目标的精确位置为控制目标；中间路点即使距离很近也不判定到达。

        Raises:
            OutOfBoundsError: 目标栅格超出地图范围
        """
        target_cell, is_final = self.select_waypoint(path)

        if is_final:
            target_xy = (goal_pose_image[0], goal_pose_image[1])
        else:
            target_xy = frames.grid_to_image(target_cell, strict=True)

        velocity, reached = self.motion_controller.compute_velocities(robot_pose_image, target_xy)

        return WaypointResult(
            velocity=velocity,
            goal_reached=bool(reached and is_final),
            target_cell=target_cell,
            is_final=is_final,
        )
