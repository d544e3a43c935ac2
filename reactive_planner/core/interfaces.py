#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
核心接口定义：规划器依赖的外部协作者的抽象接口

Planner 只依赖这些接口，默认实现分别位于 path_planner / core / controller 中，
也可以注入任意满足接口的实现。
"""

from abc import ABC, abstractmethod
from typing import Sequence, Tuple, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from reactive_planner.controller.motion_controller import VelocityCommand
    from reactive_planner.path_planner.path_search import PathMap


class IDistanceTransformEngine(ABC):
    """距离变换引擎接口"""

    @abstractmethod
    def set_max_distance(self, max_distance: float) -> None:
        """设置距离上限（栅格单位）"""
        pass

    @abstractmethod
    def set_classification_grid(self, grid: np.ndarray) -> None:
        """设置分类栅格"""
        pass

    @abstractmethod
    def init(self) -> None:
        """根据分类栅格初始化静态障碍种子"""
        pass

    @abstractmethod
    def max_index(self) -> int:
        """
        静态障碍种子的数量

        Returns:
            动态障碍种子的起始索引
        """
        pass

    @abstractmethod
    def seed_obstacles(self, cells: np.ndarray, max_index: int) -> None:
        """
        添加动态障碍种子

        Args:
            cells: (N, 2) 栅格 (row, col)
            max_index: 动态种子的起始索引
        """
        pass

    @abstractmethod
    def compute(self) -> np.ndarray:
        """计算并返回当前工作距离场"""
        pass

    @property
    @abstractmethod
    def field(self) -> np.ndarray:
        """当前工作距离场"""
        pass

    @abstractmethod
    def load_field(self, field: np.ndarray) -> None:
        """用给定距离场覆盖工作距离场（拷贝）"""
        pass


class IPathSearchEngine(ABC):
    """路径搜索引擎接口"""

    @abstractmethod
    def set_max_cost(self, max_cost: float) -> None:
        """代价大于该值的栅格不可通行"""
        pass

    @abstractmethod
    def set_cost_field(self, cost_field: np.ndarray) -> None:
        pass

    @abstractmethod
    def set_goals(self, goals: Sequence[Tuple[int, int]]) -> None:
        pass

    @abstractmethod
    def compute(self) -> "PathMap":
        """从目标出发生成父指针树"""
        pass


class IObstacleRasterizer(ABC):
    """动态障碍栅格化接口"""

    @abstractmethod
    def set_resolution(self, resolution: float) -> None:
        pass

    @abstractmethod
    def set_grid_shape(self, shape: Tuple[int, int]) -> None:
        pass

    @abstractmethod
    def set_robot_pose(self, pose_image: Sequence[float]) -> None:
        """机器人在图像坐标系下的位姿"""
        pass

    @abstractmethod
    def set_points(self, points: np.ndarray) -> None:
        """机器人局部坐标系下的激光点 (N, 2)"""
        pass

    @abstractmethod
    def clear_points(self) -> None:
        pass

    @abstractmethod
    def compute(self) -> None:
        pass

    @abstractmethod
    def occupied_cells(self) -> np.ndarray:
        """(N, 2) 被占据的栅格"""
        pass


class IMotionController(ABC):
    """运动控制器接口"""

    @abstractmethod
    def compute_velocities(
        self,
        current_pose: Sequence[float],
        target_point: Sequence[float],
    ) -> Tuple["VelocityCommand", bool]:
        """
        计算朝目标点运动的速度

        Returns:
            (速度指令, 是否到达目标点)
        """
        pass

    @abstractmethod
    def reset_velocities(self) -> None:
        """清空内部状态（积分项、上一次误差等）"""
        pass
