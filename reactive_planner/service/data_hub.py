#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
共享状态模块

规划周期与外部线程（目标、定位、激光、显示）之间交换数据的唯一入口，
所有读写都在同一把锁内完成。
"""

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from reactive_planner.core.coordinate_utils import PoseBundle
from reactive_planner.ui.display import DisplayMode

BundleFactory = Callable[[Sequence[float]], PoseBundle]


@dataclass
class StateSnapshot:
    """规划周期开始时读取的共享状态副本"""
    have_goal: bool
    goal: Optional[PoseBundle]
    robot: Optional[PoseBundle]
    laser_points: Optional[np.ndarray]   # 机器人局部坐标系 (N, 2)
    display_mode: DisplayMode


@dataclass
class DisplayFields:
    """供显示使用的最近一次周期结果"""
    distance: Optional[np.ndarray] = None      # 米
    cost: Optional[np.ndarray] = None
    path: List[Tuple[int, int]] = field(default_factory=list)
    obstacle_cells: Optional[np.ndarray] = None


class SharedStateGuard:
    """
    SharedStateGuard：规划周期与外部 setter 之间的共享状态
    - 目标 / 机器人位姿 / 激光快照 / 显示状态
    - 单把锁，setter 与周期读取都在锁内完成
    - 锁不跨越距离变换和路径搜索，周期只拿走一份快照
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

        self._have_goal = False
        self._goal: Optional[PoseBundle] = None
        self._robot: Optional[PoseBundle] = None
        self._laser_points: Optional[np.ndarray] = None
        self._display_mode = DisplayMode.MAP
        self._display = DisplayFields()

    @contextmanager
    def locked(self) -> Iterator["SharedStateGuard"]:
        """复合更新（例如地图重载）时持有锁"""
        with self._lock:
            yield self

    # ---------------- 目标 ----------------
    def set_goal(self, world_pose: Sequence[float], make_bundle: BundleFactory) -> PoseBundle:
        with self._lock:
            bundle = make_bundle(world_pose)
            self._goal = bundle
            self._have_goal = True
        return bundle

    def clear_goal(self, expected: Optional[PoseBundle] = None) -> bool:
        """
        清除目标，返回是否真正清除了一个目标

        Args:
            expected: 只有当前目标仍是该对象时才清除；None 表示无条件清除
        """
        with self._lock:
            if not self._have_goal:
                return False
            if expected is not None and self._goal is not expected:
                return False
            self._have_goal = False
        return True

    @property
    def have_goal(self) -> bool:
        with self._lock:
            return self._have_goal

    # ---------------- 位姿 ----------------
    def set_robot_pose(self, world_pose: Sequence[float], make_bundle: BundleFactory) -> PoseBundle:
        with self._lock:
            bundle = make_bundle(world_pose)
            self._robot = bundle
        return bundle

    # ---------------- 激光 ----------------
    def set_laser_points(self, points: np.ndarray) -> None:
        pts = np.array(points, dtype=np.float64, copy=True).reshape(-1, 2)
        with self._lock:
            self._laser_points = pts

    # ---------------- 显示 ----------------
    def set_display_mode(self, mode: DisplayMode) -> None:
        with self._lock:
            self._display_mode = DisplayMode(mode)

    def set_display_fields(self, fields: DisplayFields) -> None:
        with self._lock:
            self._display = fields

    def get_display_fields(self) -> DisplayFields:
        with self._lock:
            return self._display

    # ---------------- 周期快照 ----------------
    def snapshot(self) -> StateSnapshot:
        with self._lock:
            return StateSnapshot(
                have_goal=self._have_goal,
                goal=self._goal,
                robot=self._robot,
                laser_points=self._laser_points,
                display_mode=self._display_mode,
            )

    def rebase_unlocked(self, make_bundle: BundleFactory) -> None:
        """
        坐标系变化后按世界坐标重新生成目标/位姿的图像与像素表示

        调用方需已通过 locked() 持有锁。
        """
        if self._goal is not None:
            self._goal = make_bundle(self._goal.world)
        if self._robot is not None:
            self._robot = make_bundle(self._robot.world)
        logger.debug("坐标系已更新，目标与机器人位姿已重新换算")
