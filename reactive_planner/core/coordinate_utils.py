#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
坐标转换工具模块

维护三个坐标系之间的变换：
- 世界坐标系：左下角为原点，X 向右，Y 向上（地图 yaml 中的 origin，ROS 约定）
- 图像坐标系：左上角为原点，X 向下，Y 向右（OpenCV 约定，单位为米）
- 像素栅格：行/列索引，每个地图像素一个栅格
"""

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from reactive_planner.common.exceptions import OutOfBoundsError

Cell = Tuple[int, int]  # (row, col)


def normalize_angle(angle: float) -> float:
    """将角度归一化到 [-π, π] 区间"""
    return math.atan2(math.sin(angle), math.cos(angle))


def v2t(pose: Sequence[float]) -> np.ndarray:
    """位姿 (x, y, theta) 转 3x3 齐次变换矩阵"""
    x, y, theta = float(pose[0]), float(pose[1]), float(pose[2])
    c, s = math.cos(theta), math.sin(theta)
    return np.array([
        [c, -s, x],
        [s, c, y],
        [0.0, 0.0, 1.0],
    ], dtype=np.float64)


def t2v(transform: np.ndarray) -> np.ndarray:
    """3x3 齐次变换矩阵转位姿 (x, y, theta)"""
    theta = math.atan2(transform[1, 0], transform[0, 0])
    return np.array([transform[0, 2], transform[1, 2], theta], dtype=np.float64)


def invert_transform(transform: np.ndarray) -> np.ndarray:
    """刚体变换求逆（R^T, -R^T t）"""
    rot_t = transform[:2, :2].T
    inv = np.eye(3, dtype=np.float64)
    inv[:2, :2] = rot_t
    inv[:2, 2] = -rot_t @ transform[:2, 2]
    return inv


@dataclass(frozen=True, eq=False)
class FrameTransform:
    """二维刚体变换及其预先计算的逆变换"""
    matrix: np.ndarray
    inverse_matrix: np.ndarray

    @classmethod
    def from_pose(cls, pose: Sequence[float]) -> "FrameTransform":
        m = v2t(pose)
        return cls(matrix=m, inverse_matrix=invert_transform(m))

    @classmethod
    def identity(cls) -> "FrameTransform":
        return cls(matrix=np.eye(3), inverse_matrix=np.eye(3))

    def compose(self, other: "FrameTransform") -> "FrameTransform":
        m = self.matrix @ other.matrix
        return FrameTransform(matrix=m, inverse_matrix=invert_transform(m))

    def pose(self) -> np.ndarray:
        return t2v(self.matrix)

    def apply_pose(self, pose: Sequence[float]) -> np.ndarray:
        return t2v(self.matrix @ v2t(pose))

    def apply_inverse_pose(self, pose: Sequence[float]) -> np.ndarray:
        return t2v(self.inverse_matrix @ v2t(pose))

    def apply_points(self, points: np.ndarray) -> np.ndarray:
        """对 (N, 2) 点集做变换"""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        return pts @ self.matrix[:2, :2].T + self.matrix[:2, 2]


@dataclass(frozen=True, eq=False)
class PoseBundle:
    """同一位姿的三种同步表示，整体原子替换"""
    world: np.ndarray    # 世界坐标 (x, y, theta)
    image: np.ndarray    # 图像坐标 (x, y, theta)，单位米
    pixel: Cell          # 像素栅格 (row, col)


class FrameManager:
    """
    坐标系管理器

    变换只在 configure()（地图加载）时修改，其余方法均为纯转换。
    """

    def __init__(self) -> None:
        self.resolution_: float = 1.0
        self.inverse_resolution_: float = 1.0
        self.rows_: int = 0
        self.cols_: int = 0

        self.map_origin_ = FrameTransform.identity()       # map <-> world
        self.map_to_image_ = FrameTransform.identity()     # image <-> map
        self.image_origin_ = FrameTransform.identity()     # image <-> world

    def configure(self, resolution: float, origin: Sequence[float], rows: int, cols: int) -> None:
        """
        根据地图参数重建所有变换

        Args:
            resolution: 地图分辨率（米/像素）
            origin: 地图原点 (x, y, theta)，世界坐标系
            rows: 图像行数（高度）
            cols: 图像列数（宽度）
        """
        self.resolution_ = float(resolution)
        self.inverse_resolution_ = 1.0 / self.resolution_
        self.rows_ = int(rows)
        self.cols_ = int(cols)

        # 从左下角 Y 向上转到左上角 X 向下：平移图像高度，再旋转 -90°
        self.map_origin_ = FrameTransform.from_pose(origin)
        self.map_to_image_ = FrameTransform.from_pose(
            (0.0, self.rows_ * self.resolution_, -math.pi / 2)
        )
        self.image_origin_ = self.map_origin_.compose(self.map_to_image_)

    @property
    def resolution(self) -> float:
        return self.resolution_

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows_, self.cols_)

    @property
    def image_origin(self) -> FrameTransform:
        return self.image_origin_

    @property
    def map_origin(self) -> FrameTransform:
        return self.map_origin_

    # ---------------- 位姿 ----------------
    def world_to_image(self, pose: Sequence[float]) -> np.ndarray:
        return self.image_origin_.apply_inverse_pose(pose)

    def image_to_world(self, pose: Sequence[float]) -> np.ndarray:
        return self.image_origin_.apply_pose(pose)

    # ---------------- 栅格 ----------------
    def in_bounds(self, cell: Cell) -> bool:
        r, c = cell
        return 0 <= r < self.rows_ and 0 <= c < self.cols_

    def clamp_cell(self, cell: Cell) -> Cell:
        r, c = cell
        r = max(0, min(int(r), self.rows_ - 1))
        c = max(0, min(int(c), self.cols_ - 1))
        return (r, c)

    def image_to_grid(self, xy: Sequence[float]) -> Cell:
        """图像坐标（米）转栅格，向下取整到包含该点的栅格"""
        r = int(math.floor(float(xy[0]) * self.inverse_resolution_))
        c = int(math.floor(float(xy[1]) * self.inverse_resolution_))
        return (r, c)

    def grid_to_image(self, cell: Cell, strict: bool = True) -> np.ndarray:
        """
        栅格转图像坐标（栅格中心，米）

        Args:
            cell: 栅格 (row, col)
            strict: True 时越界抛出 OutOfBoundsError，False 时截断到边界

        Raises:
            OutOfBoundsError: strict 模式下栅格越界
        """
        if not self.in_bounds(cell):
            if strict:
                raise OutOfBoundsError(cell, self.shape)
            cell = self.clamp_cell(cell)
        r, c = cell
        return np.array([(r + 0.5) * self.resolution_, (c + 0.5) * self.resolution_])

    def world_to_grid(self, pose: Sequence[float]) -> Cell:
        image = self.world_to_image(pose if len(pose) == 3 else (pose[0], pose[1], 0.0))
        return self.image_to_grid(image[:2])

    def grid_to_world(self, cell: Cell, strict: bool = True) -> np.ndarray:
        """栅格中心的世界坐标 (x, y)"""
        xy = self.grid_to_image(cell, strict=strict)
        return self.image_origin_.apply_points(xy)[0]

    def pose_bundle(self, world_pose: Sequence[float]) -> PoseBundle:
        """由世界位姿同时生成图像位姿和像素栅格"""
        world = np.asarray(world_pose, dtype=np.float64).reshape(3).copy()
        image = self.world_to_image(world)
        return PoseBundle(world=world, image=image, pixel=self.image_to_grid(image[:2]))
