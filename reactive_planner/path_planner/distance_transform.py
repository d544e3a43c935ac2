#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
距离变换模块：计算每个栅格到最近障碍的距离（栅格单位，有上限）

- 首次计算：对静态障碍做完整的 cv2.distanceTransform
- 增量计算：只在动态障碍种子的包围盒（外扩最大距离）内重新计算，
  与当前工作距离场取最小值，静态部分以已有距离场为上界
"""

import math
from typing import Optional

import cv2
import numpy as np
from loguru import logger

from reactive_planner.common.exceptions import InitializationError
from reactive_planner.core.interfaces import IDistanceTransformEngine
from reactive_planner.core.map_model import CellClass


class DistanceTransformEngine(IDistanceTransformEngine):
    """
    基于 OpenCV 的距离变换引擎

    示例:
        ```python
        engine = DistanceTransformEngine()
        engine.set_max_distance(20.0)
        engine.set_classification_grid(grid)
        engine.init()
        baseline = engine.compute()

        engine.load_field(baseline)
        engine.seed_obstacles(cells, engine.max_index())
        field = engine.compute()
        ```
    """

    def __init__(self, treat_unknown_as_obstacle: bool = True) -> None:
        self.treat_unknown_as_obstacle_ = treat_unknown_as_obstacle

        self.max_distance_: float = 1.0
        self.grid_: Optional[np.ndarray] = None
        self.static_mask_: Optional[np.ndarray] = None
        self.static_count_: int = 0

        self.field_: Optional[np.ndarray] = None
        self.seeds_ = np.empty((0, 2), dtype=np.int64)
        self.seed_start_index_: int = 0

    def set_max_distance(self, max_distance: float) -> None:
        if max_distance <= 0:
            raise ValueError(f"max_distance 必须大于0: {max_distance}")
        self.max_distance_ = float(max_distance)

    def set_classification_grid(self, grid: np.ndarray) -> None:
        self.grid_ = np.asarray(grid)

    def init(self) -> None:
        if self.grid_ is None:
            raise InitializationError("未设置分类栅格")

        mask = self.grid_ == CellClass.OCCUPIED
        if self.treat_unknown_as_obstacle_:
            mask |= self.grid_ == CellClass.UNKNOWN
        self.static_mask_ = mask
        self.static_count_ = int(mask.sum())

        self.field_ = None
        self.seeds_ = np.empty((0, 2), dtype=np.int64)
        logger.debug(f"距离变换初始化: 静态障碍种子={self.static_count_}, 最大距离={self.max_distance_:.1f}")

    def max_index(self) -> int:
        return self.static_count_

    def seed_obstacles(self, cells: np.ndarray, max_index: int) -> None:
        if self.static_mask_ is None:
            raise InitializationError("请先调用 init()")

        cells = np.asarray(cells, dtype=np.int64).reshape(-1, 2)
        rows, cols = self.static_mask_.shape
        inside = (
            (cells[:, 0] >= 0) & (cells[:, 0] < rows)
            & (cells[:, 1] >= 0) & (cells[:, 1] < cols)
        )
        self.seeds_ = cells[inside]
        self.seed_start_index_ = int(max_index)

    @property
    def field(self) -> Optional[np.ndarray]:
        return self.field_

    def load_field(self, field: np.ndarray) -> None:
        self.field_ = np.array(field, dtype=np.float32, copy=True)
        self.seeds_ = np.empty((0, 2), dtype=np.int64)

    def compute(self) -> np.ndarray:
        if self.static_mask_ is None:
            raise InitializationError("请先调用 init()")

        if self.field_ is None:
            self.field_ = self._full_transform(self.static_mask_)

        if self.seeds_.shape[0] > 0:
            self._propagate_seeds()
            self.seeds_ = np.empty((0, 2), dtype=np.int64)

        return self.field_

    def _full_transform(self, obstacle_mask: np.ndarray) -> np.ndarray:
        if not obstacle_mask.any():
            return np.full(obstacle_mask.shape, self.max_distance_, dtype=np.float32)

        # distanceTransform 计算到 0 像素的距离，障碍需为 0
        dt_input = np.where(obstacle_mask, 0, 1).astype(np.uint8)
        dist = cv2.distanceTransform(dt_input, cv2.DIST_L2, 5)
        return np.minimum(dist, np.float32(self.max_distance_)).astype(np.float32)

    def _propagate_seeds(self) -> None:
        rows, cols = self.field_.shape
        pad = int(math.ceil(self.max_distance_)) + 1

        r0 = max(0, int(self.seeds_[:, 0].min()) - pad)
        r1 = min(rows, int(self.seeds_[:, 0].max()) + pad + 1)
        c0 = max(0, int(self.seeds_[:, 1].min()) - pad)
        c1 = min(cols, int(self.seeds_[:, 1].max()) + pad + 1)

        local_mask = np.zeros((r1 - r0, c1 - c0), dtype=bool)
        local_mask[self.seeds_[:, 0] - r0, self.seeds_[:, 1] - c0] = True

        local = self._full_transform(local_mask)
        window = self.field_[r0:r1, c0:c1]
        np.minimum(window, local, out=window)

        logger.debug(
            f"动态障碍增量更新: seeds={self.seeds_.shape[0]} (起始索引 {self.seed_start_index_}), "
            f"window=({r1 - r0}x{c1 - c0})"
        )
