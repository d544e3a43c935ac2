#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
距离场缓存

地图加载/重置时只做一次完整距离变换，保存为基线；
每个规划周期先把基线拷贝回工作距离场，再叠加动态障碍。
"""

from typing import Callable, Optional

import numpy as np
from loguru import logger

from reactive_planner.common.exceptions import InitializationError
from reactive_planner.core.interfaces import IDistanceTransformEngine

CostBuilder = Callable[[np.ndarray], np.ndarray]


class DistanceFieldCache:
    """基线距离场 / 代价图缓存"""

    def __init__(self, engine: IDistanceTransformEngine) -> None:
        self.engine_ = engine
        self.baseline_distance_: Optional[np.ndarray] = None
        self.baseline_cost_: Optional[np.ndarray] = None
        self.max_index_: int = 0

    @property
    def engine(self) -> IDistanceTransformEngine:
        return self.engine_

    @property
    def initialized(self) -> bool:
        return self.baseline_distance_ is not None

    @property
    def baseline_distance(self) -> Optional[np.ndarray]:
        return self.baseline_distance_

    @property
    def baseline_cost(self) -> Optional[np.ndarray]:
        return self.baseline_cost_

    @property
    def max_index(self) -> int:
        return self.max_index_

    def initialize_baseline(
        self,
        classification_grid: np.ndarray,
        max_radius: float,
        cost_builder: CostBuilder,
    ) -> np.ndarray:
        """
        计算无动态障碍的基线距离场（开销较大，只在地图加载/重置后执行）

        Args:
            classification_grid: 分类栅格
            max_radius: 距离上限（栅格单位）
            cost_builder: 距离场 → 代价图

        Returns:
            基线距离场
        """
        self.engine_.set_max_distance(max_radius)
        self.engine_.set_classification_grid(classification_grid)
        self.engine_.init()
        self.max_index_ = self.engine_.max_index()

        field = self.engine_.compute()
        self.baseline_distance_ = np.array(field, dtype=np.float32, copy=True)
        self.baseline_distance_.setflags(write=False)

        self.baseline_cost_ = cost_builder(self.baseline_distance_)
        self.baseline_cost_.setflags(write=False)

        logger.info(
            f"基线距离场初始化完成: size={self.baseline_distance_.shape}, "
            f"max_radius={max_radius:.1f}, max_index={self.max_index_}"
        )
        return self.baseline_distance_

    def restore(self) -> np.ndarray:
        """基线 → 工作距离场（纯拷贝，不重新计算）"""
        if self.baseline_distance_ is None:
            raise InitializationError("基线距离场尚未初始化")
        self.engine_.load_field(self.baseline_distance_)
        return self.engine_.field

    def invalidate(self) -> None:
        self.baseline_distance_ = None
        self.baseline_cost_ = None
        self.max_index_ = 0
