#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
代价图构建模块

将距离场（到最近障碍的距离）映射为路径搜索使用的代价图：
- 机器人半径内：最大代价（不可通行）
- 安全区域外：最小代价
- 两者之间：二次曲线平滑过渡
"""

import numpy as np
from loguru import logger


def distances_to_cost(
    distance_m: np.ndarray,
    robot_radius: float,
    safety_region: float,
    min_cost: float,
    max_cost: float,
) -> np.ndarray:
    """
    距离场转代价图

    Args:
        distance_m: 距离场（米）
        robot_radius: 机器人半径（米）
        safety_region: 安全区域半径（米）
        min_cost: 最小代价
        max_cost: 最大代价

    Returns:
        float32 代价图，关于距离单调不增
    """
    expansion_range = safety_region - robot_radius
    if expansion_range <= 0:
        raise ValueError(f"safety_region 必须大于 robot_radius: {safety_region} <= {robot_radius}")

    k = (max_cost - min_cost) / (expansion_range * expansion_range)

    d = np.asarray(distance_m, dtype=np.float32)
    dr = safety_region - d
    cost = (min_cost + k * dr * dr).astype(np.float32)
    cost[d > safety_region] = min_cost
    cost[d < robot_radius] = max_cost
    return cost


def build_cost_field(
    distance_cells: np.ndarray,
    resolution: float,
    robot_radius: float,
    safety_region: float,
    min_cost: float,
    max_cost: float,
) -> np.ndarray:
    """栅格单位距离场 → 代价图（内部先换算成米）"""
    cost = distances_to_cost(
        distance_cells * np.float32(resolution),
        robot_radius,
        safety_region,
        min_cost,
        max_cost,
    )
    logger.debug(f"代价图构建完成: 不可通行栅格={int((cost >= max_cost).sum())}")
    return cost
