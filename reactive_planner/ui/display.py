#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
显示图像生成（纯函数）

根据显示模式把分类栅格 / 距离场 / 代价图转换成 [0, 1] 浮点图，
并叠加机器人、目标、激光障碍和路径。只绘制到 numpy 数组，不创建窗口。
"""

from enum import Enum
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np


class DisplayMode(str, Enum):
    """显示内容"""
    MAP = "map"
    DISTANCE = "distance"
    COST = "cost"


# 分类栅格取值：0=free, 1=occupied, 2=unknown
_MAP_SHADES = np.array([1.0, 0.0, 0.5], dtype=np.float32)


def render_display(
    mode: DisplayMode,
    classification: np.ndarray,
    distance_m: Optional[np.ndarray] = None,
    cost: Optional[np.ndarray] = None,
    safety_region: float = 1.0,
    max_cost: float = 100.0,
    robot_pixel: Optional[Tuple[int, int]] = None,
    goal_pixel: Optional[Tuple[int, int]] = None,
    obstacle_cells: Optional[np.ndarray] = None,
    path: Optional[Sequence[Tuple[int, int]]] = None,
) -> np.ndarray:
    """
    生成显示图像

    Args:
        mode: 显示模式
        classification: 分类栅格
        distance_m: 距离场（米），DISTANCE 模式使用
        cost: 代价图，COST 模式使用
        safety_region: 距离归一化分母
        max_cost: 代价归一化分母
        robot_pixel: 机器人栅格 (row, col)
        goal_pixel: 目标栅格 (row, col)，None 表示无目标
        obstacle_cells: 激光障碍栅格 (N, 2)
        path: 路径栅格列表

    Returns:
        float32 图像，取值 [0, 1]
    """
    mode = DisplayMode(mode)
    if mode == DisplayMode.DISTANCE and distance_m is not None:
        shown = distance_m.astype(np.float32) * np.float32(1.0 / safety_region)
    elif mode == DisplayMode.COST and cost is not None:
        shown = cost.astype(np.float32) * np.float32(1.0 / max_cost)
    else:
        shown = _MAP_SHADES[np.clip(classification, 0, 2)]
    shown = np.clip(shown, 0.0, 1.0).astype(np.float32)

    # OpenCV 点坐标为 (x=col, y=row)
    if path is not None and len(path) > 1:
        pts = np.array([(c, r) for r, c in path], dtype=np.int32).reshape(-1, 1, 2)
        cv2.polylines(shown, [pts], False, 0.25, 1)

    if obstacle_cells is not None:
        for r, c in np.asarray(obstacle_cells).reshape(-1, 2):
            cv2.circle(shown, (int(c), int(r)), 3, 1.0)

    if goal_pixel is not None:
        cv2.circle(shown, (int(goal_pixel[1]), int(goal_pixel[0])), 3, 0.0)

    if robot_pixel is not None:
        r, c = int(robot_pixel[0]), int(robot_pixel[1])
        cv2.rectangle(shown, (c - 2, r - 2), (c + 2, r + 2), 0.0)

    return shown
