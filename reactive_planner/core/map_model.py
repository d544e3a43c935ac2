#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
静态地图模块

保存加载的占据栅格图像，并按阈值生成 free / occupied / unknown 分类栅格。
"""

from enum import IntEnum
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np
from loguru import logger

from reactive_planner.common.exceptions import ConfigurationError
from reactive_planner.core.coordinate_utils import FrameManager


class CellClass(IntEnum):
    """栅格分类"""
    FREE = 0
    OCCUPIED = 1
    UNKNOWN = 2


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def classify_occupancy(image: np.ndarray, occ_threshold: float, free_threshold: float) -> np.ndarray:
    """
    灰度占据图转分类栅格（ROS map_server 约定：越暗越可能被占据）

    Args:
        image: uint8 灰度图
        occ_threshold: 占据阈值（0-1）
        free_threshold: 空闲阈值（0-1）

    Returns:
        uint8 分类栅格，取值见 CellClass
    """
    occ_px = (1.0 - _clamp01(occ_threshold)) * 255
    free_px = (1.0 - _clamp01(free_threshold)) * 255

    grid = np.full(image.shape, CellClass.UNKNOWN, dtype=np.uint8)
    grid[image > free_px] = CellClass.FREE
    grid[image < occ_px] = CellClass.OCCUPIED
    return grid


class StaticMapState:
    """静态地图状态：图像、地图参数、坐标系和分类栅格"""

    def __init__(self, frames: Optional[FrameManager] = None) -> None:
        self.frames = frames if frames is not None else FrameManager()

        self.image_: Optional[np.ndarray] = None
        self.resolution_: float = 0.0
        self.origin_ = np.zeros(3)
        self.occ_threshold_: float = 0.65
        self.free_threshold_: float = 0.196
        self.classification_: Optional[np.ndarray] = None

    @property
    def loaded(self) -> bool:
        return self.image_ is not None

    @property
    def classification(self) -> Optional[np.ndarray]:
        return self.classification_

    @property
    def resolution(self) -> float:
        return self.resolution_

    @property
    def shape(self) -> Tuple[int, int]:
        if self.image_ is None:
            return (0, 0)
        return self.image_.shape[:2]

    def load_map(
        self,
        image: np.ndarray,
        resolution: float,
        origin: Sequence[float],
        occ_threshold: float,
        free_threshold: float,
    ) -> None:
        """
        加载地图

        参数全部校验通过后才修改状态，校验失败时保留上一张地图。

        Raises:
            ConfigurationError: 图像或地图参数无效
        """
        gray = self._validate_image(image)

        try:
            resolution = float(resolution)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"地图分辨率无效: {resolution}") from e
        if not np.isfinite(resolution) or resolution <= 0:
            raise ConfigurationError(f"地图分辨率必须为正数: {resolution}")

        origin_arr = np.asarray(origin, dtype=np.float64).reshape(-1)
        if origin_arr.size != 3 or not np.all(np.isfinite(origin_arr)):
            raise ConfigurationError(f"地图原点必须为 (x, y, theta): {origin}")

        self.image_ = gray
        self.resolution_ = resolution
        self.origin_ = origin_arr.copy()
        rows, cols = gray.shape
        self.frames.configure(resolution, self.origin_, rows, cols)

        logger.info(
            f"地图已加载: size=({rows}x{cols}), resolution={resolution}, "
            f"origin={self.origin_.tolist()}, occ={occ_threshold}, free={free_threshold}"
        )
        self.reclassify(occ_threshold, free_threshold)

    def reclassify(self, occ_threshold: Optional[float] = None, free_threshold: Optional[float] = None) -> np.ndarray:
        """不重新加载图像，按阈值重建分类栅格"""
        if self.image_ is None:
            raise ConfigurationError("尚未加载地图，无法重建分类栅格")

        if occ_threshold is not None:
            self.occ_threshold_ = _clamp01(occ_threshold)
        if free_threshold is not None:
            self.free_threshold_ = _clamp01(free_threshold)

        self.classification_ = classify_occupancy(self.image_, self.occ_threshold_, self.free_threshold_)
        logger.debug(
            f"分类栅格重建完成: occupied={int((self.classification_ == CellClass.OCCUPIED).sum())}, "
            f"unknown={int((self.classification_ == CellClass.UNKNOWN).sum())}"
        )
        return self.classification_

    @staticmethod
    def _validate_image(image: np.ndarray) -> np.ndarray:
        if image is None:
            raise ConfigurationError("地图图像为空")
        img = np.asarray(image)
        if img.ndim == 3 and img.shape[2] in (3, 4):
            code = cv2.COLOR_BGR2GRAY if img.shape[2] == 3 else cv2.COLOR_BGRA2GRAY
            img = cv2.cvtColor(img.astype(np.uint8), code)
        if img.ndim != 2 or img.size == 0:
            raise ConfigurationError(f"地图图像必须为非空灰度图: shape={img.shape}")
        return img.astype(np.uint8, copy=True)
