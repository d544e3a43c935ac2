#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
自定义异常类：定义规划器模块的专用异常
"""


class PlannerError(Exception):
    """规划器基础异常类"""
    pass


class ConfigurationError(PlannerError):
    """配置错误异常（地图参数、配置文件）"""
    pass


class OutOfBoundsError(PlannerError):
    """坐标超出栅格范围异常"""

    def __init__(self, cell, shape):
        self.cell = tuple(int(v) for v in cell)
        self.shape = tuple(int(v) for v in shape)
        super().__init__(f"栅格坐标越界: cell={self.cell}, grid_size={self.shape}")


class InitializationError(PlannerError):
    """初始化失败异常"""
    pass


class PathPlanningError(PlannerError):
    """路径规划失败异常"""
    pass
