#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
规划器配置模块

提供类型安全的配置管理和验证。
"""

from .models import (
    PlannerConfig,
    CostConfig,
    ControlConfig,
    SensorConfig,
    DisplayConfig,
)
from .loader import load_config

__all__ = [
    'PlannerConfig',
    'CostConfig',
    'ControlConfig',
    'SensorConfig',
    'DisplayConfig',
    'load_config'
]
