#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
反应式二维规划器

提供基线距离场缓存、动态障碍叠加、路径搜索与路点跟随。
"""

from .nav_runtime.planner import Planner, PlannerState, StepResult, Diagnostics

__all__ = ['Planner', 'PlannerState', 'StepResult', 'Diagnostics']
