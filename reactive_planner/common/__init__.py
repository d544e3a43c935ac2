#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""公共定义：异常类型"""

from .exceptions import (
    PlannerError,
    ConfigurationError,
    OutOfBoundsError,
    InitializationError,
    PathPlanningError,
)

__all__ = [
    'PlannerError',
    'ConfigurationError',
    'OutOfBoundsError',
    'InitializationError',
    'PathPlanningError',
]
