#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
路径规划模块

距离变换、基线缓存、Dijkstra 路径搜索与父指针回溯。
"""

from .distance_transform import DistanceTransformEngine
from .distance_cache import DistanceFieldCache
from .path_search import DijkstraPathSearch, PathMap, NO_PARENT, extract_path

__all__ = [
    'DistanceTransformEngine',
    'DistanceFieldCache',
    'DijkstraPathSearch',
    'PathMap',
    'NO_PARENT',
    'extract_path',
]
