#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
路径搜索模块：在代价图上从目标出发做 Dijkstra，生成父指针树（PathMap），
再从机器人所在栅格沿父指针回溯得到路径。
"""

# 标准库导入
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import heapq
import math

# 第三方库导入
import numpy as np
from loguru import logger

from reactive_planner.common.exceptions import PathPlanningError
from reactive_planner.core.interfaces import IPathSearchEngine

Cell = Tuple[int, int]  # (row, col)

NO_PARENT = -1

# 8 邻接：(dr, dc, 步长)
_NEIGHBORS = [
    (-1,  0, 1.0),
    ( 1,  0, 1.0),
    ( 0, -1, 1.0),
    ( 0,  1, 1.0),
    (-1, -1, math.sqrt(2.0)),
    (-1,  1, math.sqrt(2.0)),
    ( 1, -1, math.sqrt(2.0)),
    ( 1,  1, math.sqrt(2.0)),
]


@dataclass
class PathMap:
    """
    父指针树（以数组存储的栅格池）

    parents[i] 为栅格 i（行优先展开索引）的父栅格索引；
    根节点（目标）指向自身，未到达的栅格为 NO_PARENT。
    """
    parents: np.ndarray   # int64, rows*cols
    costs: np.ndarray     # float32, (rows, cols)，未到达为 inf

    @classmethod
    def empty(cls, shape: Tuple[int, int]) -> "PathMap":
        rows, cols = shape
        return cls(
            parents=np.full(rows * cols, NO_PARENT, dtype=np.int64),
            costs=np.full((rows, cols), np.inf, dtype=np.float32),
        )

    @property
    def shape(self) -> Tuple[int, int]:
        return self.costs.shape

    @property
    def size(self) -> int:
        return int(self.parents.size)

    def index(self, cell: Cell) -> int:
        return int(cell[0]) * self.shape[1] + int(cell[1])

    def cell(self, index: int) -> Cell:
        r, c = divmod(int(index), self.shape[1])
        return (r, c)

    def contains(self, cell: Cell) -> bool:
        rows, cols = self.shape
        return 0 <= cell[0] < rows and 0 <= cell[1] < cols

    def parent_of(self, cell: Cell) -> Optional[Cell]:
        parent = int(self.parents[self.index(cell)])
        if parent == NO_PARENT:
            return None
        return self.cell(parent)


class DijkstraPathSearch(IPathSearchEngine):
    """
    代价图上的多目标 Dijkstra

    移动代价 = 步长 * cost_field[邻居]，代价大于 max_cost 的栅格不可通行。
    """

    def __init__(self) -> None:
        self.max_cost_: float = np.inf
        self.cost_field_: Optional[np.ndarray] = None
        self.goals_: List[Cell] = []

    def set_max_cost(self, max_cost: float) -> None:
        self.max_cost_ = float(max_cost)

    def set_cost_field(self, cost_field: np.ndarray) -> None:
        self.cost_field_ = np.asarray(cost_field, dtype=np.float32)

    def set_goals(self, goals: Sequence[Cell]) -> None:
        self.goals_ = [(int(g[0]), int(g[1])) for g in goals]

    def compute(self) -> PathMap:
        if self.cost_field_ is None:
            raise PathPlanningError("未设置代价图")

        cost_field = self.cost_field_
        rows, cols = cost_field.shape
        path_map = PathMap.empty((rows, cols))
        parents = path_map.parents
        costs = path_map.costs

        blocked = ~(cost_field <= self.max_cost_)

        open_heap = []
        for goal in self.goals_:
            if not path_map.contains(goal):
                logger.warning(f"目标超出栅格范围，已忽略: goal={goal}, grid_size=({rows}, {cols})")
                continue
            idx = path_map.index(goal)
            parents[idx] = idx
            costs[goal] = 0.0
            heapq.heappush(open_heap, (0.0, goal[0], goal[1]))

        if not open_heap:
            logger.warning("没有有效目标，路径图为空")
            return path_map

        visited = np.zeros((rows, cols), dtype=bool)
        nodes_explored = 0

        while open_heap:
            g, r, c = heapq.heappop(open_heap)
            if visited[r, c]:
                continue
            visited[r, c] = True
            nodes_explored += 1
            current_idx = r * cols + c

            for dr, dc, step in _NEIGHBORS:
                nr, nc = r + dr, c + dc
                if nr < 0 or nr >= rows or nc < 0 or nc >= cols:
                    continue
                if blocked[nr, nc] or visited[nr, nc]:
                    continue

                tentative = g + step * float(cost_field[nr, nc])
                if tentative < costs[nr, nc]:
                    costs[nr, nc] = tentative
                    parents[nr * cols + nc] = current_idx
                    heapq.heappush(open_heap, (tentative, nr, nc))

        logger.debug(f"Dijkstra 完成: 目标数={len(self.goals_)}, 探索节点数={nodes_explored}")
        return path_map


def extract_path(path_map: PathMap, start: Cell) -> List[Cell]:
    """
    从 start 沿父指针回溯到根

    到达根节点（父节点为自身）时把根节点加入路径后停止，遇到无父节点时停止；
    回溯步数不超过栅格总数，父指针出现环时返回空路径。

    Args:
        path_map: 父指针树
        start: 起点栅格（机器人所在栅格）

    Returns:
        路径 [(row, col), ...]，包含根节点（目标栅格）；不可达时为空
    """
    if not path_map.contains(start):
        logger.warning(f"回溯起点超出栅格范围: start={start}, grid_size={path_map.shape}")
        return []

    parents = path_map.parents
    limit = path_map.size
    current = path_map.index(start)
    path: List[Cell] = []

    for _ in range(limit):
        parent = int(parents[current])
        if parent == current:
            path.append(path_map.cell(current))
            return path
        if parent == NO_PARENT:
            return path
        if parent < 0 or parent >= limit:
            logger.warning(f"父指针索引无效: {parent}，终止回溯")
            return path
        path.append(path_map.cell(current))
        current = parent

    logger.warning(f"父指针回溯超过栅格总数 {limit}，路径图存在环，丢弃路径")
    return []
