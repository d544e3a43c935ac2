#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
规划器演示程序

在合成地图上运行规划循环：机器人按速度指令做单轮车积分，
中途在路径上放置一个激光障碍，结束后输出 ASCII 地图。

用法:
    python -m reactive_planner --config config/planner.yaml --cycles 400
"""

import argparse
import math
from pathlib import Path

import numpy as np
from loguru import logger

from reactive_planner.config import PlannerConfig, load_config
from reactive_planner.nav_runtime.planner import Planner
from reactive_planner.utils.logger import SetupLogger


def build_demo_map(rows: int = 120, cols: int = 160) -> np.ndarray:
    """白色可通行，四周与中间一道带门的墙为黑色"""
    image = np.full((rows, cols), 254, dtype=np.uint8)
    image[0, :] = image[-1, :] = 0
    image[:, 0] = image[:, -1] = 0
    image[: rows // 2 + 10, cols // 2] = 0
    return image


def laser_from_world(obstacle_xy: np.ndarray, robot_pose: np.ndarray) -> np.ndarray:
    """世界坐标系下的障碍点 → 机器人局部坐标系"""
    c, s = math.cos(robot_pose[2]), math.sin(robot_pose[2])
    d = obstacle_xy - robot_pose[:2]
    return np.stack([c * d[:, 0] + s * d[:, 1], -s * d[:, 0] + c * d[:, 1]], axis=1)


def render_ascii(planner: Planner) -> str:
    grid = planner.map_state.classification
    vis = np.where(grid == 0, '.', '#').astype('<U1')
    for r, c in planner.path:
        vis[r, c] = '*'
    return "\n".join("".join(row[::2]) for row in vis[::2])


def main() -> int:
    parser = argparse.ArgumentParser(description="reactive_planner demo")
    parser.add_argument("--config", type=Path, default=None, help="YAML 配置文件")
    parser.add_argument("--cycles", type=int, default=400, help="最大规划周期数")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    SetupLogger(log_dir=None, level=args.log_level)
    cfg = load_config(args.config) if args.config else PlannerConfig()

    resolution = 0.05
    planner = Planner(cfg)
    planner.loadMap(build_demo_map(), resolution, (0.0, 0.0, 0.0), 0.65, 0.196)

    pose = np.array([1.0, 1.0, 0.0])
    planner.setRobotPose(pose)
    planner.setGoal((6.5, 1.0, 0.0))

    obstacle = np.array([[2.5, 1.0]])
    dt = cfg.control.control_dt

    for cycle in range(args.cycles):
        planner.setSensorPoints(laser_from_world(obstacle, pose))
        result = planner.step()
        if result.goal_reached:
            logger.info(f"第 {cycle} 周期到达目标: pose={pose.round(3).tolist()}")
            break

        v, w = result.velocity.linear, result.velocity.angular
        pose = pose + np.array([v * math.cos(pose[2]) * dt, v * math.sin(pose[2]) * dt, w * dt])
        planner.setRobotPose(pose)
    else:
        logger.warning(f"{args.cycles} 个周期内未到达目标")

    print(render_ascii(planner))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
