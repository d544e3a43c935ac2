from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from loguru import logger

from reactive_planner.controller.heading_controller import HeadingController
from reactive_planner.core.interfaces import IMotionController


@dataclass(frozen=True)
class VelocityCommand:
    """速度指令：线速度（米/秒）和角速度（弧度/秒）"""

    linear: float = 0.0
    angular: float = 0.0

    @classmethod
    def zero(cls) -> "VelocityCommand":
        return cls(0.0, 0.0)

    @property
    def is_zero(self) -> bool:
        return self.linear == 0.0 and self.angular == 0.0


class MotionController(IMotionController):
    """运动决策层：根据当前位姿和目标点算出这一周期的速度指令。

    角速度由朝向 PID 给出；线速度与距离成比例，朝向误差越大衰减越多，
    误差超过 angle_slow_turn 时原地转向。
    """

    def __init__(
        self,
        goal_tolerance: float = 0.1,
        max_linear_velocity: float = 0.5,
        max_angular_velocity: float = 1.0,
        linear_gain: float = 1.0,
        heading_kp: float = 1.5,
        heading_ki: float = 0.0,
        heading_kd: float = 0.0,
        integral_limit: Optional[float] = None,
        angle_slow_turn_deg: float = 60.0,
        control_dt: float = 0.1,
    ) -> None:
        """初始化控制参数。

        Args:
            goal_tolerance: 距离目标点小于该值时认为到达（米）
            max_linear_velocity: 线速度上限
            max_angular_velocity: 角速度上限
            linear_gain: 线速度比例增益
            heading_kp / heading_ki / heading_kd: 朝向 PID 系数
            integral_limit: 积分限幅
            angle_slow_turn_deg: 超过该朝向误差时线速度为 0
            control_dt: 控制周期（秒），用于 PID 积分/微分
        """
        self.goal_tolerance = max(0.0, goal_tolerance)
        self.max_linear_velocity = max(0.0, max_linear_velocity)
        self.linear_gain = max(0.0, linear_gain)
        self.angle_slow_turn = math.radians(max(1e-3, angle_slow_turn_deg))
        self.control_dt = control_dt

        self._heading = HeadingController(
            kp=heading_kp,
            ki=heading_ki,
            kd=heading_kd,
            max_output=max_angular_velocity,
            integral_limit=integral_limit,
        )
        self._last_command = VelocityCommand.zero()

    @classmethod
    def from_config(cls, control_cfg) -> "MotionController":
        return cls(
            goal_tolerance=control_cfg.goal_tolerance,
            max_linear_velocity=control_cfg.max_linear_velocity,
            max_angular_velocity=control_cfg.max_angular_velocity,
            linear_gain=control_cfg.linear_gain,
            heading_kp=control_cfg.heading_kp,
            heading_ki=control_cfg.heading_ki,
            heading_kd=control_cfg.heading_kd,
            integral_limit=control_cfg.integral_limit,
            angle_slow_turn_deg=control_cfg.angle_slow_turn_deg,
            control_dt=control_cfg.control_dt,
        )

    @property
    def last_command(self) -> VelocityCommand:
        return self._last_command

    def compute_velocities(
        self,
        current_pose: Sequence[float],
        target_point: Sequence[float],
    ) -> Tuple[VelocityCommand, bool]:
        x, y, theta = float(current_pose[0]), float(current_pose[1]), float(current_pose[2])
        dx = float(target_point[0]) - x
        dy = float(target_point[1]) - y
        distance = math.hypot(dx, dy)

        if distance <= self.goal_tolerance:
            self.reset_velocities()
            return VelocityCommand.zero(), True

        result = self._heading.Update(theta, math.atan2(dy, dx), self.control_dt)

        angle_ratio = min(1.0, abs(result.error) / self.angle_slow_turn)
        linear = min(self.max_linear_velocity, self.linear_gain * distance) * (1.0 - angle_ratio)

        command = VelocityCommand(linear=linear, angular=result.command)
        self._last_command = command
        logger.trace(
            f"速度指令: dist={distance:.3f}, err={math.degrees(result.error):.1f}°, "
            f"v={command.linear:.3f}, w={command.angular:.3f}"
        )
        return command, False

    def reset_velocities(self) -> None:
        self._heading.Reset()
        self._last_command = VelocityCommand.zero()
