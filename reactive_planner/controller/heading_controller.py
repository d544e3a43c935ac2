#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""方向控制器：基于 PID 的朝向误差 → 角速度"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from reactive_planner.core.coordinate_utils import normalize_angle


@dataclass
class HeadingControlResult:
    """方向控制输出"""

    error: float
    command: float


class HeadingController:
    """基于 PID 的方向控制器，输出限幅到 ±max_output"""

    def __init__(
        self,
        kp: float,
        ki: float,
        kd: float,
        max_output: float,
        integral_limit: Optional[float] = None,
    ) -> None:
        if kp < 0 or ki < 0 or kd < 0:
            raise ValueError("PID 系数必须为非负数")
        if max_output <= 0:
            raise ValueError("max_output 必须为正数")

        self.kp_ = kp
        self.ki_ = ki
        self.kd_ = kd
        self.max_output_ = max_output
        self.integral_limit_ = integral_limit
        self.integral_term_: float = 0.0
        self.prev_error_: Optional[float] = None

    def Reset(self) -> None:
        """清空积分项和上一次误差"""

        self.integral_term_ = 0.0
        self.prev_error_ = None

    def Update(self, heading_now: float, heading_target: float, dt: float) -> HeadingControlResult:
        if dt <= 0:
            dt = 1e-3

        error = normalize_angle(heading_target - heading_now)

        if self.ki_ > 0:
            self.integral_term_ += error * dt
            if self.integral_limit_ is not None:
                self.integral_term_ = max(-self.integral_limit_, min(self.integral_limit_, self.integral_term_))

        derivative = 0.0
        if self.prev_error_ is not None:
            derivative = normalize_angle(error - self.prev_error_) / dt
        self.prev_error_ = error

        command = self.kp_ * error + self.ki_ * self.integral_term_ + self.kd_ * derivative
        command = max(-self.max_output_, min(self.max_output_, command))

        return HeadingControlResult(error=error, command=command)
