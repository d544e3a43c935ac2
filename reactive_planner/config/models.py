#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
规划器配置模型

使用Pydantic定义类型安全的配置模型，所有字段均带有默认值，可只在YAML中覆盖需要修改的项。
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from reactive_planner.ui.display import DisplayMode


class CostConfig(BaseModel):
    """代价图配置"""
    max_cost: float = Field(100.0, description="最大代价（机器人半径内）")
    min_cost: float = Field(20.0, description="最小代价（安全区域外）")
    robot_radius: float = Field(0.3, description="机器人物理半径（米）")
    safety_region: float = Field(1.0, description="安全区域半径（米），超出后代价为最小值")
    treat_unknown_as_obstacle: bool = Field(True, description="未知区域是否视为障碍")

    @field_validator('max_cost', 'min_cost', 'robot_radius', 'safety_region')
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """验证正数"""
        if v <= 0:
            raise ValueError(f"值必须大于0: {v}")
        return v

    @model_validator(mode='after')
    def validate_ranges(self) -> 'CostConfig':
        """验证代价与半径的相对关系"""
        if self.max_cost <= self.min_cost:
            raise ValueError(f"max_cost 必须大于 min_cost: {self.max_cost} <= {self.min_cost}")
        if self.safety_region <= self.robot_radius:
            raise ValueError(
                f"safety_region 必须大于 robot_radius: {self.safety_region} <= {self.robot_radius}"
            )
        return self


class ControlConfig(BaseModel):
    """控制配置"""
    lookahead_distance: float = Field(1.0, description="前瞻距离（米）")
    goal_tolerance: float = Field(0.1, description="终点到达阈值（米）")
    max_linear_velocity: float = Field(0.5, description="最大线速度（米/秒）")
    max_angular_velocity: float = Field(1.0, description="最大角速度（弧度/秒）")
    linear_gain: float = Field(1.0, description="线速度比例增益")
    heading_kp: float = Field(1.5, description="朝向 PID 比例系数")
    heading_ki: float = Field(0.0, description="朝向 PID 积分系数")
    heading_kd: float = Field(0.0, description="朝向 PID 微分系数")
    integral_limit: Optional[float] = Field(None, description="积分限幅（None 表示不限幅）")
    angle_slow_turn_deg: float = Field(60.0, description="朝向误差超过该角度时停止前进，原地转向")
    control_dt: float = Field(0.1, description="控制周期（秒）")

    @field_validator(
        'lookahead_distance', 'goal_tolerance', 'max_linear_velocity',
        'max_angular_velocity', 'angle_slow_turn_deg', 'control_dt',
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """验证正数"""
        if v <= 0:
            raise ValueError(f"值必须大于0: {v}")
        return v

    @field_validator('linear_gain', 'heading_kp', 'heading_ki', 'heading_kd')
    @classmethod
    def validate_gain(cls, v: float) -> float:
        """验证增益非负"""
        if v < 0:
            raise ValueError(f"增益不能为负数: {v}")
        return v


class SensorConfig(BaseModel):
    """激光数据配置"""
    stop_on_missing_scan: bool = Field(
        False,
        description="没有激光数据时是否停车（False 则仅依赖静态地图继续导航）"
    )


class DisplayConfig(BaseModel):
    """显示配置"""
    enable: bool = Field(False, description="是否启用显示（无目标时仍刷新距离/代价图）")
    mode: DisplayMode = Field(DisplayMode.MAP, description="显示内容: map / distance / cost")


class PlannerConfig(BaseModel):
    """规划器主配置"""
    cost: CostConfig = Field(default_factory=CostConfig, description="代价图配置")
    control: ControlConfig = Field(default_factory=ControlConfig, description="控制配置")
    sensor: SensorConfig = Field(default_factory=SensorConfig, description="激光数据配置")
    display: DisplayConfig = Field(default_factory=DisplayConfig, description="显示配置")
