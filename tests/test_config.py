#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""配置加载测试"""

import pytest

from reactive_planner.common.exceptions import ConfigurationError
from reactive_planner.config import PlannerConfig, load_config
from reactive_planner.ui.display import DisplayMode


def test_defaults():
    cfg = PlannerConfig()
    assert cfg.cost.max_cost == 100.0
    assert cfg.cost.min_cost == 20.0
    assert cfg.cost.robot_radius == pytest.approx(0.3)
    assert cfg.cost.safety_region == pytest.approx(1.0)
    assert cfg.control.lookahead_distance == pytest.approx(1.0)
    assert cfg.control.goal_tolerance == pytest.approx(0.1)
    assert not cfg.sensor.stop_on_missing_scan
    assert cfg.display.mode == DisplayMode.MAP


def test_load_yaml(tmp_path):
    path = tmp_path / "planner.yaml"
    path.write_text(
        "cost:\n"
        "  robot_radius: 0.25\n"
        "  safety_region: 0.8\n"
        "control:\n"
        "  lookahead_distance: 0.5\n"
        "display:\n"
        "  enable: true\n"
        "  mode: distance\n",
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.cost.robot_radius == pytest.approx(0.25)
    assert cfg.cost.safety_region == pytest.approx(0.8)
    assert cfg.cost.max_cost == 100.0
    assert cfg.control.lookahead_distance == pytest.approx(0.5)
    assert cfg.display.enable
    assert cfg.display.mode == DisplayMode.DISTANCE


def test_inverted_radii_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("cost:\n  robot_radius: 1.0\n  safety_region: 0.5\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_inverted_costs_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("cost:\n  max_cost: 10\n  min_cost: 20\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_malformed_yaml_rejected(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("cost: [1, 2\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_non_mapping_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == PlannerConfig()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")
