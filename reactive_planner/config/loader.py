#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
配置加载器

从YAML文件加载配置并使用Pydantic验证。
"""

import yaml
from pathlib import Path
from typing import Union
from loguru import logger
from pydantic import ValidationError

from reactive_planner.common.exceptions import ConfigurationError
from reactive_planner.config.models import PlannerConfig


def load_config(config_path: Union[str, Path]) -> PlannerConfig:
    """
    从YAML文件加载配置

    Args:
        config_path: 配置文件路径

    Returns:
        验证后的PlannerConfig对象

    Raises:
        FileNotFoundError: 配置文件不存在
        ConfigurationError: YAML格式错误或配置验证失败
    """
    config_path = Path(config_path)

    if not config_path.exists():
        error_msg = f"配置文件不存在: {config_path}"
        logger.error(error_msg)
        raise FileNotFoundError(error_msg)

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        error_msg = f"YAML格式错误: {e}"
        logger.error(error_msg)
        raise ConfigurationError(error_msg) from e

    # 空文件视为全部使用默认值
    if raw_config is None:
        logger.warning(f"配置文件为空，使用默认配置: {config_path}")
        return PlannerConfig()

    if not isinstance(raw_config, dict):
        error_msg = f"配置文件顶层必须是字典: {config_path}"
        logger.error(error_msg)
        raise ConfigurationError(error_msg)

    try:
        config = PlannerConfig(**raw_config)
        logger.info(f"配置加载成功: {config_path}")
        return config
    except ValidationError as e:
        error_msg = f"配置验证失败:\n{e}"
        logger.error(error_msg)
        for error in e.errors():
            field_path = " -> ".join(str(loc) for loc in error['loc'])
            logger.error(f"  {field_path}: {error['msg']}")
        raise ConfigurationError(error_msg) from e
