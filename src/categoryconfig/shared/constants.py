"""
全局常量定义

存储配置文件位置、默认分类等项目级别的常量，供所有模块使用
"""

from __future__ import annotations

import os
from pathlib import Path


def get_path_from_env(env_var: str, default: Path) -> Path:
    """
    从环境变量获取路径，如果未设置则使用默认值

    Args:
        env_var: 环境变量名称
        default: 默认路径

    Returns:
        Path: 配置的路径
    """
    env_value = os.getenv(env_var)
    if env_value and env_value.strip():
        return Path(env_value.strip())
    return default


# 配置目录：未显式指定路径时，配置文件存放在这里；相对路径也基于此目录解析
CONFIG_DIR_ENV = "CATEGORYCONFIG_CONFIG_DIR"
DEFAULT_CONFIG_DIR = get_path_from_env(CONFIG_DIR_ENV, Path("..") / "json")

DEFAULT_CONFIG_FILENAME = "config.json"
DEFAULT_CATEGORY = "default"

# 写盘格式：缩进美化，保留非 ASCII 字符
JSON_INDENT = 2
CONFIG_FILE_ENCODING = "utf-8"
