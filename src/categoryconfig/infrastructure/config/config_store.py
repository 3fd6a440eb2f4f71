"""
分类配置存储

每个 ConfigStore 实例绑定一个（配置文件, 分类）组合：
- 构造时把该分类加载到内存（文件或分类不存在时为空）
- read / write 只操作内存中的分类
- save 把内存分类合并回完整文档，其他分类保持不变

配置文件结构示例：
```json
{
  "default": {"timeout": 30},
  "network": {"retries": 3}
}
```
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from categoryconfig.infrastructure.config.coercion import (
    RawJson,
    coerce_value,
    from_json_value,
)
from categoryconfig.infrastructure.config.document import ConfigDocument, document_lock
from categoryconfig.infrastructure.config.errors import (
    ConfigDocumentError,
    ConfigKeyNotFoundError,
    ConfigStoreError,
)
from categoryconfig.shared import constants

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def resolve_config_path(config_path: Optional[PathLike] = None) -> Path:
    """
    解析配置文件路径

    Args:
        config_path: 配置文件路径；为空时使用默认配置文件，
            相对路径基于默认配置目录解析，绝对路径原样使用

    Returns:
        Path: 配置文件路径
    """
    if config_path is None or not str(config_path).strip():
        return constants.DEFAULT_CONFIG_DIR / constants.DEFAULT_CONFIG_FILENAME

    path = Path(config_path)
    if path.is_absolute():
        return path
    return constants.DEFAULT_CONFIG_DIR / path


class ConfigStore:
    """
    单个分类的配置读写

    读取失败（键不存在 / 类型无法转换）在 read 中统一表现为“未找到”，
    需要区分原因时使用 read_strict。
    """

    def __init__(
        self,
        config_path: Optional[PathLike] = None,
        category: str = constants.DEFAULT_CATEGORY,
    ):
        """
        初始化配置存储

        Args:
            config_path: 配置文件路径，默认为配置目录下的 config.json
            category: 分类名称，默认为 "default"
        """
        self._config_path = resolve_config_path(config_path)
        self._category = category or constants.DEFAULT_CATEGORY
        self._document = ConfigDocument(self._config_path)
        self._values: Dict[str, Any] = {}

        try:
            self._config_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"创建配置目录失败: {self._config_path.parent}（{e}）")
            return

        self.load()

    def __repr__(self) -> str:
        return f"ConfigStore(config_path={str(self._config_path)!r}, category={self._category!r})"

    def __contains__(self, key: object) -> bool:
        return key in self._values

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def category(self) -> str:
        return self._category

    # ==================== 内存读写 ====================

    def read_strict(self, key: str, expected_type: Any = object) -> Any:
        """
        读取配置值（严格模式）

        Args:
            key: 配置键名
            expected_type: 期望类型，如 int、list[str]、某个 dataclass；
                object 表示不做转换

        Returns:
            转换后的配置值

        Raises:
            ConfigKeyNotFoundError: 键不存在
            ConfigValueConversionError: 值无法转换为期望类型
        """
        if key not in self._values:
            raise ConfigKeyNotFoundError(f"配置 {self._category}.{key} 不存在")
        return coerce_value(self._values[key], expected_type)

    def read(self, key: str, expected_type: Any = object) -> Tuple[Any, bool]:
        """
        读取配置值（宽松模式：键不存在与无法转换都返回未找到）

        Returns:
            (value, found)；未找到时 value 为 None
        """
        try:
            return self.read_strict(key, expected_type), True
        except ConfigKeyNotFoundError:
            return None, False
        except ConfigStoreError as e:
            logger.debug(f"配置 {self._category}.{key} 类型转换失败: {e}")
            return None, False

    def write(self, key: str, value: Any) -> bool:
        """
        设置配置值（只修改内存，需调用 save 落盘）

        Returns:
            总是 True
        """
        self._values[key] = value
        return True

    def read_or_default(self, key: str, default: Any, expected_type: Any = None) -> Any:
        """
        读取配置值，未找到时写入默认值并立即保存到文件

        Args:
            key: 配置键名
            default: 默认值
            expected_type: 期望类型，默认取 default 的类型（default 为 None 时不做转换）

        Returns:
            已保存的配置值或默认值
        """
        if expected_type is None:
            expected_type = object if default is None else type(default)

        value, found = self.read(key, expected_type)
        if found:
            return value

        self.write(key, default)
        if not self.save():
            logger.warning(f"默认值 {self._category}.{key} 未能写入配置文件")
        return default

    def delete(self, key: str) -> bool:
        """
        删除配置值（只修改内存）

        Returns:
            键存在并已删除返回 True
        """
        if key not in self._values:
            return False
        del self._values[key]
        return True

    def contains(self, key: str) -> bool:
        return key in self._values

    def keys(self) -> List[str]:
        return list(self._values)

    def snapshot(self) -> Dict[str, Any]:
        """
        返回当前分类的普通数据副本（RawJson 已拆包）
        """
        return {key: coerce_value(value) for key, value in self._values.items()}

    # ==================== 文件读写 ====================

    def config_exists(self) -> bool:
        """
        检查配置文件是否存在
        """
        return self._document.exists()

    def save(self) -> bool:
        """
        将当前分类合并写入配置文件

        Returns:
            是否保存成功
        """
        try:
            self._document.write_category(self._category, self._values)
        except Exception as e:
            logger.error(f"保存配置失败: {self._config_path}（{e}）")
            return False

        logger.info(f"配置分类 {self._category} 已保存到 {self._config_path}")
        return True

    def load(self) -> bool:
        """
        从配置文件重新加载当前分类（失败时内存中的分类保持不变）

        Returns:
            是否加载成功
        """
        with document_lock():
            try:
                if not self._document.exists():
                    logger.debug(f"配置文件不存在: {self._config_path}")
                    return False
                body = self._document.read_category(self._category)
            except ConfigDocumentError as e:
                logger.error(f"加载配置失败: {e}")
                return False
            except Exception as e:
                logger.error(f"加载配置失败: {self._config_path}（{e}）")
                return False

            if body is None:
                return False

            loaded = {key: from_json_value(value) for key, value in body.items()}
            self._values.clear()
            self._values.update(loaded)
            return True


@lru_cache(maxsize=None)
def _get_cached_store(config_path: Path, category: str) -> ConfigStore:
    return ConfigStore(config_path, category)


def get_config_store(
    config_path: Optional[PathLike] = None,
    category: str = constants.DEFAULT_CATEGORY,
) -> ConfigStore:
    """
    获取（配置文件, 分类）对应的共享 ConfigStore 实例

    Note:
        - 测试中切换配置目录后，可调用 `get_config_store.cache_clear()` 重置缓存
    """
    resolved = resolve_config_path(config_path).resolve()
    return _get_cached_store(resolved, category or constants.DEFAULT_CATEGORY)


get_config_store.cache_clear = _get_cached_store.cache_clear  # type: ignore[attr-defined]


__all__ = [
    "ConfigStore",
    "RawJson",
    "get_config_store",
    "resolve_config_path",
]
