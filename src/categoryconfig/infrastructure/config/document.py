"""
配置文档访问层

一个 JSON 文件保存多个分类（category），结构示例：
```json
{
  "default": {"timeout": 30, "name": "demo"},
  "network": {"retries": 3, "hosts": ["a", "b"]}
}
```

所有对文件的读写都经过同一把进程级锁（不区分文件与分类），
保证“读取-合并-写回”不会与其他实例的读写交错。
不提供跨进程锁。
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from categoryconfig.infrastructure.config.coercion import to_json_text
from categoryconfig.infrastructure.config.errors import ConfigDocumentError
from categoryconfig.shared.constants import CONFIG_FILE_ENCODING, JSON_INDENT

logger = logging.getLogger(__name__)

_DOCUMENT_LOCK = threading.RLock()


def document_lock() -> threading.RLock:
    """
    返回全局文档锁（可重入），便于调用方组合多个文档操作。
    """
    return _DOCUMENT_LOCK


def _find_category(data: Mapping[str, Any], category: str) -> Optional[str]:
    if category in data:
        return category
    folded = category.casefold()
    for name in data:
        if isinstance(name, str) and name.casefold() == folded:
            return name
    return None


class ConfigDocument:
    """
    整个配置文件的读写（按分类合并）
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load_all(self) -> Dict[str, Any]:
        """
        严格模式加载完整文档。

        Raises:
            ConfigDocumentError: 文件不存在、读取失败、JSON 格式错误或根节点不是对象
        """
        with _DOCUMENT_LOCK:
            try:
                raw_text = self.path.read_text(encoding=CONFIG_FILE_ENCODING)
            except FileNotFoundError as e:
                raise ConfigDocumentError(f"配置文件不存在：{self.path}") from e
            except (OSError, UnicodeDecodeError) as e:
                raise ConfigDocumentError(f"读取配置文件失败：{self.path}（{e}）") from e

            try:
                data = json.loads(raw_text)
            except (ValueError, RecursionError) as e:
                # JSONDecodeError 之外，超长整数与过深嵌套也会导致解析失败
                raise ConfigDocumentError(f"配置文件 JSON 格式错误：{e}") from e

            if not isinstance(data, dict):
                raise ConfigDocumentError("配置文件根节点必须是 JSON 对象")

            return data

    def _load_for_merge(self) -> Dict[str, Any]:
        # 写入路径：文件缺失或损坏时从空文档开始，损坏内容会被覆盖
        try:
            if not self.path.exists():
                return {}
            return self.load_all()
        except ConfigDocumentError as e:
            logger.warning(f"忽略无法解析的配置文件，将从空文档重建：{e}")
            return {}

    def read_category(self, category: str) -> Optional[Dict[str, Any]]:
        """
        读取某个分类（分类名先精确匹配，再忽略大小写匹配）。

        Returns:
            分类字典；分类不存在或不是 JSON 对象时返回 None

        Raises:
            ConfigDocumentError: 文档本身无法加载
        """
        with _DOCUMENT_LOCK:
            data = self.load_all()
            name = _find_category(data, category)
            if name is None:
                logger.debug(f"配置分类不存在：{category}")
                return None

            body = data[name]
            if not isinstance(body, dict):
                logger.warning(f"配置分类 {name} 不是 JSON 对象，已忽略")
                return None
            return body

    def write_category(self, category: str, values: Mapping[str, Any]) -> None:
        """
        将一个分类合并写回文档，其余分类保持不变。

        文档中已有仅大小写不同的同名分类时，覆盖该分类而不是新增一项。

        Raises:
            OSError: 写文件失败
            TypeError / ValueError: 值无法序列化为 JSON
        """
        snapshot = dict(values)
        with _DOCUMENT_LOCK:
            data = self._load_for_merge()
            name = _find_category(data, category) or category
            data[name] = snapshot
            self._write_all(data)

    def delete_category(self, category: str) -> bool:
        """
        删除某个分类（与读取相同：先精确匹配，再忽略大小写匹配）。

        Returns:
            分类存在并已删除返回 True，不存在返回 False
        """
        with _DOCUMENT_LOCK:
            data = self._load_for_merge()
            name = _find_category(data, category)
            if name is None:
                logger.debug(f"配置分类 {category} 不存在，无需删除")
                return False
            del data[name]
            self._write_all(data)
            logger.info(f"配置分类 {name} 已删除")
            return True

    def list_categories(self) -> List[str]:
        with _DOCUMENT_LOCK:
            return [str(name) for name in self._load_for_merge()]

    def _write_all(self, data: Dict[str, Any]) -> None:
        text = to_json_text(data, indent=JSON_INDENT)
        self.path.write_text(text, encoding=CONFIG_FILE_ENCODING)
