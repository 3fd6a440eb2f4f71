"""
配置值的类型转换

内存中的分类只保存几种原生形态（str / float / bool / None / RawJson），
按调用方请求的类型在读取时再做转换：
- 标量之间做“尽力而为”的转换（数字字符串 -> 数字、非零数字 -> True 等）
- 从文件加载的对象/数组（RawJson）交给 pydantic 做结构化反序列化
- 转换失败统一抛出 ConfigValueConversionError，由上层决定是否吞掉
"""

from __future__ import annotations

import copy
import json
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, get_origin

from pydantic import TypeAdapter

from categoryconfig.infrastructure.config.errors import ConfigValueConversionError


@dataclass(frozen=True)
class RawJson:
    """从文件加载、尚未转换的 JSON 对象或数组"""

    value: Any


_ANY_TYPES = (object, Any)
_TRUE_STRINGS = ("true",)
_FALSE_STRINGS = ("false",)


def _is_plain_class(expected_type: object) -> bool:
    return get_origin(expected_type) is None and isinstance(expected_type, type)


@lru_cache(maxsize=128)
def _cached_type_adapter(expected_type: Any) -> TypeAdapter:
    return TypeAdapter(expected_type)


def _type_adapter(expected_type: Any) -> TypeAdapter:
    try:
        return _cached_type_adapter(expected_type)
    except TypeError:
        # 不可哈希的类型注解无法进入缓存
        return TypeAdapter(expected_type)


def _type_label(expected_type: Any) -> str:
    return getattr(expected_type, "__name__", None) or repr(expected_type)


def _fail(value: Any, expected_type: Any, reason: str = "") -> ConfigValueConversionError:
    message = f"无法将 {value!r} 转换为 {_type_label(expected_type)}"
    if reason:
        message = f"{message}（{reason}）"
    return ConfigValueConversionError(message)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_STRINGS:
            return True
        if normalized in _FALSE_STRINGS:
            return False
    raise _fail(value, bool)


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise _fail(value, int, "非有限数字")
        # round() 为银行家舍入（四舍六入五取偶）
        return int(round(value))
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as e:
            raise _fail(value, int, "不是合法整数") from e
    raise _fail(value, int)


def _to_float(value: Any) -> float:
    if isinstance(value, (bool, int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as e:
            raise _fail(value, float, "不是合法数字") from e
    raise _fail(value, float)


def _to_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    raise _fail(value, str)


_SCALAR_CONVERTERS = {
    bool: _to_bool,
    int: _to_int,
    float: _to_float,
    str: _to_str,
}


def _validate_structured(value: Any, expected_type: Any) -> Any:
    try:
        return _type_adapter(expected_type).validate_python(value)
    except (ValueError, TypeError) as e:
        # pydantic.ValidationError 是 ValueError 的子类；schema 生成失败是 TypeError
        raise _fail(value, expected_type, str(e).splitlines()[0]) from e


def coerce_value(value: Any, expected_type: Any = object) -> Any:
    """
    将内存中的配置值转换为请求的类型。

    Args:
        value: 分类中保存的原始值
        expected_type: 期望类型；object / Any 表示不做转换

    Returns:
        转换后的值（RawJson 会被拆包为独立副本，不会共享内存中的数据）

    Raises:
        ConfigValueConversionError: 类型不匹配或结构不合法
    """
    if isinstance(value, RawJson):
        if expected_type in _ANY_TYPES:
            return copy.deepcopy(value.value)
        return _validate_structured(value.value, expected_type)

    if expected_type in _ANY_TYPES:
        return value

    if _is_plain_class(expected_type):
        converter = _SCALAR_CONVERTERS.get(expected_type)
        if converter is not None:
            return converter(value)
        if isinstance(value, expected_type):
            return value

    return _validate_structured(value, expected_type)


_SERIALIZER = TypeAdapter(Any)


def _json_default(value: Any) -> Any:
    if isinstance(value, RawJson):
        return value.value
    # dataclass / pydantic 模型 / datetime 等交给 pydantic 推断序列化方式
    return _SERIALIZER.dump_python(value, mode="json")


def to_json_text(document: Any, *, indent: int) -> str:
    """
    序列化整个配置文档（美化缩进，保留非 ASCII 字符）。

    Raises:
        TypeError / ValueError: 存在无法序列化为 JSON 的值
    """
    return json.dumps(
        document, indent=indent, ensure_ascii=False, allow_nan=False, default=_json_default
    )


def from_json_value(value: Any) -> Any:
    """
    将文件中解析出的 JSON 值收窄为内存中的原生形态。

    字符串 -> str，数字 -> float（不区分整数/浮点），布尔 -> bool，
    null -> None，对象/数组 -> RawJson（延迟到读取时再转换）
    """
    if isinstance(value, bool) or value is None or isinstance(value, str):
        return value
    if isinstance(value, float):
        return value
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            # 超出 double 范围的整数保留原值，不保证精度
            return value
    return RawJson(value)
