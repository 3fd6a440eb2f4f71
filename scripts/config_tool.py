#!/usr/bin/env python3
"""
分类配置命令行工具

示例：
    python scripts/config_tool.py --category network set retries 3
    python scripts/config_tool.py --category network show
    python scripts/config_tool.py categories
    python scripts/config_tool.py --category network delete-category
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

import yaml

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


from categoryconfig.infrastructure.config.config_store import ConfigStore  # noqa: E402
from categoryconfig.infrastructure.config.document import ConfigDocument  # noqa: E402
from categoryconfig.shared.constants import DEFAULT_CATEGORY  # noqa: E402
from categoryconfig.shared.logger import set_global_log_level  # noqa: E402


def _parse_value(raw: str) -> Any:
    # 能按 JSON 解析的按 JSON（数字/布尔/对象/数组），否则按字符串保存
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="分类 JSON 配置查看/修改工具")
    parser.add_argument("--file", default=None, help="配置文件路径，默认为配置目录下的 config.json")
    parser.add_argument("--category", default=DEFAULT_CATEGORY, help="分类名称，默认为 default")
    parser.add_argument("--log-level", default="WARNING", help="日志级别，默认为 WARNING")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("show", help="以 YAML 格式显示当前分类")
    subparsers.add_parser("categories", help="列出文件中的所有分类")

    get_parser = subparsers.add_parser("get", help="读取一个配置值（JSON 输出）")
    get_parser.add_argument("key")

    set_parser = subparsers.add_parser("set", help="设置一个配置值并保存")
    set_parser.add_argument("key")
    set_parser.add_argument("value", help="按 JSON 解析，解析失败时作为字符串")

    delete_parser = subparsers.add_parser("delete", help="删除一个配置值并保存")
    delete_parser.add_argument("key")

    subparsers.add_parser("delete-category", help="从文件中删除 --category 指定的整个分类")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        set_global_log_level(args.log_level)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    store = ConfigStore(args.file, args.category)

    if args.command == "show":
        print(
            yaml.safe_dump(
                store.snapshot(),
                allow_unicode=True,
                sort_keys=False,
                default_flow_style=False,
            ),
            end="",
        )
        return 0

    if args.command == "categories":
        for name in ConfigDocument(store.config_path).list_categories():
            print(name)
        return 0

    if args.command == "get":
        value, found = store.read(args.key)
        if not found:
            print(f"ERROR: 配置 {store.category}.{args.key} 不存在", file=sys.stderr)
            return 1
        print(json.dumps(value, ensure_ascii=False))
        return 0

    if args.command == "set":
        store.write(args.key, _parse_value(args.value))
        return 0 if store.save() else 1

    if args.command == "delete":
        if not store.delete(args.key):
            print(f"ERROR: 配置 {store.category}.{args.key} 不存在", file=sys.stderr)
            return 1
        return 0 if store.save() else 1

    if args.command == "delete-category":
        try:
            deleted = ConfigDocument(store.config_path).delete_category(store.category)
        except (OSError, ValueError, TypeError) as e:
            print(f"ERROR: 删除配置分类失败：{e}", file=sys.stderr)
            return 1
        if not deleted:
            print(f"ERROR: 配置分类 {store.category} 不存在", file=sys.stderr)
            return 1
        return 0

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
