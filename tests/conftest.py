from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest


def pytest_configure() -> None:
    """
    Ensure `src/` is importable when running pytest without installing the package.
    """
    project_root = Path(__file__).resolve().parents[1]
    src_dir = project_root / "src"
    if str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


@pytest.fixture(autouse=True)
def isolated_config_dir(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Iterator[Path]:
    """
    Point the default config directory at a temp dir so no test touches ../json.
    """
    from categoryconfig.infrastructure.config.config_store import get_config_store
    from categoryconfig.shared import constants

    config_dir = tmp_path_factory.mktemp("json")
    monkeypatch.setattr(constants, "DEFAULT_CONFIG_DIR", config_dir)
    get_config_store.cache_clear()
    yield config_dir
    get_config_store.cache_clear()
