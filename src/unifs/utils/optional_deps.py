"""
optional_deps — ленивые (опциональные) зависимости.

Задача:
- не импортировать тяжёлые клиенты (pyarrow для нативного RPC HDFS) заранее
- импортировать их только при реальном подключении к бэкенду

Политика:
- по умолчанию (UNIFS_AUTO_PIP=0) — только понятная ошибка с подсказкой
- при UNIFS_AUTO_PIP=1 — пробует поставить пакет через pip и импортировать
"""

from __future__ import annotations

import importlib
import logging
import os
import subprocess
import sys
from typing import Any

logger = logging.getLogger(__name__)


def _auto_pip_enabled(auto_install: bool | None = None) -> bool:
    """
    Приоритет:
    1) параметр auto_install (если задан)
    2) переменная окружения UNIFS_AUTO_PIP=1
    """
    if auto_install is not None:
        return bool(auto_install)
    return os.getenv("UNIFS_AUTO_PIP", "0").strip() in ("1", "true", "True", "yes", "YES")


def ensure_import(
    module: str,
    pip_requirement: str | None = None,
    *,
    auto_install: bool | None = None,
    hint: str | None = None,
) -> Any:
    """
    Гарантирует импорт модуля.

    Если модуля нет:
    - при UNIFS_AUTO_PIP=1 (или auto_install=True) ставит pip_requirement
    - иначе поднимает ImportError с подсказкой
    """
    try:
        return importlib.import_module(module)
    except ImportError as e:
        req = pip_requirement or module

        if _auto_pip_enabled(auto_install=auto_install):
            logger.info("Installing optional dependency %s", req)
            subprocess.check_call([sys.executable, "-m", "pip", "install", req])
            return importlib.import_module(module)

        msg = f"Optional dependency is missing: '{module}'. Install: pip install {req}"
        if hint:
            msg += f"\nHint: {hint}"
        raise ImportError(msg) from e
