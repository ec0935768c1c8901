"""
config — настройки unifs из переменных окружения.

Все переменные опциональны:
- UNIFS_LOCAL_ROOT          базовый каталог для относительных локальных путей
- UNIFS_NAMENODE            адрес namenode для нативного RPC ("host:port")
- UNIFS_WEBHDFS             адрес WebHDFS ("host:port" или URL)
- UNIFS_HDFS_USER           пользователь HDFS (пусто — текущий пользователь ОС)
- UNIFS_INMEM_AUTO_PARENTS  1 — mkdir в памяти создаёт предков
- UNIFS_HTTP_TIMEOUT        таймаут HTTP-запросов, сек
- UNIFS_PIPE_TIMEOUT        таймауты трубы записи (write/close/idle), сек; пусто — без ограничения
- UNIFS_WEBFS_PREFIX / UNIFS_HDFS_PREFIX / UNIFS_INMEM_PREFIX  зарезервированные префиксы
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from unifs.router import DEFAULT_PREFIXES, Prefixes

_TRUE = ("1", "true", "True", "yes", "YES")


def _float_or_none(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    return float(value)


@dataclass(frozen=True)
class Settings:
    local_root: str | None = None
    namenode: str = ""
    webhdfs: str = ""
    hdfs_user: str = ""
    inmem_auto_parents: bool = False
    http_timeout: float = 60.0
    pipe_timeout: float | None = None
    prefixes: Prefixes = DEFAULT_PREFIXES

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        prefixes = Prefixes(
            webfs=env.get("UNIFS_WEBFS_PREFIX", DEFAULT_PREFIXES.webfs),
            hdfs=env.get("UNIFS_HDFS_PREFIX", DEFAULT_PREFIXES.hdfs),
            inmem=env.get("UNIFS_INMEM_PREFIX", DEFAULT_PREFIXES.inmem),
        )
        return cls(
            local_root=env.get("UNIFS_LOCAL_ROOT") or None,
            namenode=env.get("UNIFS_NAMENODE", ""),
            webhdfs=env.get("UNIFS_WEBHDFS", ""),
            hdfs_user=env.get("UNIFS_HDFS_USER", ""),
            inmem_auto_parents=env.get("UNIFS_INMEM_AUTO_PARENTS", "0").strip() in _TRUE,
            http_timeout=float(env.get("UNIFS_HTTP_TIMEOUT", "60")),
            pipe_timeout=_float_or_none(env.get("UNIFS_PIPE_TIMEOUT")),
            prefixes=prefixes,
        )
