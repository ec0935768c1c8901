"""
types — типы для FileStore.

Назначение:
- дать единый переносимый тип метаданных файла/каталога
- не привязываться к конкретному backend (local/inmem/webhdfs/hdfs)

Принцип:
- запись создаётся заново на каждый stat/readdir и после создания не меняется
- name — всегда последний компонент пути, а не полный путь
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FileStat:
    """Метаданные файла/каталога.

    Для каталогов size всегда 0 (даже если бэкенд прислал что-то иное).
    """

    name: str
    size: int = 0
    mode: int = 0
    mtime: float = 0.0
    is_dir: bool = False

    def __post_init__(self) -> None:
        if self.is_dir and self.size:
            object.__setattr__(self, "size", 0)

    @property
    def is_file(self) -> bool:
        return not self.is_dir


def basename(path: str) -> str:
    """Последний компонент пути; для корня возвращает "/"."""
    p = str(path).rstrip("/")
    if not p:
        return "/"
    return posixpath.basename(p)
