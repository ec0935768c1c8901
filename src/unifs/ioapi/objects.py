"""
objects — сохранение/загрузка Python-объектов (pickle) по unified path.

Важно:
- pickle исполняет код при загрузке: load() только для доверенных файлов
- запись идёт потоком через create(), поэтому работает и для push-style бэкендов
"""

from __future__ import annotations

import pickle
from typing import Any

from unifs.ioapi.bytes import open_read, open_write
from unifs.router import FileRouter


def save(path: str, obj: Any, router: FileRouter | None = None) -> None:
    """Сериализует obj в файл path."""
    with open_write(path, router=router) as f:
        pickle.dump(obj, f, protocol=pickle.HIGHEST_PROTOCOL)


def load(path: str, router: FileRouter | None = None) -> Any:
    """Загружает объект, сохранённый save()."""
    with open_read(path, router=router) as f:
        return pickle.load(f)
