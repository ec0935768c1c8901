"""
router — единое пространство путей поверх нескольких бэкендов.

Принцип:
- бэкенд определяется только по строке пути: буквальная проверка префикса
  в фиксированном порядке (webfs, hdfs, inmem), иначе — локальная ФС
- префикс снимается, остаток всегда начинается с "/":
  "/hdfs/tmp/a" -> (HDFS, "/tmp/a"), "/hdfs/" -> (HDFS, "/")
- адаптер выбирается один раз на вызов, дальше работа идёт через FileStore

Важно:
- экранирования нет: локальный путь, начинающийся с зарезервированного префикса
  (например, настоящий каталог /inmem/ на диске), всегда уйдёт в соответствующий бэкенд
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Mapping

from unifs.errors import UnknownBackend
from unifs.filestore.base import FileStore
from unifs.filestore.types import FileStat

logger = logging.getLogger(__name__)


class Backend(enum.Enum):
    LOCAL = "local"
    INMEM = "inmem"
    WEBHDFS = "webhdfs"
    HDFS = "hdfs"


@dataclass(frozen=True)
class Prefixes:
    """Зарезервированные префиксы (порядок проверки: webfs, hdfs, inmem)."""

    webfs: str = "/webfs/"
    hdfs: str = "/hdfs/"
    inmem: str = "/inmem/"

    def ordered(self) -> tuple[tuple[str, Backend], ...]:
        return (
            (self.webfs, Backend.WEBHDFS),
            (self.hdfs, Backend.HDFS),
            (self.inmem, Backend.INMEM),
        )


DEFAULT_PREFIXES = Prefixes()


def classify(path: str, prefixes: Prefixes = DEFAULT_PREFIXES) -> tuple[Backend, str]:
    """Возвращает (бэкенд, путь внутри бэкенда). Никогда не падает."""
    for prefix, backend in prefixes.ordered():
        if prefix and path.startswith(prefix):
            return backend, "/" + path[len(prefix):]
    return Backend.LOCAL, path


class FileRouter:
    """Диспетчер: unified path -> (адаптер, локальный путь) -> операция.

    Args:
        stores: адаптер для каждого бэкенда.
        prefixes: зарезервированные префиксы.
    """

    def __init__(self, stores: Mapping[Backend, FileStore], prefixes: Prefixes = DEFAULT_PREFIXES):
        self._stores = dict(stores)
        self.prefixes = prefixes

    def store(self, backend: Backend) -> FileStore:
        try:
            return self._stores[backend]
        except KeyError:
            raise UnknownBackend(f"no store registered for backend {backend.value!r}") from None

    def resolve(self, path: str) -> tuple[FileStore, str]:
        backend, local = classify(str(path), self.prefixes)
        logger.debug("route %s -> %s:%s", path, backend.value, local)
        return self.store(backend), local

    # --- Операции над unified path ---

    def create(self, path: str) -> BinaryIO:
        store, local = self.resolve(path)
        return store.create(local)

    def open(self, path: str) -> BinaryIO:
        store, local = self.resolve(path)
        return store.open(local)

    def stat(self, path: str) -> FileStat:
        store, local = self.resolve(path)
        return store.stat(local)

    def readdir(self, path: str) -> list[FileStat]:
        store, local = self.resolve(path)
        return store.readdir(local)

    def mkdir(self, path: str) -> None:
        store, local = self.resolve(path)
        store.mkdir(local)

    def exists(self, path: str) -> bool:
        store, local = self.resolve(path)
        return store.exists(local)

    def read_bytes(self, path: str) -> bytes:
        store, local = self.resolve(path)
        return store.read_bytes(local)

    def write_bytes(self, path: str, data: bytes) -> None:
        store, local = self.resolve(path)
        store.write_bytes(local, data)

    def put(self, local_file: str | Path, dest: str) -> str:
        """Копирует локальный файл в любой бэкенд (с перезаписью).

        Возвращает unified path результата.
        """
        backend, src = classify(str(local_file), self.prefixes)
        if backend is not Backend.LOCAL:
            raise ValueError(f"put source {local_file} must be a local path")
        store, local = self.resolve(dest)
        written = store.put(src, local)
        if written == local:
            return str(dest)
        return str(dest).rstrip("/") + "/" + Path(src).name

    def __repr__(self) -> str:
        return f"FileRouter(backends={[b.value for b in self._stores]}, prefixes={self.prefixes!r})"
