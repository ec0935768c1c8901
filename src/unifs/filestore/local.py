"""
LocalFileStore — реализация FileStore для локальной файловой системы.

Используется для всех путей без зарезервированного префикса.

Требования:
- реализовать полный контракт FileStore
- переводить OSError в таксономию unifs.errors (исходная ошибка остаётся в __cause__)

Замечание:
- create НЕ создаёт родительские каталоги (как и обычный open(..., "wb")),
  а mkdir создаёт их (аналог mkdir -p).
"""

from __future__ import annotations

import os
import stat as stat_mod
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

from unifs.errors import BackendFailure, IsADirectory, NotADirectory, NotFound
from unifs.filestore.base import FileStore
from unifs.filestore.types import FileStat


@contextmanager
def os_errors(op: str, path: str) -> Iterator[None]:
    """Переводит OSError в ошибки unifs."""
    try:
        yield
    except FileNotFoundError as e:
        raise NotFound(e.strerror or "no such file or directory", op=op, path=path) from e
    except NotADirectoryError as e:
        raise NotADirectory(e.strerror or "not a directory", op=op, path=path) from e
    except IsADirectoryError as e:
        raise IsADirectory(e.strerror or "is a directory", op=op, path=path) from e
    except OSError as e:
        raise BackendFailure(str(e), op=op, path=path) from e


class LocalFileStore(FileStore):
    """Локальная реализация FileStore."""

    def __init__(self, root: str | None = None):
        # root используется как базовый каталог для относительных путей
        self._root = Path(root).expanduser().resolve() if root else None

    def _abs(self, path: str) -> Path:
        p = Path(str(path))
        if self._root and not p.is_absolute():
            p = self._root / p
        return p

    # --- Потоки ---

    def create(self, path: str) -> BinaryIO:
        with os_errors("create", path):
            return self._abs(path).open("wb")

    def open(self, path: str) -> BinaryIO:
        with os_errors("open", path):
            return self._abs(path).open("rb")

    # --- Метаданные и каталоги ---

    def stat(self, path: str) -> FileStat:
        p = self._abs(path)
        with os_errors("stat", path):
            st = p.stat()
        return _to_stat(p.name or str(p), st)

    def readdir(self, path: str) -> list[FileStat]:
        p = self._abs(path)
        out: list[FileStat] = []
        with os_errors("readdir", path):
            with os.scandir(p) as it:
                for entry in it:
                    st = _entry_stat(entry)
                    if st is not None:
                        out.append(_to_stat(entry.name, st))
        return sorted(out, key=lambda s: s.name)

    def mkdir(self, path: str) -> None:
        with os_errors("mkdir", path):
            self._abs(path).mkdir(parents=True, exist_ok=True)

    def exists(self, path: str) -> bool:
        try:
            with os_errors("exists", path):
                self._abs(path).stat()
        except NotFound:
            return False
        return True

    def __repr__(self) -> str:
        return f"LocalFileStore(root={self._root!r})"


def _to_stat(name: str, st: os.stat_result) -> FileStat:
    is_dir = stat_mod.S_ISDIR(st.st_mode)
    return FileStat(
        name=name,
        size=0 if is_dir else int(st.st_size),
        mode=stat_mod.S_IMODE(st.st_mode),
        mtime=float(st.st_mtime),
        is_dir=is_dir,
    )


def _entry_stat(entry: os.DirEntry) -> os.stat_result | None:
    """stat элемента каталога; для битой ссылки — сама ссылка, для исчезнувшего — None."""
    try:
        return entry.stat()
    except FileNotFoundError:
        pass
    try:
        return entry.stat(follow_symlinks=False)
    except FileNotFoundError:
        return None
