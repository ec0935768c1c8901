"""
InMemoryFileStore — иерархическая ФС поверх плоского словаря.

Назначение:
- быстрая замена любого бэкенда в тестах, без внешних зависимостей

Принцип:
- ключ — нормализованный путь ("/a/b": ведущий "/", без завершающего "/")
- значение — либо _File (буфер байтов), либо _Dir (маркер каталога)
- иерархии как структуры нет: readdir каждый раз сканирует все ключи по префиксу,
  поэтому кэшировать и инвалидировать нечего

Важно:
- один RLock на весь store: все мутации и весь скан readdir идут под ним,
  readdir видит согласованный снимок
- mkdir по умолчанию НЕ создаёт предков (auto_parents=False): readdir("/a")
  после mkdir("/a/b") даёт NotFound. Политику можно включить явно.
- "/a" не может быть одновременно файлом и каталогом
"""

from __future__ import annotations

import io
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import BinaryIO

from unifs.errors import IsADirectory, NotADirectory, NotFound
from unifs.filestore.base import FileStore
from unifs.filestore.types import FileStat, basename

logger = logging.getLogger(__name__)

DEFAULT_MODE = 0o777


@dataclass
class _File:
    data: bytearray = field(default_factory=bytearray)
    mtime: float = field(default_factory=time.time)


@dataclass
class _Dir:
    mtime: float = field(default_factory=time.time)


def normalize(path: str) -> str:
    """Нормализует путь: ведущий "/", без повторных и завершающего "/"."""
    parts = [p for p in str(path).split("/") if p]
    return "/" + "/".join(parts)


def _parents(key: str) -> list[str]:
    parts = [p for p in key.split("/") if p]
    return ["/" + "/".join(parts[:i]) for i in range(len(parts))]


class _MemoryWriter(io.RawIOBase):
    """Поток записи в буфер store. close ничего не сбрасывает — данные уже в памяти."""

    def __init__(self, store: "InMemoryFileStore", entry: _File, name: str):
        super().__init__()
        self._store = store
        self._entry = entry
        self.name = name

    def writable(self) -> bool:
        return True

    def write(self, b) -> int:
        if self.closed:
            raise ValueError("write to closed file")
        data = bytes(b)
        with self._store._lock:
            self._entry.data.extend(data)
            self._entry.mtime = time.time()
        return len(data)


class InMemoryFileStore(FileStore):
    """Хранилище в памяти процесса.

    Args:
        auto_parents: если True, mkdir/create создают маркеры всех предков.
    """

    def __init__(self, auto_parents: bool = False):
        self.auto_parents = auto_parents
        self._lock = threading.RLock()
        self._entries: dict[str, _File | _Dir] = {}

    def _ensure_parents(self, key: str) -> None:
        for parent in _parents(key):
            node = self._entries.get(parent)
            if isinstance(node, _File):
                raise NotADirectory("parent is a file", op="mkdir", path=parent)
            if node is None:
                self._entries[parent] = _Dir()

    # --- Потоки ---

    def create(self, path: str) -> BinaryIO:
        key = normalize(path)
        with self._lock:
            if isinstance(self._entries.get(key), _Dir):
                raise IsADirectory("cannot create file over a directory", op="create", path=path)
            if self.auto_parents:
                self._ensure_parents(key)
            entry = _File()
            # Полная замена записи: старый буфер (и держатели старых потоков) отрезаны.
            self._entries[key] = entry
        logger.debug("inmem create %s", key)
        return _MemoryWriter(self, entry, key)

    def open(self, path: str) -> BinaryIO:
        key = normalize(path)
        with self._lock:
            node = self._entries.get(key)
            if node is None:
                raise NotFound("file does not exist", op="open", path=path)
            if isinstance(node, _Dir):
                raise IsADirectory("cannot open a directory", op="open", path=path)
            snapshot = bytes(node.data)
        return io.BytesIO(snapshot)

    # --- Метаданные и каталоги ---

    def mkdir(self, path: str) -> None:
        key = normalize(path)
        with self._lock:
            node = self._entries.get(key)
            if isinstance(node, _File):
                raise NotADirectory("a file with this name exists", op="mkdir", path=path)
            if self.auto_parents:
                self._ensure_parents(key)
            if node is None:
                self._entries[key] = _Dir()

    def stat(self, path: str) -> FileStat:
        key = normalize(path)
        with self._lock:
            node = self._entries.get(key)
            if node is None:
                raise NotFound("no such file or directory", op="stat", path=path)
            return _to_stat(basename(key), node)

    def readdir(self, path: str) -> list[FileStat]:
        key = normalize(path)
        prefix = key if key == "/" else key + "/"
        children: dict[str, FileStat] = {}
        with self._lock:
            node = self._entries.get(key)
            if node is None:
                raise NotFound("directory does not exist", op="readdir", path=path)
            if isinstance(node, _File):
                raise NotADirectory("not a directory", op="readdir", path=path)

            for k, v in self._entries.items():
                if k == key or not k.startswith(prefix):
                    continue
                name, _, rest = k[len(prefix):].partition("/")
                if rest:
                    # Глубже прямого потомка: name является каталогом (явным или подразумеваемым).
                    if name not in children:
                        children[name] = FileStat(name=name, mode=DEFAULT_MODE, is_dir=True)
                else:
                    children[name] = _to_stat(name, v)
        return sorted(children.values(), key=lambda s: s.name)

    def exists(self, path: str) -> bool:
        with self._lock:
            return normalize(path) in self._entries

    # --- Служебное ---

    def reset(self) -> None:
        """Удаляет все записи (аналог форматирования)."""
        with self._lock:
            self._entries.clear()
        logger.debug("inmem store reset")

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._entries)

    def __repr__(self) -> str:
        return f"InMemoryFileStore(entries={len(self._entries)}, auto_parents={self.auto_parents})"


def _to_stat(name: str, node: _File | _Dir) -> FileStat:
    if isinstance(node, _Dir):
        return FileStat(name=name, mode=DEFAULT_MODE, mtime=node.mtime, is_dir=True)
    return FileStat(name=name, size=len(node.data), mode=DEFAULT_MODE, mtime=node.mtime)
