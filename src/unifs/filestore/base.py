"""
FileStore — единый контракт адаптера хранилища.

Принцип:
- каждый бэкенд (local, inmem, webhdfs, hdfs) реализует один и тот же набор операций
- пути здесь уже "локальные" для бэкенда: префикс снят маршрутизатором (router)
- форматы (pickle, текст) живут выше, в ioapi

Важно:
- readdir на несуществующем каталоге поднимает NotFound, а не возвращает [],
  чтобы "пустой каталог" и "нет каталога" различались
- exists никогда не поднимает ошибку для отсутствующего пути
- read_bytes/write_bytes/copy/put имеют дефолтные реализации поверх базовых методов,
  поэтому бэкенд можно реализовать минимально
"""

from __future__ import annotations

import posixpath
import shutil
from pathlib import Path
from typing import BinaryIO, Protocol

from unifs.filestore.types import FileStat


class FileStore(Protocol):
    """Адаптер одного хранилища."""

    # --- Потоки ---

    def create(self, path: str) -> BinaryIO:
        """Создаёт (или обрезает) файл и возвращает поток записи."""
        ...

    def open(self, path: str) -> BinaryIO:
        """Открывает бинарный поток чтения с нулевого смещения."""
        ...

    # --- Метаданные и каталоги ---

    def stat(self, path: str) -> FileStat:
        """Возвращает метаданные файла/каталога. NotFound, если пути нет."""
        ...

    def readdir(self, path: str) -> list[FileStat]:
        """Возвращает метаданные прямых потомков каталога (без рекурсии)."""
        ...

    def mkdir(self, path: str) -> None:
        """Создаёт каталог. Повторный вызов на существующем каталоге — не ошибка."""
        ...

    def exists(self, path: str) -> bool:
        """Проверяет существование пути."""
        ...

    # --- Дефолтные "удобные" методы ---

    def read_bytes(self, path: str) -> bytes:
        """Читает файл целиком (байтами)."""
        with self.open(path) as f:
            return f.read()

    def write_bytes(self, path: str, data: bytes) -> None:
        """Пишет файл целиком (байтами)."""
        with self.create(path) as f:
            f.write(data)

    def copy(self, src: str, dst: str) -> None:
        """Копирует файл внутри одного бэкенда."""
        with self.open(src) as r, self.create(dst) as w:
            shutil.copyfileobj(r, w)

    def put(self, local_file: str | Path, path: str) -> str:
        """Копирует локальный файл в бэкенд, перезаписывая существующий.

        Если path — существующий каталог, файл ложится в него под своим именем.
        Возвращает итоговый путь внутри бэкенда.
        """
        src = Path(local_file)
        dest = path
        if self.exists(path) and self.stat(path).is_dir:
            dest = posixpath.join(path, src.name)
        with src.open("rb") as r, self.create(dest) as w:
            shutil.copyfileobj(r, w)
        return dest
