"""
errors — единая таксономия ошибок unifs.

Назначение:
- каждый бэкенд переводит "свои" исключения (OSError, requests, pyarrow) в эти типы
- вызывающий код различает "нет такого пути" и прочие сбои без разбора текста ошибки

Принцип:
- каждый тип наследует и FileStoreError, и близкий встроенный тип
  (FileNotFoundError, ConnectionError, ...), поэтому обычный except OSError тоже работает.
"""

from __future__ import annotations


class FileStoreError(Exception):
    """Базовая ошибка операций unifs."""

    def __init__(self, message: str, *, op: str | None = None, path: str | None = None):
        super().__init__(message)
        self.op = op
        self.path = path

    def __str__(self) -> str:
        msg = super().__str__()
        if self.op and self.path:
            return f"{self.op} {self.path}: {msg}"
        return msg


class NotFound(FileStoreError, FileNotFoundError):
    """Путь не существует там, где он обязан существовать."""


class NotADirectory(FileStoreError, NotADirectoryError):
    """Цель readdir (или mkdir) не является каталогом."""


class IsADirectory(FileStoreError, IsADirectoryError):
    """Файловая операция над каталогом."""


class BackendNotConnected(FileStoreError, ConnectionError):
    """Удалённый бэкенд ещё не подключён (hookup не вызывался или не удался)."""


class UnknownBackend(FileStoreError, ValueError):
    """Для бэкенда, выбранного по префиксу, не зарегистрирован адаптер."""


class BackendFailure(FileStoreError, OSError):
    """Непрозрачная ошибка нижележащего клиента (исходная — в __cause__)."""


def is_not_exist(exc: BaseException | None) -> bool:
    """Проверяет, что ошибка означает "путь не существует"."""
    return isinstance(exc, (NotFound, FileNotFoundError))
