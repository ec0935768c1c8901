"""
bytes — базовые операции поверх FileRouter.

Это "универсальная база": текст, pickle и любые кастомные форматы.
"""

from __future__ import annotations

from typing import BinaryIO

from unifs.router import FileRouter
from unifs.runtime import get_router


def open_read(path: str, router: FileRouter | None = None) -> BinaryIO:
    router = router or get_router()
    return router.open(path)


def open_write(path: str, router: FileRouter | None = None) -> BinaryIO:
    router = router or get_router()
    return router.create(path)


def read_bytes(path: str, router: FileRouter | None = None) -> bytes:
    router = router or get_router()
    return router.read_bytes(path)


def write_bytes(path: str, data: bytes, router: FileRouter | None = None) -> None:
    router = router or get_router()
    router.write_bytes(path, data)
