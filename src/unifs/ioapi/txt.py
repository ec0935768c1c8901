"""
txt — чтение/запись текстовых файлов по unified path.

Примечание:
- кодировка по умолчанию utf-8, при необходимости передаётся явно.
"""

from __future__ import annotations

from unifs.ioapi.bytes import read_bytes, write_bytes
from unifs.router import FileRouter


def read_text(path: str, encoding: str = "utf-8", router: FileRouter | None = None) -> str:
    """Читает текстовый файл целиком и возвращает строку."""
    data = read_bytes(path, router=router)
    return data.decode(encoding, errors="replace")


def write_text(path: str, text: str, encoding: str = "utf-8", router: FileRouter | None = None) -> None:
    """Пишет строку в файл (полностью)."""
    data = str(text).encode(encoding, errors="replace")
    write_bytes(path, data, router=router)
