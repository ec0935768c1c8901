"""
url — нормализация адресов удалённых сервисов.

Задача:
- принимать адрес в любом привычном виде ("localhost:50070", "http://nn:9870/", "nn:9870/webhdfs/v1")
- отдавать единый базовый URL REST-API WebHDFS
"""

from __future__ import annotations

import re
from urllib.parse import quote, urlsplit, urlunsplit

WEBHDFS_ROOT = "/webhdfs/v1"


def webhdfs_base(addr: str) -> str:
    """Возвращает базовый URL вида http://host:port/webhdfs/v1 (без завершающего /)."""
    s = str(addr or "").strip().replace("\\", "/")
    if not s:
        raise ValueError("WebHDFS address is empty")

    # "голый" host:port без схемы
    if not re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*://", s):
        s = "http://" + s

    parts = urlsplit(s)
    path = re.sub(r"/{2,}", "/", parts.path or "").rstrip("/")
    if not path.endswith(WEBHDFS_ROOT):
        path = path + WEBHDFS_ROOT
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


def join(base: str, path: str) -> str:
    """Склеивает базовый URL и путь внутри HDFS (путь экранируется, "/" сохраняется)."""
    p = "/" + str(path).lstrip("/")
    return base + quote(p, safe="/")
