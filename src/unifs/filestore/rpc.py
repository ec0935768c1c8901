"""
HdfsFileStore — адаптер FileStore для HDFS через нативный RPC (протокол B).

Клиент — pyarrow.fs.HadoopFileSystem (или любой объект с тем же набором методов:
open_output_stream, open_input_stream, get_file_info, create_dir).

Замечание:
- pyarrow импортируется лениво, только в connect() (extra "hdfs")
- запись инкрементальная (open_output_stream), труба не нужна
- клиент не отдаёт биты прав: каталоги отчитываются как 0o777, файлы — 0o666
"""

from __future__ import annotations

import logging
from typing import Any, BinaryIO

from unifs.errors import BackendNotConnected, NotADirectory, NotFound
from unifs.filestore.base import FileStore
from unifs.filestore.local import os_errors
from unifs.filestore.types import FileStat, basename
from unifs.utils.optional_deps import ensure_import

logger = logging.getLogger(__name__)

DIR_MODE = 0o777
FILE_MODE = 0o666


def parse_namenode(namenode: str, default_port: int = 8020) -> tuple[str, int]:
    """Разбирает "host:port" в (host, port); без порта берётся default_port."""
    s = str(namenode).strip()
    for scheme in ("hdfs://", "viewfs://"):
        if s.startswith(scheme):
            s = s[len(scheme):]
    s = s.rstrip("/")
    host, sep, port = s.rpartition(":")
    if not sep:
        return s, default_port
    return host, int(port)


class HdfsFileStore(FileStore):
    """HDFS через нативный RPC."""

    def __init__(self, client: Any | None = None, fs_module: Any | None = None):
        self._client = client
        # модуль с FileSelector (pyarrow.fs); подставляется в connect()
        self._fs_module = fs_module

    def connect(self, namenode: str, user: str) -> None:
        pafs = ensure_import(
            "pyarrow.fs",
            "pyarrow",
            hint="Native HDFS RPC needs pyarrow and a Hadoop client (libhdfs, CLASSPATH).",
        )
        host, port = parse_namenode(namenode)
        logger.info("Establish HDFS RPC connection as %s@%s:%s", user, host, port)
        self._client = pafs.HadoopFileSystem(host, port, user=user or None)
        self._fs_module = pafs

    @property
    def connected(self) -> bool:
        return self._client is not None

    def _require(self, op: str, path: str) -> Any:
        if self._client is None:
            raise BackendNotConnected("HDFS RPC connection has not been established", op=op, path=path)
        return self._client

    def _info(self, op: str, path: str):
        client = self._require(op, path)
        with os_errors(op, path):
            info = client.get_file_info(path)
        if _type_name(info) == "NotFound":
            raise NotFound("no such file or directory", op=op, path=path)
        return info

    # --- Потоки ---

    def create(self, path: str) -> BinaryIO:
        client = self._require("create", path)
        with os_errors("create", path):
            return client.open_output_stream(path)

    def open(self, path: str) -> BinaryIO:
        client = self._require("open", path)
        with os_errors("open", path):
            return client.open_input_stream(path)

    # --- Метаданные и каталоги ---

    def stat(self, path: str) -> FileStat:
        return _to_stat(self._info("stat", path), name=basename(path))

    def readdir(self, path: str) -> list[FileStat]:
        info = self._info("readdir", path)
        if _type_name(info) != "Directory":
            raise NotADirectory("not a directory", op="readdir", path=path)
        pafs = self._fs_module or ensure_import("pyarrow.fs", "pyarrow")
        with os_errors("readdir", path):
            infos = self._client.get_file_info(pafs.FileSelector(path, recursive=False))
        return sorted((_to_stat(i) for i in infos), key=lambda s: s.name)

    def mkdir(self, path: str) -> None:
        client = self._require("mkdir", path)
        with os_errors("mkdir", path):
            client.create_dir(path, recursive=True)

    def exists(self, path: str) -> bool:
        try:
            self._info("exists", path)
        except NotFound:
            return False
        return True

    def __repr__(self) -> str:
        return f"HdfsFileStore(connected={self.connected})"


def _type_name(info: Any) -> str:
    # pyarrow FileType: NotFound, Unknown, File, Directory
    t = getattr(info, "type", None)
    return getattr(t, "name", str(t))


def _to_stat(info: Any, name: str | None = None) -> FileStat:
    is_dir = _type_name(info) == "Directory"
    mtime = getattr(info, "mtime", None)
    return FileStat(
        name=name or getattr(info, "base_name", None) or basename(info.path),
        size=int(info.size or 0),
        mode=DIR_MODE if is_dir else FILE_MODE,
        mtime=mtime.timestamp() if mtime is not None else 0.0,
        is_dir=is_dir,
    )
