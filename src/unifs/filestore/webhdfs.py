"""
WebHdfsFileStore — адаптер FileStore для HDFS через WebHDFS (протокол A).

Принцип:
- клиент (WebHdfsClient) подключается отдельно, через connect()/runtime.hookup_hdfs()
- до подключения любая операция поднимает BackendNotConnected
- create — push-style: вызывающий получает пишущий конец трубы (AsyncWriteSink),
  фоновый поток отдаёт читающий конец в client.create
"""

from __future__ import annotations

from typing import Any, BinaryIO

from unifs.errors import BackendFailure, BackendNotConnected, NotADirectory, NotFound
from unifs.filestore.base import FileStore
from unifs.filestore.pipe import AsyncWriteSink
from unifs.filestore.types import FileStat, basename
from unifs.net.webhdfs import WebHdfsClient


class WebHdfsFileStore(FileStore):
    """HDFS через REST-API WebHDFS.

    Args:
        client: подключённый WebHdfsClient или None.
        permission: права создаваемых файлов (по умолчанию только владелец).
        write_timeout / close_timeout / idle_timeout: таймауты трубы записи.
        http_timeout: таймаут HTTP-запросов клиента, создаваемого в connect().
    """

    def __init__(
        self,
        client: WebHdfsClient | None = None,
        *,
        permission: int = 0o700,
        write_timeout: float | None = None,
        close_timeout: float | None = None,
        idle_timeout: float | None = None,
        http_timeout: float = 60,
    ):
        self._client = client
        self.permission = permission
        self.http_timeout = http_timeout
        self._pipe_opts = {
            "write_timeout": write_timeout,
            "close_timeout": close_timeout,
            "idle_timeout": idle_timeout,
        }

    def connect(self, addr: str, user: str, **client_opts: Any) -> None:
        client_opts.setdefault("timeout", self.http_timeout)
        client = WebHdfsClient(addr, user, **client_opts)
        client.check_connection()
        self._client = client

    @property
    def connected(self) -> bool:
        return self._client is not None

    def _require(self, op: str, path: str) -> WebHdfsClient:
        if self._client is None:
            raise BackendNotConnected("WebHDFS connection has not been established", op=op, path=path)
        return self._client

    # --- Потоки ---

    def create(self, path: str) -> BinaryIO:
        client = self._require("create", path)

        def _upload(reader) -> None:
            client.create(reader, path, overwrite=True, permission=self.permission)

        return AsyncWriteSink(_upload, name=path, **self._pipe_opts)

    def open(self, path: str) -> BinaryIO:
        return self._require("open", path).open(path)

    # --- Метаданные и каталоги ---

    def stat(self, path: str) -> FileStat:
        status = self._require("stat", path).get_file_status(path)
        return _to_stat(basename(path), status)

    def readdir(self, path: str) -> list[FileStat]:
        client = self._require("readdir", path)
        # LISTSTATUS на файле возвращает сам файл, поэтому тип проверяется заранее.
        if client.get_file_status(path).get("type") != "DIRECTORY":
            raise NotADirectory("not a directory", op="readdir", path=path)
        return [_to_stat(s.get("pathSuffix", ""), s) for s in client.list_status(path)]

    def mkdir(self, path: str) -> None:
        if not self._require("mkdir", path).mkdirs(path, permission=0o777):
            raise BackendFailure("MKDIRS was rejected by the namenode", op="mkdir", path=path)

    def exists(self, path: str) -> bool:
        client = self._require("exists", path)
        try:
            client.get_file_status(path)
        except NotFound:
            return False
        return True

    def __repr__(self) -> str:
        return f"WebHdfsFileStore(client={self._client!r})"


def _to_stat(name: str, status: dict[str, Any]) -> FileStat:
    try:
        mode = int(str(status.get("permission", "0")), 8)
    except ValueError:
        mode = 0
    return FileStat(
        name=name,
        size=int(status.get("length", 0)),
        mode=mode,
        mtime=int(status.get("modificationTime", 0)) / 1000.0,
        is_dir=status.get("type") == "DIRECTORY",
    )
