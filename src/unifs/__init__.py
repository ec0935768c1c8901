"""
unifs — единая адресация и единый контракт ввода-вывода поверх нескольких хранилищ:
локальная ФС, HDFS (WebHDFS и нативный RPC) и ФС в памяти процесса.

Быстрый старт:
    from unifs import runtime

    router = runtime.get_router()
    router.mkdir("/inmem/t")
    with router.create("/inmem/t/f") as w:
        w.write(b"Hello World!\\n")
"""

from unifs.errors import (  # noqa: F401
    BackendFailure,
    BackendNotConnected,
    FileStoreError,
    IsADirectory,
    NotADirectory,
    NotFound,
    UnknownBackend,
    is_not_exist,
)
from unifs.filestore.types import FileStat  # noqa: F401
from unifs.router import Backend, FileRouter, Prefixes, classify  # noqa: F401

__version__ = "0.1.0"
