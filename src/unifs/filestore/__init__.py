from unifs.filestore.base import FileStore
from unifs.filestore.inmem import InMemoryFileStore
from unifs.filestore.local import LocalFileStore
from unifs.filestore.pipe import AsyncWriteSink, open_pipe
from unifs.filestore.rpc import HdfsFileStore
from unifs.filestore.types import FileStat
from unifs.filestore.webhdfs import WebHdfsFileStore

__all__ = [
    "FileStore",
    "FileStat",
    "LocalFileStore",
    "InMemoryFileStore",
    "WebHdfsFileStore",
    "HdfsFileStore",
    "AsyncWriteSink",
    "open_pipe",
]
