import pytest

from unifs.filestore import HdfsFileStore, InMemoryFileStore, LocalFileStore, WebHdfsFileStore
from unifs.router import Backend, FileRouter


@pytest.fixture
def inmem():
    return InMemoryFileStore()


@pytest.fixture
def router(inmem):
    return FileRouter(
        {
            Backend.LOCAL: LocalFileStore(),
            Backend.INMEM: inmem,
            Backend.WEBHDFS: WebHdfsFileStore(),
            Backend.HDFS: HdfsFileStore(),
        }
    )
