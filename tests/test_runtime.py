"""
Tests for settings, router assembly and HDFS hookup.
"""

import pytest

from unifs import runtime
from unifs.config import Settings
from unifs.errors import BackendFailure, BackendNotConnected
from unifs.filestore import HdfsFileStore, InMemoryFileStore, LocalFileStore, WebHdfsFileStore
from unifs.router import Backend, FileRouter, Prefixes


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("UNIFS_NAMENODE", "UNIFS_WEBHDFS", "UNIFS_HDFS_USER", "UNIFS_LOCAL_ROOT",
                "UNIFS_INMEM_AUTO_PARENTS", "UNIFS_PIPE_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(runtime, "_ROUTER", None)


class TestSettings:
    def test_defaults(self):
        s = Settings.from_env({})
        assert s.namenode == ""
        assert s.inmem_auto_parents is False
        assert s.pipe_timeout is None
        assert s.prefixes == Prefixes()

    def test_from_env(self):
        s = Settings.from_env(
            {
                "UNIFS_NAMENODE": "nn:9000",
                "UNIFS_WEBHDFS": "nn:50070",
                "UNIFS_INMEM_AUTO_PARENTS": "1",
                "UNIFS_PIPE_TIMEOUT": "30",
                "UNIFS_INMEM_PREFIX": "/mem/",
            }
        )
        assert (s.namenode, s.webhdfs) == ("nn:9000", "nn:50070")
        assert s.inmem_auto_parents is True
        assert s.pipe_timeout == 30.0
        assert s.prefixes.inmem == "/mem/"


class TestRouterAssembly:
    def test_build_router(self):
        router = runtime.build_router(Settings(inmem_auto_parents=True))
        store = router.store(Backend.INMEM)
        assert isinstance(store, InMemoryFileStore)
        assert store.auto_parents is True
        with pytest.raises(BackendNotConnected):
            router.stat("/webfs/x")

    def test_get_router_is_cached(self):
        router = runtime.get_router()
        assert runtime.get_router() is router
        assert runtime.get_router(force_reload=True) is not router

    def test_get_inmem(self):
        router = runtime.build_router(Settings())
        assert runtime.get_inmem(router) is router.store(Backend.INMEM)

    def test_get_inmem_rejects_foreign_store(self):
        router = FileRouter({Backend.INMEM: LocalFileStore()})
        with pytest.raises(TypeError):
            runtime.get_inmem(router)


class TestHookup:
    def test_errors_from_both_protocols_are_collected(self, monkeypatch):
        def fail_rpc(self, namenode, user):
            raise OSError("libhdfs not found")

        def fail_web(self, addr, user, **kw):
            raise BackendFailure("ConnectionError: refused")

        monkeypatch.setattr(HdfsFileStore, "connect", fail_rpc)
        monkeypatch.setattr(WebHdfsFileStore, "connect", fail_web)

        router = runtime.build_router(Settings())
        with pytest.raises(BackendFailure) as exc_info:
            runtime.hookup_hdfs("nn:9000", "nn:50070", "alice", router=router)
        message = str(exc_info.value)
        assert "libhdfs not found" in message
        assert "refused" in message

    def test_successful_protocol_stays_connected(self, monkeypatch):
        def fail_rpc(self, namenode, user):
            raise ImportError("pyarrow missing")

        def ok_web(self, addr, user, **kw):
            self._client = object()

        monkeypatch.setattr(HdfsFileStore, "connect", fail_rpc)
        monkeypatch.setattr(WebHdfsFileStore, "connect", ok_web)

        router = runtime.build_router(Settings())
        with pytest.raises(BackendFailure, match="pyarrow missing"):
            runtime.hookup_hdfs("nn:9000", "nn:50070", "alice", router=router)
        assert router.store(Backend.WEBHDFS).connected
        assert not router.store(Backend.HDFS).connected

    def test_empty_user_means_current_user(self, monkeypatch):
        seen = []
        monkeypatch.setattr(runtime.getpass, "getuser", lambda: "bob")
        monkeypatch.setattr(WebHdfsFileStore, "connect", lambda self, addr, user, **kw: seen.append(user))

        router = runtime.build_router(Settings())
        runtime.hookup_hdfs("", "nn:50070", "", router=router)
        assert seen == ["bob"]

    def test_empty_addresses_skip_protocols(self, monkeypatch):
        router = runtime.build_router(Settings())
        runtime.hookup_hdfs("", "", "alice", router=router)
        assert not router.store(Backend.HDFS).connected
        assert not router.store(Backend.WEBHDFS).connected

    def test_env_hookup_failure_does_not_break_get_router(self, monkeypatch):
        monkeypatch.setenv("UNIFS_WEBHDFS", "nn:50070")
        monkeypatch.setattr(
            WebHdfsFileStore, "connect", lambda self, addr, user, **kw: (_ for _ in ()).throw(OSError("down"))
        )
        router = runtime.get_router(force_reload=True)
        assert not router.store(Backend.WEBHDFS).connected
