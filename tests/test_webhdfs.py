"""
Tests for the WebHDFS adapter (against a fake client) and the REST client
(against a fake requests session).
"""

import io

import pytest
import requests

from unifs.errors import BackendFailure, BackendNotConnected, NotADirectory, NotFound
from unifs.filestore import WebHdfsFileStore
from unifs.net.http import request_with_retries
from unifs.net.url import join, webhdfs_base
from unifs.net.webhdfs import WebHdfsClient


class FakeWebHdfs:
    """Keeps statuses and file bodies in dicts, like a tiny namenode."""

    def __init__(self):
        self.files = {}
        self.dirs = {"/"}
        self.created = []
        self.fail_create = None
        self.reject_mkdirs = False

    def _status(self, path):
        if path in self.dirs:
            return {"type": "DIRECTORY", "length": 0, "permission": "755",
                    "modificationTime": 1_700_000_000_000, "pathSuffix": path.rsplit("/", 1)[-1]}
        if path in self.files:
            return {"type": "FILE", "length": len(self.files[path]), "permission": "644",
                    "modificationTime": 1_700_000_123_456, "pathSuffix": path.rsplit("/", 1)[-1]}
        raise NotFound("File does not exist", op="GETFILESTATUS", path=path)

    def get_file_status(self, path):
        return self._status(path)

    def list_status(self, path):
        prefix = path.rstrip("/") + "/"
        names = [p for p in sorted(self.dirs | set(self.files)) if p.startswith(prefix) and p != path]
        return [self._status(p) for p in names if "/" not in p[len(prefix):]]

    def open(self, path):
        self._status(path)
        return io.BytesIO(self.files[path])

    def create(self, data, path, *, overwrite=True, permission=0o700):
        body = b"".join(data)
        if self.fail_create:
            raise self.fail_create
        self.files[path] = body
        self.created.append((path, overwrite, permission))

    def mkdirs(self, path, permission=0o777):
        if self.reject_mkdirs:
            return False
        parts = [p for p in path.split("/") if p]
        for i in range(1, len(parts) + 1):
            self.dirs.add("/" + "/".join(parts[:i]))
        return True


@pytest.fixture
def fake():
    return FakeWebHdfs()


@pytest.fixture
def store(fake):
    return WebHdfsFileStore(fake, close_timeout=5)


class TestWebHdfsFileStore:
    @pytest.mark.parametrize("op", ["create", "open", "stat", "readdir", "mkdir", "exists"])
    def test_not_connected(self, op):
        store = WebHdfsFileStore()
        assert store.connected is False
        with pytest.raises(BackendNotConnected):
            getattr(store, op)("/x")

    def test_push_style_create(self, store, fake):
        store.mkdir("/t")
        with store.create("/t/f") as w:
            w.write(b"Hello ")
            w.write(b"World!\n")

        assert fake.files["/t/f"] == b"Hello World!\n"
        assert fake.created == [("/t/f", True, 0o700)]
        assert store.read_bytes("/t/f") == b"Hello World!\n"

    def test_create_failure_reported_on_close(self, store, fake):
        fake.fail_create = BackendFailure("HTTP 403: AccessControlException", op="CREATE", path="/f")
        w = store.create("/f")
        w.write(b"data")
        with pytest.raises(BackendFailure, match="403"):
            w.close()

    def test_stat_normalizes_metadata(self, store, fake):
        fake.files["/t/f"] = b"12345"
        st = store.stat("/t/f")
        assert st.name == "f"
        assert st.size == 5
        assert st.mode == 0o644
        assert st.mtime == pytest.approx(1_700_000_123.456)
        assert not st.is_dir

    def test_readdir(self, store, fake):
        store.mkdir("/t/sub")
        fake.files["/t/f"] = b"x"
        entries = {e.name: e for e in store.readdir("/t")}
        assert sorted(entries) == ["f", "sub"]
        assert entries["sub"].is_dir
        assert entries["sub"].mode == 0o755

    def test_readdir_missing(self, store):
        with pytest.raises(NotFound):
            store.readdir("/missing")

    def test_readdir_on_file(self, store, fake):
        fake.files["/f"] = b"x"
        with pytest.raises(NotADirectory):
            store.readdir("/f")

    def test_rejected_mkdir(self, store, fake):
        fake.reject_mkdirs = True
        with pytest.raises(BackendFailure, match="rejected"):
            store.mkdir("/t")
        assert not store.exists("/t")

    def test_exists(self, store, fake):
        fake.files["/f"] = b"x"
        assert store.exists("/f") is True
        assert store.exists("/nope") is False


class FakeResponse:
    def __init__(self, status_code=200, json_body=None, headers=None, text=""):
        self.status_code = status_code
        self._json = json_body
        self.headers = headers or {}
        self.text = text
        self.raw = io.BytesIO(text.encode())

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError("no json")
        return self._json


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def _next(self, method, url, kwargs):
        self.calls.append((method, url, kwargs))
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def request(self, method, url, **kwargs):
        return self._next(method, url, kwargs)

    def put(self, url, **kwargs):
        data = kwargs.get("data")
        if data is not None and not isinstance(data, (bytes, str)):
            kwargs["data"] = b"".join(data)
        return self._next("PUT", url, kwargs)


def make_client(responses):
    session = FakeSession(responses)
    return WebHdfsClient("localhost:50070", "alice", backoff=0, session=session), session


class TestWebHdfsClient:
    @pytest.mark.parametrize(
        "addr",
        ["localhost:50070", "http://localhost:50070/", "localhost:50070/webhdfs/v1/"],
    )
    def test_base_url(self, addr):
        assert webhdfs_base(addr) == "http://localhost:50070/webhdfs/v1"

    def test_join_quotes_path(self):
        assert join("http://h:1/webhdfs/v1", "/a b/c") == "http://h:1/webhdfs/v1/a%20b/c"

    def test_empty_address(self):
        with pytest.raises(ValueError):
            webhdfs_base("")

    def test_get_file_status(self):
        client, session = make_client([FakeResponse(json_body={"FileStatus": {"type": "FILE", "length": 3}})])
        assert client.get_file_status("/f")["length"] == 3

        method, url, kwargs = session.calls[0]
        assert (method, url) == ("GET", "http://localhost:50070/webhdfs/v1/f")
        assert kwargs["params"] == {"op": "GETFILESTATUS", "user.name": "alice"}

    def test_remote_not_found(self):
        body = {"RemoteException": {"exception": "FileNotFoundException", "message": "File does not exist: /f"}}
        client, _ = make_client([FakeResponse(404, json_body=body)])
        with pytest.raises(NotFound, match="File does not exist"):
            client.get_file_status("/f")

    def test_remote_failure(self):
        body = {"RemoteException": {"exception": "AccessControlException", "message": "Permission denied"}}
        client, _ = make_client([FakeResponse(403, json_body=body)])
        with pytest.raises(BackendFailure, match="AccessControlException"):
            client.list_status("/")

    def test_retries_transient_errors(self):
        client, session = make_client(
            [
                requests.ConnectionError("refused"),
                FakeResponse(503, text="busy"),
                FakeResponse(json_body={"FileStatuses": {"FileStatus": []}}),
            ]
        )
        assert client.list_status("/") == []
        assert len(session.calls) == 3

    def test_gives_up_after_retries(self):
        client, _ = make_client([requests.ConnectionError("refused")] * 3)
        with pytest.raises(BackendFailure, match="ConnectionError"):
            client.check_connection()

    def test_create_follows_redirect_with_data(self):
        client, session = make_client(
            [
                FakeResponse(307, headers={"Location": "http://datanode:50075/webhdfs/v1/f?op=CREATE"}),
                FakeResponse(201),
            ]
        )
        client.create(iter([b"ab", b"c"]), "/f", permission=0o700)

        first, second = session.calls
        assert first[2]["params"]["op"] == "CREATE"
        assert first[2]["params"]["permission"] == "700"
        assert first[2]["params"]["overwrite"] == "true"
        assert first[2]["allow_redirects"] is False
        assert second[1] == "http://datanode:50075/webhdfs/v1/f?op=CREATE"
        assert second[2]["data"] == b"abc"

    def test_mkdirs(self):
        client, session = make_client([FakeResponse(json_body={"boolean": True})])
        assert client.mkdirs("/a/b") is True
        assert session.calls[0][2]["params"]["op"] == "MKDIRS"

    def test_mkdirs_reports_rejection(self):
        client, _ = make_client([FakeResponse(json_body={"boolean": False})])
        assert client.mkdirs("/a/b") is False

    def test_no_attempts_is_an_error(self):
        session = FakeSession([])
        with pytest.raises(RuntimeError):
            request_with_retries(session, "GET", "http://h/x", retries=-1)
        assert session.calls == []
