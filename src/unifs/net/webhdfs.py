"""
webhdfs — клиент REST-API WebHDFS (протокол A).

Назначение:
- дать ровно те глаголы, которые нужны адаптеру: статус, листинг, чтение,
  создание (push-style), mkdirs
- перевести ответы сервера в unifs.errors

Важно:
- create принимает готовый поток-источник (data) и блокирует, пока поток не исчерпан:
  это и есть push-style create, ради которого существует unifs.filestore.pipe
- создание двухшаговое: namenode отвечает 307 с адресом datanode, данные идут туда
"""

from __future__ import annotations

import logging
from typing import Any, BinaryIO

import requests

from unifs.errors import BackendFailure, NotFound
from unifs.net.http import request_with_retries
from unifs.net.url import join, webhdfs_base

logger = logging.getLogger(__name__)

_NOT_FOUND_EXCEPTIONS = ("FileNotFoundException",)


class WebHdfsClient:
    """Клиент WebHDFS.

    Args:
        addr: адрес HTTP-API namenode ("localhost:50070" или полный URL).
        user: имя пользователя HDFS (user.name).
        timeout / retries / backoff: параметры повторов для чтения.
        session: готовая requests.Session (например, с авторизацией).
    """

    def __init__(
        self,
        addr: str,
        user: str,
        *,
        timeout: float = 60,
        retries: int = 2,
        backoff: float = 0.5,
        session: requests.Session | None = None,
    ):
        self.base_url = webhdfs_base(addr)
        self.user = user
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff
        self._session = session or requests.Session()

    def _url(self, path: str) -> str:
        return join(self.base_url, path)

    def _params(self, op: str, **extra: Any) -> dict[str, Any]:
        params: dict[str, Any] = {"op": op}
        if self.user:
            params["user.name"] = self.user
        params.update(extra)
        return params

    def _get(self, op: str, path: str, **kwargs) -> requests.Response:
        try:
            r = request_with_retries(
                self._session,
                "GET",
                self._url(path),
                params=self._params(op),
                timeout=self.timeout,
                retries=self.retries,
                backoff=self.backoff,
                **kwargs,
            )
        except requests.RequestException as e:
            raise BackendFailure(f"{type(e).__name__}: {e}", op=op, path=path) from e
        _check(r, op, path)
        return r

    # --- Глаголы ---

    def get_file_status(self, path: str) -> dict[str, Any]:
        return self._get("GETFILESTATUS", path).json()["FileStatus"]

    def list_status(self, path: str) -> list[dict[str, Any]]:
        return self._get("LISTSTATUS", path).json()["FileStatuses"]["FileStatus"]

    def open(self, path: str) -> BinaryIO:
        """Открывает файл потоком (ответ читается по мере чтения)."""
        r = self._get("OPEN", path, stream=True)
        r.raw.decode_content = True
        return r.raw

    def create(
        self,
        data: Any,
        path: str,
        *,
        overwrite: bool = True,
        permission: int = 0o700,
    ) -> None:
        """Создаёт файл из потока data. Блокирует до конца передачи."""
        params = self._params("CREATE", overwrite=str(overwrite).lower(), permission=f"{permission:o}")
        try:
            r = self._session.put(self._url(path), params=params, allow_redirects=False, timeout=self.timeout)
            if r.status_code in (301, 302, 303, 307, 308):
                location = r.headers["Location"]
            else:
                _check(r, "CREATE", path)
                location = r.json()["Location"]  # вариант noredirect=true
            # Таймаут только на соединение: передача длится, пока пишет вызывающий код.
            r = self._session.put(location, data=data, timeout=(self.timeout, None))
        except requests.RequestException as e:
            raise BackendFailure(f"{type(e).__name__}: {e}", op="CREATE", path=path) from e
        _check(r, "CREATE", path)
        logger.debug("webhdfs created %s", path)

    def mkdirs(self, path: str, permission: int = 0o777) -> bool:
        params = self._params("MKDIRS", permission=f"{permission:o}")
        try:
            r = self._session.put(self._url(path), params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise BackendFailure(f"{type(e).__name__}: {e}", op="MKDIRS", path=path) from e
        _check(r, "MKDIRS", path)
        return bool(r.json().get("boolean", False))

    def check_connection(self) -> None:
        """Проверяет связь листингом корня."""
        self.list_status("/")
        logger.info("Connected to WebHDFS %s. OK.", self.base_url)

    def __repr__(self) -> str:
        return f"WebHdfsClient(base_url={self.base_url!r}, user={self.user!r})"


def _check(r: requests.Response, op: str, path: str) -> None:
    if r.ok:
        return
    exc_name, message = _remote_exception(r)
    if r.status_code == 404 or exc_name in _NOT_FOUND_EXCEPTIONS:
        raise NotFound(message or "file does not exist", op=op, path=path)
    raise BackendFailure(f"HTTP {r.status_code}: {exc_name or ''} {message}".strip(), op=op, path=path)


def _remote_exception(r: requests.Response) -> tuple[str, str]:
    try:
        body = r.json()
    except ValueError:
        return "", r.text[:200] if r.text else ""
    remote = body.get("RemoteException", {}) if isinstance(body, dict) else {}
    return str(remote.get("exception", "")), str(remote.get("message", ""))
