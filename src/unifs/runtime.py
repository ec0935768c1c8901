"""
runtime — единственная точка, где собирается маршрутизатор процесса:
- какие адаптеры обслуживают local/inmem/webhdfs/hdfs
- подключены ли удалённые бэкенды (hookup_hdfs)

Код, работающий с путями, не создаёт адаптеры сам: берёт get_router()
или получает FileRouter параметром.
"""

from __future__ import annotations

import getpass
import logging

from unifs.config import Settings
from unifs.errors import BackendFailure
from unifs.filestore import HdfsFileStore, InMemoryFileStore, LocalFileStore, WebHdfsFileStore
from unifs.router import Backend, FileRouter

logger = logging.getLogger(__name__)

_ROUTER: FileRouter | None = None


def build_router(settings: Settings | None = None) -> FileRouter:
    """Собирает новый маршрутизатор (удалённые бэкенды — не подключены)."""
    s = settings or Settings.from_env()
    stores = {
        Backend.LOCAL: LocalFileStore(root=s.local_root),
        Backend.INMEM: InMemoryFileStore(auto_parents=s.inmem_auto_parents),
        Backend.WEBHDFS: WebHdfsFileStore(
            write_timeout=s.pipe_timeout,
            close_timeout=s.pipe_timeout,
            idle_timeout=s.pipe_timeout,
            http_timeout=s.http_timeout,
        ),
        Backend.HDFS: HdfsFileStore(),
    }
    return FileRouter(stores, prefixes=s.prefixes)


def get_router(force_reload: bool = False) -> FileRouter:
    """Возвращает маршрутизатор процесса. Кэшируется на время процесса."""
    global _ROUTER
    if _ROUTER is None or force_reload:
        settings = Settings.from_env()
        _ROUTER = build_router(settings)
        if settings.namenode or settings.webhdfs:
            try:
                hookup_hdfs(settings.namenode, settings.webhdfs, settings.hdfs_user, router=_ROUTER)
            except BackendFailure as e:
                # Без подключения удалённые операции поднимут BackendNotConnected.
                logger.warning("HDFS hookup from environment failed: %s", e)
    return _ROUTER


def get_inmem(router: FileRouter | None = None) -> InMemoryFileStore:
    store = (router or get_router()).store(Backend.INMEM)
    if not isinstance(store, InMemoryFileStore):
        raise TypeError(f"in-memory backend is served by {type(store).__name__}, not InMemoryFileStore")
    return store


def hookup_hdfs(
    namenode: str,
    webapi: str,
    user: str | None = None,
    *,
    router: FileRouter | None = None,
) -> None:
    """Подключает HDFS по нативному RPC (namenode) и по WebHDFS (webapi).

    Пустой адрес — протокол пропускается. Пустой user — текущий пользователь ОС.
    Ошибки обоих протоколов собираются и поднимаются вместе одним BackendFailure;
    успешно подключённый протокол при этом остаётся подключённым.
    """
    r = router or get_router()
    errors: list[str] = []

    if not user:
        try:
            user = getpass.getuser()
        except (KeyError, OSError) as e:
            errors.append(f"Unknown current user: {e}")
            user = ""

    if namenode:
        rpc = r.store(Backend.HDFS)
        try:
            rpc.connect(namenode, user)
        except (ImportError, OSError) as e:
            errors.append(f"Cannot establish RPC connection to {user}@{namenode}: {e}")

    if webapi:
        web = r.store(Backend.WEBHDFS)
        logger.info("Establish WebHDFS connection as %s@%s", user, webapi)
        try:
            web.connect(webapi, user)
        except (ValueError, OSError) as e:
            errors.append(f"Cannot establish WebHDFS connection to {user}@{webapi}: {e}")

    if errors:
        raise BackendFailure("; ".join(errors), op="hookup")
