"""
pipe — асинхронная запись для push-style бэкендов.

Задача:
- некоторые клиенты (WebHDFS) создают файл одним блокирующим вызовом,
  которому нужен готовый поток-источник данных
- вызывающий же код хочет привычное "create -> write -> close"

Решение:
- внутрипроцессная однонаправленная труба (PipeReader/PipeWriter) с ограниченной очередью
- AsyncWriteSink запускает один фоновый поток: target(reader)
- результат фонового вызова живёт в Future и доставляется владельцу sink:
  ошибка всплывает на следующем write или на close, процесс не падает

Таймауты:
- write_timeout — сколько write ждёт, если фон перестал читать
- close_timeout — сколько close ждёт завершения фонового вызова
- idle_timeout — сколько reader ждёт данных; брошенный без close sink
  не держит фоновый поток вечно
"""

from __future__ import annotations

import concurrent.futures
import io
import logging
import queue
import threading
import time
from typing import Any, Callable, Iterator

from unifs.errors import BackendFailure, FileStoreError

logger = logging.getLogger(__name__)

_EOF = object()
_POLL = 0.05


class _PipeState:
    def __init__(self, capacity: int):
        self.chunks: queue.Queue = queue.Queue(maxsize=max(1, capacity))
        self.reader_closed = threading.Event()
        self.aborted = threading.Event()
        # кусков данных (без EOF) положено в трубу и получено из неё
        self.sent = 0
        self.received = 0


class PipeReader:
    """Читающий конец трубы. Поддерживает read() и итерацию по кускам."""

    def __init__(self, state: _PipeState, idle_timeout: float | None = None):
        self._state = state
        self._idle_timeout = idle_timeout
        self._pending = b""
        self._eof = False

    def _next_chunk(self) -> bytes | None:
        deadline = None if self._idle_timeout is None else time.monotonic() + self._idle_timeout
        while True:
            if self._state.aborted.is_set():
                raise BrokenPipeError("write side aborted")
            try:
                item = self._state.chunks.get(timeout=_POLL)
            except queue.Empty:
                if deadline is not None and time.monotonic() >= deadline:
                    raise TimeoutError(f"no data received for {self._idle_timeout}s")
                continue
            if item is _EOF:
                return None
            self._state.received += 1
            return item

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            parts = [self._pending]
            self._pending = b""
            while not self._eof:
                chunk = self._next_chunk()
                if chunk is None:
                    self._eof = True
                else:
                    parts.append(chunk)
            return b"".join(parts)

        while not self._pending and not self._eof:
            chunk = self._next_chunk()
            if chunk is None:
                self._eof = True
            else:
                self._pending = chunk
        out, self._pending = self._pending[:size], self._pending[size:]
        return out

    def __iter__(self) -> Iterator[bytes]:
        if self._pending:
            data, self._pending = self._pending, b""
            yield data
        while not self._eof:
            chunk = self._next_chunk()
            if chunk is None:
                self._eof = True
            else:
                yield chunk

    @property
    def undelivered(self) -> bool:
        """Остались ли записанные, но не прочитанные данные."""
        return bool(self._pending) or self._state.received < self._state.sent

    def close(self) -> None:
        self._state.reader_closed.set()

    @property
    def closed(self) -> bool:
        return self._state.reader_closed.is_set()


class PipeWriter:
    """Пишущий конец трубы."""

    def __init__(self, state: _PipeState, write_timeout: float | None = None):
        self._state = state
        self._write_timeout = write_timeout
        self.closed = False

    def _put(self, item: Any, timeout: float | None = None) -> None:
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            if self._state.reader_closed.is_set():
                raise BrokenPipeError("read side closed")
            try:
                self._state.chunks.put(item, timeout=_POLL)
                return
            except queue.Full:
                if deadline is not None and time.monotonic() >= deadline:
                    raise TimeoutError(f"reader did not drain the pipe within {timeout}s")

    def write(self, data: bytes) -> int:
        if self.closed:
            raise ValueError("write to closed pipe")
        if data:
            self._put(bytes(data), self._write_timeout)
            self._state.sent += 1
        return len(data)

    def close(self, timeout: float | None = None) -> None:
        """Сигнализирует EOF читающей стороне. timeout=None — ждать не дольше write_timeout."""
        if not self.closed:
            self.closed = True
            self._put(_EOF, self._write_timeout if timeout is None else timeout)

    def abort(self) -> None:
        self.closed = True
        self._state.aborted.set()


def open_pipe(
    capacity: int = 16,
    *,
    write_timeout: float | None = None,
    idle_timeout: float | None = None,
) -> tuple[PipeReader, PipeWriter]:
    """Создаёт трубу с очередью на capacity кусков."""
    state = _PipeState(capacity)
    return PipeReader(state, idle_timeout=idle_timeout), PipeWriter(state, write_timeout=write_timeout)


class AsyncWriteSink(io.RawIOBase):
    """Поток записи, данные которого фоновый поток отдаёт в target(reader).

    Args:
        target: блокирующий вызов бэкенда, принимающий источник данных.
        name: путь (для сообщений об ошибках и имени потока).
        capacity: размер очереди трубы (в кусках).
        write_timeout / close_timeout / idle_timeout: см. описание модуля.
    """

    def __init__(
        self,
        target: Callable[[PipeReader], Any],
        *,
        name: str = "",
        capacity: int = 16,
        write_timeout: float | None = None,
        close_timeout: float | None = None,
        idle_timeout: float | None = None,
    ):
        super().__init__()
        self.name = name
        self._close_timeout = close_timeout
        self._reader, self._writer = open_pipe(
            capacity, write_timeout=write_timeout, idle_timeout=idle_timeout
        )
        self._future: concurrent.futures.Future = concurrent.futures.Future()
        # Поток не держит ссылку на sink: брошенный sink собирается GC и отменяет передачу.
        self._thread = threading.Thread(
            target=_run,
            args=(target, self._reader, self._future, name),
            name=f"unifs-pipe:{name}",
            daemon=True,
        )
        self._thread.start()
        logger.debug("pipe started for %s", name)

    def _raise_if_failed(self, op: str) -> None:
        if not self._future.done():
            return
        exc = self._future.exception()
        if exc is None:
            return
        if isinstance(exc, FileStoreError):
            raise exc
        raise BackendFailure(f"background transfer failed: {exc}", op=op, path=self.name) from exc

    def writable(self) -> bool:
        return True

    def write(self, b) -> int:
        if self.closed:
            raise ValueError("write to closed file")
        self._raise_if_failed("write")
        data = bytes(b)
        try:
            return self._writer.write(data)
        except BrokenPipeError as e:
            # Фон закрыл трубу: ждём его исход, чтобы отдать настоящую причину.
            try:
                self._future.exception(timeout=self._close_timeout)
            except concurrent.futures.TimeoutError:
                pass
            self._raise_if_failed("write")
            raise BackendFailure("backend stopped reading", op="write", path=self.name) from e
        except TimeoutError as e:
            self.abort()
            raise BackendFailure(str(e), op="write", path=self.name) from e

    def close(self) -> None:
        """Отдаёт EOF и ждёт завершения фонового вызова, поднимая его ошибку.

        close_timeout ограничивает всё закрытие целиком: и постановку EOF
        в заполненную очередь, и ожидание фонового вызова.
        """
        if self.closed:
            return
        deadline = None if self._close_timeout is None else time.monotonic() + self._close_timeout
        try:
            try:
                self._writer.close(timeout=self._close_timeout)
            except BrokenPipeError:
                # Исход фонового вызова ниже объяснит, что случилось.
                pass
            except TimeoutError as e:
                self._writer.abort()
                raise BackendFailure(
                    f"backend did not finish: {e}", op="close", path=self.name
                ) from e
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            try:
                # exception() поднимает TimeoutError только по истечении ожидания,
                # TimeoutError самого фонового вызова возвращается значением.
                self._future.exception(timeout=remaining)
            except concurrent.futures.TimeoutError as e:
                self._writer.abort()
                raise BackendFailure(
                    f"backend did not finish within {self._close_timeout}s", op="close", path=self.name
                ) from e
            self._raise_if_failed("close")
            if self._reader.undelivered:
                raise BackendFailure(
                    "backend finished before consuming all written data", op="close", path=self.name
                )
        finally:
            super().close()

    def abort(self) -> None:
        """Отменяет передачу: фоновый вызов получит BrokenPipeError."""
        if self.closed:
            return
        self._writer.abort()
        super().close()
        logger.debug("pipe aborted for %s", self.name)

    @property
    def result(self) -> Any:
        """Возвращаемое значение фонового вызова (после close)."""
        return self._future.result(timeout=0)

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.abort()
        else:
            self.close()

    def __del__(self) -> None:
        # Брошенный без close sink: отмена, а не фиксация недописанных данных.
        if hasattr(self, "_writer") and not self.closed:
            self.abort()


def _run(
    target: Callable[[PipeReader], Any],
    reader: PipeReader,
    future: concurrent.futures.Future,
    name: str,
) -> None:
    if not future.set_running_or_notify_cancel():
        return
    try:
        result = target(reader)
    except Exception as e:
        logger.warning("background write to %s failed: %s", name, e)
        reader.close()
        future.set_exception(e)
    else:
        reader.close()
        future.set_result(result)
        logger.debug("pipe finished for %s", name)
