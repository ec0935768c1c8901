"""
http — HTTP-утилиты unifs поверх requests.

Требования:
- идемпотентные запросы повторяются с backoff (retries + 1 попыток)
- 4xx не повторяются: ответ сервера и так однозначен
- ошибки транспорта после исчерпания попыток пробрасываются как есть,
  перевод в unifs.errors делает вызывающий клиент
"""

from __future__ import annotations

import logging
import time

import requests

logger = logging.getLogger(__name__)

RETRY_STATUSES = frozenset({500, 502, 503, 504})


def request_with_retries(
    session: requests.Session,
    method: str,
    url: str,
    *,
    timeout: float = 60,
    retries: int = 2,
    backoff: float = 0.5,
    **kwargs,
) -> requests.Response:
    """Выполняет запрос; при сетевой ошибке или 5xx повторяет с нарастающей паузой."""
    last_exc: requests.RequestException | None = None
    response: requests.Response | None = None

    for attempt in range(retries + 1):
        try:
            response = session.request(method, url, timeout=timeout, **kwargs)
            if response.status_code not in RETRY_STATUSES:
                return response
            logger.debug("%s %s -> HTTP %s (attempt %d)", method, url, response.status_code, attempt + 1)
        except (requests.ConnectionError, requests.Timeout) as e:
            last_exc = e
            logger.debug("%s %s failed: %s (attempt %d)", method, url, e, attempt + 1)

        if attempt < retries:
            time.sleep(backoff * (attempt + 1))

    if response is not None:
        return response
    if last_exc is None:
        raise RuntimeError(f"{method} {url}: no attempt was made (retries={retries})")
    raise last_exc
