"""
net — сетевой слой unifs.

Назначение:
- HTTP с повторами (http)
- нормализация адресов сервисов (url)
- клиент REST-API WebHDFS (webhdfs)
"""
from .http import request_with_retries  # noqa: F401
from .webhdfs import WebHdfsClient  # noqa: F401
