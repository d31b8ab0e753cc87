"""Низкоуровневый HTTP-слой поверх aiohttp.

HttpConnection отправляет один запрос и возвращает сырой ответ.
Статусы ответа здесь не интерпретируются: этим занимается Transport
и SessionManager.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

import aiohttp

from reddiopay.exceptions import ReddioPayException, ReddioPayNetworkException

logger = logging.getLogger(__name__)
logger.setLevel(level=logging.DEBUG)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


@dataclass(frozen=True)
class HttpResponse:
    """Сырой HTTP-ответ.

    Attributes:
        status: HTTP статус
        text: Тело ответа как текст
        reason: Текстовое пояснение статуса
    """

    status: int
    text: str
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Декодировать тело как JSON.

        Returns:
            Декодированное тело или None для пустого тела

        Raises:
            ValueError: Если тело не является JSON
        """
        if not self.text.strip():
            return None
        return json.loads(self.text)

    def upstream_message(self) -> str:
        """Извлечь сообщение об ошибке, которое прислал сервис."""
        try:
            payload = self.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            for key in ("message", "error"):
                value = payload.get(key)
                if value:
                    return str(value)
        if self.text.strip():
            return self.text.strip()
        return self.reason or f"HTTP {self.status}"


class HttpConnection:
    """Обёртка над aiohttp.ClientSession для одного базового URL.

    Сессия создаётся лениво при первом запросе и пересоздаётся,
    если была закрыта.
    """

    def __init__(self, base_url: str, timeout_seconds: float) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: aiohttp.ClientSession | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                headers=DEFAULT_HEADERS,
            )
        return self._session

    async def send(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """Отправить запрос и вернуть сырой ответ.

        Args:
            method: HTTP метод
            path: Путь относительно базового URL (начинается с "/")
            json_body: Тело запроса, сериализуется в JSON
            params: Query-параметры
            headers: Дополнительные заголовки

        Returns:
            HttpResponse с любым статусом

        Raises:
            ReddioPayNetworkException: Ответ не получен
            ReddioPayException: Тело запроса не сериализуется в JSON
        """
        try:
            data = json.dumps(json_body) if json_body is not None else None
        except (TypeError, ValueError) as exc:
            raise ReddioPayException(
                f"Не удалось сериализовать тело запроса: {exc}",
                original_error=exc,
            ) from exc

        url = f"{self._base_url}{path}"
        query = {key: str(value) for key, value in (params or {}).items()}
        logger.debug("HTTP %s %s query=%s", method, url, query)

        session = self._get_session()
        try:
            async with session.request(
                method, url, data=data, params=query or None, headers=headers
            ) as response:
                text = await response.text()
                logger.debug("HTTP %s %s -> %d", method, url, response.status)
                return HttpResponse(
                    status=response.status, text=text, reason=response.reason
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("Сетевая ошибка %s %s: %r", method, url, exc)
            raise ReddioPayNetworkException(
                f"Network request failed: {method} {path}: {exc!r}",
                original_error=exc,
            ) from exc

    async def close(self) -> None:
        """Закрыть HTTP сессию. Повторный вызов безопасен."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
