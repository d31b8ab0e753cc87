"""Единый HTTP-диспетчер Reddio Pay API.

Добавляет Bearer токен к каждому запросу, классифицирует ошибки
и при 401 выполняет ровно один цикл "обновить токен и повторить".
"""

import logging
from enum import Enum
from typing import Any

from reddiopay.exceptions import (
    ReddioPayAuthException,
    ReddioPayException,
    ReddioPayServiceException,
    ReddioPayValidationException,
)
from reddiopay.http_connection import HttpConnection, HttpResponse
from reddiopay.session_manager import SessionManager, mask_token

logger = logging.getLogger(__name__)
logger.setLevel(level=logging.DEBUG)

ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "DELETE"})


class FailureAction(str, Enum):
    """Что делать с ответом не из 2xx."""

    RETRY_AFTER_REFRESH = "retry_after_refresh"
    RAISE_AUTH = "raise_auth"
    RAISE_SERVICE = "raise_service"


# (статус == 401, есть refresh токен, первая попытка) -> действие
_DECISION_TABLE: dict[tuple[bool, bool, bool], FailureAction] = {
    (True, True, True): FailureAction.RETRY_AFTER_REFRESH,
    (True, False, True): FailureAction.RAISE_AUTH,
    (False, True, True): FailureAction.RAISE_SERVICE,
    (False, False, True): FailureAction.RAISE_SERVICE,
    # Повтор после обновления токена не удался: дальше не повторяем
    (True, True, False): FailureAction.RAISE_AUTH,
    (True, False, False): FailureAction.RAISE_AUTH,
    (False, True, False): FailureAction.RAISE_AUTH,
    (False, False, False): FailureAction.RAISE_AUTH,
}


def classify_failure(
    status: int, has_refresh_token: bool, attempt: int
) -> FailureAction:
    """Классифицировать неуспешный ответ.

    Args:
        status: HTTP статус ответа
        has_refresh_token: Есть ли refresh токен в сессии
        attempt: Номер попытки, начиная с 0

    Returns:
        Действие из FailureAction
    """
    return _DECISION_TABLE[(status == 401, has_refresh_token, attempt == 0)]


class Transport:
    """HTTP-диспетчер с авторизацией и retry при 401.

    Запросы не ставятся в очередь и не кэшируются: каждый вызов
    независим и делает не более одного повтора.
    """

    def __init__(self, connection: HttpConnection, session: SessionManager) -> None:
        self._connection = connection
        self._session = session

    @property
    def base_url(self) -> str:
        return self._connection.base_url

    def _auth_headers(self, token: str | None) -> dict[str, str]:
        if token is None:
            return {}
        logger.debug("Authorization: Bearer %s", mask_token(token))
        return {"Authorization": f"Bearer {token}"}

    @staticmethod
    def _decode(method: str, path: str, response: HttpResponse) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ReddioPayException(
                f"Не удалось разобрать JSON ответа {method} {path}: {response.text!r}",
                status=response.status,
                original_error=exc,
            ) from exc

    @staticmethod
    def _build_error(
        action: FailureAction, response: HttpResponse, attempt: int
    ) -> ReddioPayException:
        message = response.upstream_message()
        if action is FailureAction.RAISE_AUTH:
            if attempt > 0:
                message = (
                    f"Request failed after token refresh "
                    f"({response.status}): {message}"
                )
            return ReddioPayAuthException(message)
        return ReddioPayServiceException(
            f"Request failed with status code {response.status}: {message}",
            status=response.status,
            upstream_message=message,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        query: dict[str, Any] | None = None,
    ) -> Any:
        """Выполнить запрос к API.

        Args:
            method: GET, POST, PUT или DELETE
            path: Путь относительно базового URL
            body: Тело запроса (JSON)
            query: Query-параметры

        Returns:
            Декодированное тело ответа без изменений

        Raises:
            ReddioPayAuthException: 401 без refresh токена или неудачный повтор
            ReddioPayServiceException: Любой другой статус не из 2xx
            ReddioPayNetworkException: Ответ не получен
            ReddioPayValidationException: Неподдерживаемый HTTP метод
            ReddioPayException: Ошибка сериализации запроса или ответа
        """
        method = method.upper()
        if method not in ALLOWED_METHODS:
            raise ReddioPayValidationException(f"Неподдерживаемый HTTP метод: {method}")

        attempt = 0
        while True:
            token = self._session.current_token()
            logger.debug("[API CALL] %s %s (попытка %d)", method, path, attempt + 1)
            response = await self._connection.send(
                method,
                path,
                json_body=body,
                params=query,
                headers=self._auth_headers(token),
            )
            if response.ok:
                return self._decode(method, path, response)

            action = classify_failure(
                response.status, self._session.has_refresh_token, attempt
            )
            logger.debug("%s %s -> %d: %s", method, path, response.status, action.value)
            if action is FailureAction.RETRY_AFTER_REFRESH:
                await self._session.reauthenticate(token)
                attempt += 1
                continue

            error = self._build_error(action, response, attempt)
            logger.error("Ошибка API %s %s: %s", method, path, error)
            raise error

    async def get(self, path: str, query: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, query=query)

    async def post(self, path: str, body: Any = None) -> Any:
        return await self.request("POST", path, body=body)

    async def put(self, path: str, body: Any = None) -> Any:
        return await self.request("PUT", path, body=body)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)
