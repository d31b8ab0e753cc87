"""Менеджер сессии для Reddio Pay API.

Обменивает API-ключ на access/refresh токены и держит их в памяти.
Токен обновляется двумя способами:
- проактивно, фоновой задачей раз в refresh_interval секунд;
- реактивно, по запросу Transport после ответа 401.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum

from reddiopay.config_reader import ResolvedConfig
from reddiopay.exceptions import ReddioPayAuthException, ReddioPayException
from reddiopay.http_connection import HttpConnection

logger = logging.getLogger(__name__)
logger.setLevel(level=logging.DEBUG)

LOGIN_PATH = "/accounts/apikeys/login"

# Период проактивного обновления, короче предполагаемого срока жизни токена
DEFAULT_REFRESH_INTERVAL = 55 * 60

SleepFunc = Callable[[float], Awaitable[None]]


class SessionState(str, Enum):
    """Состояние аутентификации сессии."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    REFRESHING = "refreshing"


def mask_token(token: str | None) -> str:
    """Обрезать токен для логов."""
    if not token:
        return "<none>"
    return f"{token[:20]}..."


class SessionManager:
    """Владелец жизненного цикла аутентификации одного клиента.

    Токены заменяются целиком одним присваиванием, поэтому читающие
    корутины никогда не видят частично обновлённую сессию.
    Одновременно существует не более одной фоновой задачи обновления.
    """

    def __init__(
        self,
        config: ResolvedConfig,
        connection: HttpConnection,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Инициализация менеджера сессии.

        Args:
            config: Разрешённая конфигурация клиента
            connection: HTTP-соединение для запроса login
            refresh_interval: Период фонового обновления, секунды
            sleep: Корутина ожидания (подменяется в тестах)
        """
        self._config = config
        self._connection = connection
        self._refresh_interval = refresh_interval
        self._sleep = sleep

        self._access_token: str | None = None
        self._refresh_token: str | None = None
        self._state = SessionState.UNAUTHENTICATED
        self._token_version = 0
        # Увеличивается в destroy(); login, начатый до destroy, не сохраняется
        self._generation = 0
        self._refresh_task: asyncio.Task[None] | None = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def refresh_token(self) -> str | None:
        return self._refresh_token

    @property
    def has_refresh_token(self) -> bool:
        return bool(self._refresh_token)

    @property
    def token_version(self) -> int:
        return self._token_version

    @property
    def is_refresh_scheduled(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    def current_token(self) -> str | None:
        """Текущий access токен или None. Не блокирует."""
        return self._access_token

    async def _login(self) -> tuple[str, str | None]:
        """Обменять API-ключ на токены.

        Returns:
            Пара (access_token, refresh_token)

        Raises:
            ReddioPayAuthException: При любой ошибке получения токена
        """
        try:
            response = await self._connection.send(
                "POST",
                LOGIN_PATH,
                json_body={"api_key": self._config.api_key.get_secret_value()},
            )
        except ReddioPayException as exc:
            raise ReddioPayAuthException(
                f"Authentication failed: {exc}", original_error=exc
            ) from exc

        if not response.ok:
            message = response.upstream_message()
            logger.error("Ошибка аутентификации: %d %s", response.status, message)
            raise ReddioPayAuthException(
                f"Authentication failed ({response.status}): {message}",
                status=response.status,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ReddioPayAuthException(
                "Authentication failed: ответ login не является JSON",
                status=response.status,
                original_error=exc,
            ) from exc

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not access_token:
            raise ReddioPayAuthException(
                "Authentication failed: в ответе нет access_token",
                status=response.status,
            )
        return access_token, payload.get("refresh_token") or None

    async def authenticate(self) -> str:
        """Получить новые токены по API-ключу.

        При успехе запускает фоновое обновление, если оно ещё не запущено.
        Автоматических повторов при ошибке нет.

        Returns:
            Новый access токен

        Raises:
            ReddioPayAuthException: При ошибке получения токена
        """
        generation = self._generation
        had_session = self._access_token is not None
        self._state = (
            SessionState.REFRESHING if had_session else SessionState.AUTHENTICATING
        )
        logger.debug("Запрос токена (%s)", self._state.value)

        try:
            access_token, refresh_token = await self._login()
        except ReddioPayAuthException:
            if generation == self._generation:
                if had_session and self._access_token is not None:
                    # Неудачное обновление: прежние токены остаются в силе
                    self._state = SessionState.AUTHENTICATED
                else:
                    self._clear()
            raise

        if generation != self._generation:
            # destroy() был вызван, пока шёл запрос
            logger.debug("Сессия уничтожена во время login, токен отброшен")
            return access_token

        self._access_token = access_token
        self._refresh_token = refresh_token
        self._token_version += 1
        self._state = SessionState.AUTHENTICATED
        logger.info(
            "Токен получен (версия: %d): %s",
            self._token_version,
            mask_token(access_token),
        )
        self._start_refresh()
        return access_token

    async def reauthenticate(self, stale_token: str | None) -> str:
        """Обновить токен после 401.

        Если пока мы ждали lock токен уже обновила другая корутина,
        повторный login не выполняется.

        Args:
            stale_token: Токен, с которым был отправлен отклонённый запрос

        Returns:
            Актуальный access токен

        Raises:
            ReddioPayAuthException: При ошибке обновления токена
        """
        async with self._lock:
            current = self._access_token
            if current is not None and current != stale_token:
                logger.debug("Токен уже обновлён другой корутиной")
                return current
            logger.debug("Получена 401, обновляем токен")
            return await self.authenticate()

    def _start_refresh(self) -> None:
        if self.is_refresh_scheduled:
            return
        logger.debug(
            "Запуск фонового обновления токена (каждые %s с)", self._refresh_interval
        )
        self._refresh_task = asyncio.create_task(self._refresh_loop())

    async def _refresh_loop(self) -> None:
        while True:
            await self._sleep(self._refresh_interval)
            try:
                await self.authenticate()
            except ReddioPayException as exc:
                # Следующий 401 обновит токен реактивно
                logger.warning("Фоновое обновление токена не удалось: %s", exc)

    def _clear(self) -> None:
        self._access_token = None
        self._refresh_token = None
        self._state = SessionState.UNAUTHENTICATED

    def destroy(self) -> None:
        """Остановить фоновое обновление и очистить сессию.

        Повторный вызов безопасен. Запросы, которые уже в полёте,
        не прерываются.
        """
        self._generation += 1
        task = self._refresh_task
        self._refresh_task = None
        if task is not None and not task.done():
            task.cancel()
            logger.debug("Фоновое обновление токена остановлено")
        self._clear()
