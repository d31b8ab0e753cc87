"""Фасад Reddio Pay API.

Каждый экземпляр клиента владеет собственной сессией: глобальных
синглтонов нет.

Использование:
    async with ReddioPayClient({"api_key": "...", "environment": "dev"}) as client:
        products = await client.product.list_products()
"""

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any

from pydantic import ValidationError

from reddiopay.config_reader import (
    ReddioPayConfig,
    ResolvedConfig,
    get_reddiopay_config,
    resolve_config,
)
from reddiopay.exceptions import ReddioPayValidationException
from reddiopay.http_connection import HttpConnection
from reddiopay.resources import AccountApi, PaymentApi, ProductApi, TokenApi
from reddiopay.session_manager import (
    DEFAULT_REFRESH_INTERVAL,
    SessionManager,
    SleepFunc,
)
from reddiopay.transport import Transport

logger = logging.getLogger(__name__)
logger.setLevel(level=logging.DEBUG)


def build_config(config: ReddioPayConfig | Mapping[str, Any]) -> ReddioPayConfig:
    """Привести пользовательскую конфигурацию к ReddioPayConfig.

    Raises:
        ReddioPayValidationException: Конфигурация некорректна
    """
    if not isinstance(config, ReddioPayConfig):
        try:
            config = ReddioPayConfig.model_validate(dict(config))
        except ValidationError as exc:
            raise ReddioPayValidationException(
                f"Некорректная конфигурация клиента: {exc}", original_error=exc
            ) from exc
    if not config.api_key.get_secret_value().strip():
        raise ReddioPayValidationException("api_key не может быть пустым")
    return config


class ReddioPayClient:
    """Клиент Reddio Pay API.

    Содержит: HttpConnection, SessionManager, Transport и ресурсные
    клиенты product, token, payment, account.
    """

    def __init__(
        self,
        config: ReddioPayConfig | Mapping[str, Any],
        *,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
        sleep: SleepFunc | None = None,
    ) -> None:
        """Инициализация клиента.

        Args:
            config: Конфигурация (модель или словарь с api_key, base_url,
                environment, timeout)
            refresh_interval: Период фонового обновления токена, секунды
            sleep: Корутина ожидания для фонового обновления

        Raises:
            ReddioPayValidationException: Конфигурация некорректна
        """
        self._config: ResolvedConfig = resolve_config(build_config(config))
        self._connection = HttpConnection(
            base_url=self._config.base_url,
            timeout_seconds=self._config.timeout_seconds,
        )
        session_kwargs: dict[str, Any] = {"refresh_interval": refresh_interval}
        if sleep is not None:
            session_kwargs["sleep"] = sleep
        self._session = SessionManager(
            self._config, self._connection, **session_kwargs
        )
        self._transport = Transport(self._connection, self._session)

        self.product = ProductApi(self._transport)
        self.token = TokenApi(self._transport)
        self.payment = PaymentApi(self._transport)
        self.account = AccountApi(self._transport)
        logger.debug("Создан ReddioPayClient для %s", self._config.base_url)

    @classmethod
    def from_config(cls, config: ReddioPayConfig, **kwargs: Any) -> "ReddioPayClient":
        return cls(config, **kwargs)

    @classmethod
    def from_file(cls, **kwargs: Any) -> "ReddioPayClient":
        """Создать клиент из YAML-файла (переменная REDDIOPAY_CONFIG)."""
        return cls(get_reddiopay_config(), **kwargs)

    @property
    def config(self) -> ResolvedConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def session(self) -> SessionManager:
        return self._session

    @property
    def transport(self) -> Transport:
        return self._transport

    def current_token(self) -> str | None:
        return self._session.current_token()

    async def initialize(self) -> None:
        """Аутентифицироваться и запустить фоновое обновление токена.

        Raises:
            ReddioPayAuthException: При ошибке аутентификации
        """
        await self._session.authenticate()

    async def destroy(self) -> None:
        """Очистить сессию и закрыть HTTP-соединение.

        Повторный вызов безопасен.
        """
        self._session.destroy()
        await self._connection.close()
        logger.debug("ReddioPayClient закрыт")

    async def __aenter__(self) -> "ReddioPayClient":
        try:
            await self.initialize()
        except BaseException:
            await self.destroy()
            raise
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.destroy()
