"""Исключения для работы с Reddio Pay API.

Каждая неудачная операция клиента заканчивается одним из этих исключений.
Частичные результаты вместе с ошибкой не возвращаются.
"""


class ReddioPayException(Exception):
    """Базовое исключение для ошибок Reddio Pay API.

    Также используется как общая клиентская ошибка: некорректное
    построение запроса, ошибка сериализации тела, нечитаемый ответ.
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.original_error = original_error


class ReddioPayAuthException(ReddioPayException):
    """Исключение при ошибках аутентификации.

    Выбрасывается при:
    - Некорректном API-ключе (ошибка на запрос токена)
    - Ошибках получения/обновления токена
    - Повторной ошибке после обновления токена по 401
    """

    def __init__(
        self,
        message: str = "Authentication failed",
        status: int | None = 401,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, status=status, original_error=original_error)


class ReddioPayNetworkException(ReddioPayException):
    """Ответ от сервера не получен (отказ соединения, таймаут, DNS)."""

    def __init__(
        self,
        message: str = "Network request failed",
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, status=None, original_error=original_error)


class ReddioPayValidationException(ReddioPayException):
    """Некорректные локальные входные данные."""


class ReddioPayServiceException(ReddioPayException):
    """Сервис ответил статусом не из 2xx (кроме обрабатываемых как 401).

    Attributes:
        status: HTTP статус ответа
        upstream_message: Сообщение об ошибке от сервиса, если было
    """

    def __init__(
        self,
        message: str,
        status: int,
        upstream_message: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, status=status, original_error=original_error)
        self.upstream_message = upstream_message
