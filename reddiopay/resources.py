"""Ресурсные клиенты Reddio Pay API.

Каждый метод выполняет ровно один вызов Transport и приводит ответ
к типизированной модели. Фильтрации, сортировки и агрегации на стороне
клиента нет.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from reddiopay.exceptions import ReddioPayException, ReddioPayValidationException
from reddiopay.models import (
    AccountAddress,
    AccountInfo,
    AddProductTokenRequest,
    AddProductTokenResponse,
    BalanceResponse,
    CreatePaymentRequest,
    CreatePaymentResponse,
    CreateProductRequest,
    MessageResponse,
    PaginatedPaymentList,
    Payment,
    PaymentList,
    PaymentSuccessNotifyRequest,
    PaymentSuccessNotifyResponse,
    Product,
    ProductTokenStatusResponse,
    Token,
)
from reddiopay.transport import Transport

ModelType = TypeVar("ModelType", bound=BaseModel)


def parse_model(model: type[ModelType], payload: Any) -> ModelType:
    """Провалидировать ответ сервиса в модель.

    Raises:
        ReddioPayException: Ответ не соответствует модели
    """
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ReddioPayException(
            f"Неожиданный формат ответа для {model.__name__}: {exc}",
            original_error=exc,
        ) from exc


def parse_list(model: type[ModelType], payload: Any) -> list[ModelType]:
    if not isinstance(payload, list):
        raise ReddioPayException(
            f"Ожидался список {model.__name__}, получено: {type(payload).__name__}"
        )
    return [parse_model(model, item) for item in payload]


def unwrap(payload: Any, key: str) -> Any:
    """Достать поле key из конверта ответа."""
    if not isinstance(payload, dict) or key not in payload:
        raise ReddioPayException(f"В ответе сервиса нет поля '{key}'")
    return payload[key]


def require_id(value: str, name: str) -> str:
    """Проверить идентификатор для подстановки в путь."""
    if not value or not str(value).strip():
        raise ReddioPayValidationException(f"{name} не может быть пустым")
    return str(value)


class ResourceApi:
    """Базовый класс ресурсных клиентов."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport


class ProductApi(ResourceApi):
    """Управление цифровыми продуктами."""

    async def list_products(self) -> list[Product]:
        """Получить все продукты аккаунта."""
        response = await self._transport.get("/products")
        return parse_list(Product, unwrap(response, "products"))

    async def create_product(self, request: CreateProductRequest) -> Product:
        """Создать продукт.

        Args:
            request: Параметры нового продукта

        Returns:
            Созданный продукт
        """
        response = await self._transport.post("/products", request.to_payload())
        return parse_model(Product, unwrap(response, "product"))

    async def get_product(self, product_id: str) -> Product:
        """Получить продукт по ID."""
        product_id = require_id(product_id, "product_id")
        response = await self._transport.get(f"/products/{product_id}")
        return parse_model(Product, response)

    async def add_product_token(
        self, product_id: str, request: AddProductTokenRequest
    ) -> AddProductTokenResponse:
        """Добавить токен оплаты к продукту.

        Args:
            product_id: ID продукта
            request: Токен, цена и адрес получателя

        Returns:
            Ответ с созданным ProductToken
        """
        product_id = require_id(product_id, "product_id")
        response = await self._transport.post(
            f"/products/{product_id}/tokens", request.to_payload()
        )
        return parse_model(AddProductTokenResponse, response)

    async def get_product_token_status(
        self, product_id: str
    ) -> ProductTokenStatusResponse:
        """Получить статус продаж по токенам продукта."""
        product_id = require_id(product_id, "product_id")
        response = await self._transport.get(f"/products/{product_id}/tokens/status")
        return parse_model(ProductTokenStatusResponse, response)


class TokenApi(ResourceApi):
    """Поддерживаемые токены оплаты."""

    async def list_tokens(self) -> list[Token]:
        response = await self._transport.get("/tokens")
        return parse_list(Token, unwrap(response, "tokens"))


class PaymentApi(ResourceApi):
    """Платежи."""

    async def create_payment(
        self, request: CreatePaymentRequest
    ) -> CreatePaymentResponse:
        """Создать внешний платёж.

        Args:
            request: Продукт, токен продукта и количество

        Returns:
            Ответ с payment_id и ссылкой на оплату
        """
        response = await self._transport.post(
            "/external/payments", request.to_payload()
        )
        return parse_model(CreatePaymentResponse, response)

    async def get_payment(self, payment_id: str) -> Payment:
        payment_id = require_id(payment_id, "payment_id")
        response = await self._transport.get(f"/payments/{payment_id}")
        return parse_model(Payment, response)

    async def list_payments_by_product(self, product_id: str) -> PaymentList:
        """Получить платежи аккаунта по продукту."""
        product_id = require_id(product_id, "product_id")
        response = await self._transport.get(f"/payments/product/{product_id}")
        return parse_model(PaymentList, response)

    async def list_payments(
        self, limit: int | None = None, offset: int | None = None
    ) -> PaginatedPaymentList:
        """Получить платежи аккаунта постранично.

        Параметры попадают в query только если заданы явно.

        Args:
            limit: Размер страницы
            offset: Смещение

        Returns:
            Страница платежей с метаданными пагинации
        """
        query: dict[str, int] = {}
        if limit is not None:
            query["limit"] = limit
        if offset is not None:
            query["offset"] = offset
        response = await self._transport.get("/payments/list", query=query or None)
        return parse_model(PaginatedPaymentList, response)

    async def send_payment_success_notification(
        self, request: PaymentSuccessNotifyRequest
    ) -> PaymentSuccessNotifyResponse:
        """Подписать email на уведомление об успешной оплате."""
        response = await self._transport.post(
            "/external/payments/success/notify", request.to_payload()
        )
        return parse_model(PaymentSuccessNotifyResponse, response)


class AccountApi(ResourceApi):
    """Информация об аккаунте."""

    async def get_account_info(self) -> AccountInfo:
        response = await self._transport.get("/accounts/info")
        return parse_model(AccountInfo, response)

    async def update_webhook(self, webhook: str) -> MessageResponse:
        """Изменить URL вебхука аккаунта."""
        response = await self._transport.put("/accounts/webhook", {"webhook": webhook})
        return parse_model(MessageResponse, response)

    async def update_account_info(
        self, company_name: str, company_url: str
    ) -> MessageResponse:
        """Изменить информацию о компании."""
        response = await self._transport.put(
            "/accounts/info",
            {"company_name": company_name, "company_url": company_url},
        )
        return parse_model(MessageResponse, response)

    async def get_token_balances(
        self,
        wallet_address: str,
        chain_id: int,
        token_symbol: str | None = None,
    ) -> BalanceResponse:
        """Получить балансы кошелька.

        Args:
            wallet_address: Адрес кошелька
            chain_id: ID сети
            token_symbol: Символ токена; без него возвращаются все токены

        Returns:
            Балансы по токенам
        """
        body: dict[str, Any] = {"wallet_address": wallet_address, "chain_id": chain_id}
        if token_symbol is not None:
            body["token_symbol"] = token_symbol
        response = await self._transport.post("/accounts/wallet/info", body)
        return parse_model(BalanceResponse, response)

    async def list_account_addresses(self) -> list[AccountAddress]:
        response = await self._transport.get("/accounts/addresses")
        return parse_list(AccountAddress, response)
