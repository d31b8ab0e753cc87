"""Модели запросов и ответов Reddio Pay API.

Поля повторяют JSON сервиса. Семантику значений проверяет сервис;
клиент требует только наличие обязательных полей.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class ApiModel(BaseModel):
    """Базовая модель: неизвестные поля сервиса сохраняются."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class RequestModel(ApiModel):
    """Базовая модель тела запроса."""

    def to_payload(self) -> dict[str, Any]:
        """Тело запроса без незаполненных полей."""
        return self.model_dump(exclude_none=True)


# ========== Products ==========


class ProductToken(ApiModel):
    product_token_id: str | None = None
    product_id: str | None = None
    account_id: str | None = None
    token_id: str | None = None
    price: str | None = None
    recipient_address: str | None = None
    payment_router_address: str | None = None
    created_at: str | None = None
    chain_id: str | None = None
    chain_name: str | None = None


class Product(ApiModel):
    product_id: str | None = None
    account_id: str | None = None
    name: str | None = None
    description: str | None = None
    content: str | None = None
    active: bool | None = None
    product_tokens: list[ProductToken] | None = None
    created_at: str | None = None
    total_sale_count: int | None = None
    total_sale_amount: float | None = None


class CreateProductRequest(RequestModel):
    name: str
    content: str
    token_ids: list[str]
    price: str
    recipient_address: str
    description: str | None = None


class AddProductTokenRequest(RequestModel):
    token_id: str
    price: str
    recipient_address: str


class AddProductTokenResponse(ApiModel):
    message: str | None = None
    product_token: ProductToken | None = None


class ProductTokenStatus(ApiModel):
    product_name: str | None = None
    token_name: str | None = None
    chain_name: str | None = None
    product_token_id: str | None = None
    total_sale_count: int | None = None
    total_sale_amount: int | None = None
    created_at: str | None = None
    decimals: int | None = None
    token_id: str | None = None
    desc: str | None = None


class ProductTokenStatusResponse(ApiModel):
    message: str | None = None
    status: list[ProductTokenStatus] = []


# ========== Tokens ==========


class Token(ApiModel):
    token_id: str | None = None
    name: str | None = None
    symbol: str | None = None
    contract_address: str | None = None
    decimals: int | None = None
    chain_id: int | None = None
    chain_name: str | None = None
    chain_symbol: str | None = None
    explorer_url: str | None = None
    icon_url: str | None = None
    token_type: str | None = None
    is_active: bool | None = None
    currency_type: str | None = None
    created_at: str | None = None


# ========== Payments ==========


class Payment(ApiModel):
    payment_id: str | None = None
    account_id: str | None = None
    token_id: str | None = None
    product_id: str | None = None
    product_token_id: str | None = None
    count: int | None = None
    status: str | None = None
    payer_email: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    paid_at: str | None = None
    closed_at: str | None = None
    close_reason: str | None = None
    transaction_hash: str | None = None
    block_number: int | None = None
    gas_used: int | None = None
    gas_price: str | None = None
    total_amount: str | None = None
    fee_amount: str | None = None
    recipient_amount: str | None = None


class PaymentReceiver(ApiModel):
    type: str | None = None
    recipient_address: str | None = None
    amount: str | None = None
    rate: str | None = None


class CreatePaymentRequest(RequestModel):
    product_id: str
    product_token_id: str
    count: int


class CreatePaymentResponse(ApiModel):
    message: str | None = None
    payment_id: str | None = None
    pay_link: str | None = None
    contract_address: str | None = None
    payment_receivers: list[PaymentReceiver] = []
    token_address: str | None = None
    decimals: int | None = None


class PaymentList(ApiModel):
    message: str | None = None
    payments: list[Payment] = []


class PaginatedPaymentList(PaymentList):
    total_count: int | None = None
    total_pages: int | None = None
    current_page: int | None = None
    page_size: int | None = None


class PaymentSuccessNotifyRequest(RequestModel):
    payment_id: str
    email: str


class PaymentSuccessNotifyResponse(ApiModel):
    message: str | None = None
    success: bool | None = None


# ========== Accounts ==========


class AccountInfo(ApiModel):
    email: str | None = None
    webhook: str | None = None
    company_name: str | None = None
    company_url: str | None = None
    activated: bool | None = None
    created_at: str | None = None


class MessageResponse(ApiModel):
    message: str | None = None


class TokenBalance(ApiModel):
    token_id: str | None = None
    name: str | None = None
    symbol: str | None = None
    contract_address: str | None = None
    decimals: int | None = None
    balance: str | None = None
    formatted_balance: str | None = None
    chain_id: int | None = None
    chain_name: str | None = None
    chain_symbol: str | None = None
    icon_url: str | None = None


class BalanceResponse(ApiModel):
    wallet_address: str | None = None
    chain_id: int | None = None
    chain_name: str | None = None
    balances: list[TokenBalance] = []


class AccountAddress(ApiModel):
    account_id: str | None = None
    token_id: str | None = None
    recipient_address: str | None = None
    ref_name: str | None = None
    created_at: str | None = None
