"""Модуль для работы с Reddio Pay API.

Предоставляет клиента с автоматическим обновлением токенов
и retry при 401 ошибках.

Пример использования:
    from reddiopay import ReddioPayClient, CreatePaymentRequest

    client = ReddioPayClient({"api_key": "...", "environment": "dev"})
    await client.initialize()

    products = await client.product.list_products()
    payment = await client.payment.create_payment(
        CreatePaymentRequest(product_id="...", product_token_id="...", count=1)
    )

    await client.destroy()
"""

from reddiopay.client import ReddioPayClient
from reddiopay.config_reader import (
    DEFAULT_TIMEOUT_MS,
    DEVELOPMENT_URL,
    PRODUCTION_URL,
    ReddioPayConfig,
    ResolvedConfig,
    get_config,
    get_reddiopay_config,
    parse_config_file,
    resolve_config,
)
from reddiopay.exceptions import (
    ReddioPayAuthException,
    ReddioPayException,
    ReddioPayNetworkException,
    ReddioPayServiceException,
    ReddioPayValidationException,
)
from reddiopay.models import (
    AddProductTokenRequest,
    CreatePaymentRequest,
    CreateProductRequest,
    PaymentSuccessNotifyRequest,
)
from reddiopay.resources import AccountApi, PaymentApi, ProductApi, TokenApi
from reddiopay.session_manager import SessionManager, SessionState
from reddiopay.transport import FailureAction, Transport, classify_failure

__all__ = [
    # Client
    "ReddioPayClient",
    # Configuration
    "DEFAULT_TIMEOUT_MS",
    "DEVELOPMENT_URL",
    "PRODUCTION_URL",
    "ReddioPayConfig",
    "ResolvedConfig",
    "get_config",
    "get_reddiopay_config",
    "parse_config_file",
    "resolve_config",
    # Exceptions
    "ReddioPayAuthException",
    "ReddioPayException",
    "ReddioPayNetworkException",
    "ReddioPayServiceException",
    "ReddioPayValidationException",
    # Requests
    "AddProductTokenRequest",
    "CreatePaymentRequest",
    "CreateProductRequest",
    "PaymentSuccessNotifyRequest",
    # Resources
    "AccountApi",
    "PaymentApi",
    "ProductApi",
    "TokenApi",
    # Session / Transport
    "FailureAction",
    "SessionManager",
    "SessionState",
    "Transport",
    "classify_failure",
]
