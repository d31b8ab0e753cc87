"""Общие фикстуры для тестов reddiopay.

Содержит фикстуры, используемые в различных тестовых модулях:
фейковые часы для фонового обновления, мок HTTP-соединения и
локальный stub-сервер Reddio Pay.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from pydantic import SecretStr

from reddiopay.config_reader import ResolvedConfig
from reddiopay.http_connection import HttpConnection, HttpResponse
from reddiopay.session_manager import SessionManager

Handler = Callable[[web.Request], Awaitable[web.Response]]


def json_response(status: int, payload: Any = None) -> HttpResponse:
    """Построить HttpResponse с JSON телом."""
    text = "" if payload is None else json.dumps(payload)
    return HttpResponse(status=status, text=text, reason="stub")


def login_response(access: str = "A", refresh: str | None = "R") -> HttpResponse:
    payload: dict[str, Any] = {"message": "ok", "access_token": access}
    if refresh is not None:
        payload["refresh_token"] = refresh
    return json_response(200, payload)


class FakeClock:
    """Фейковые часы для фоновой задачи обновления.

    Задача "спит", пока тест не вызовет tick().
    """

    def __init__(self) -> None:
        self.delays: list[float] = []
        self._ticks: asyncio.Queue[None] = asyncio.Queue()
        self._sleeping = asyncio.Event()

    async def sleep(self, delay: float) -> None:
        self.delays.append(delay)
        self._sleeping.set()
        await self._ticks.get()

    async def wait_sleeping(self) -> None:
        """Дождаться, пока фоновая задача уснёт."""
        await asyncio.wait_for(self._sleeping.wait(), timeout=1)

    async def tick(self) -> None:
        """Разбудить задачу и дождаться, пока она снова уснёт."""
        await self.wait_sleeping()
        self._sleeping.clear()
        self._ticks.put_nowait(None)
        await self.wait_sleeping()

    async def release(self) -> None:
        """Разбудить задачу, не дожидаясь следующего сна."""
        self._ticks.put_nowait(None)
        for _ in range(5):
            await asyncio.sleep(0)


# ========== Unit фикстуры ==========


@pytest.fixture
def resolved_config() -> ResolvedConfig:
    return ResolvedConfig(
        api_key=SecretStr("k"),
        base_url="https://reddio.test",
        timeout_ms=30000,
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mock_connection() -> MagicMock:
    """Создать мок HttpConnection."""
    connection = MagicMock(spec=HttpConnection)
    connection.base_url = "https://reddio.test"
    connection.send = AsyncMock()
    connection.close = AsyncMock()
    return connection


@pytest.fixture
async def session_manager(
    resolved_config: ResolvedConfig,
    mock_connection: MagicMock,
    fake_clock: FakeClock,
) -> AsyncGenerator[SessionManager, None]:
    """Создать SessionManager с мок-соединением и фейковыми часами."""
    manager = SessionManager(
        resolved_config,
        mock_connection,
        refresh_interval=3300,
        sleep=fake_clock.sleep,
    )
    yield manager
    # Очистка
    manager.destroy()


# ========== Интеграционные фикстуры ==========


class StubReddioService:
    """Локальная заглушка Reddio Pay API.

    Выдаёт токены "A", "A2", "A3"... и принимает только выданные
    и не отозванные токены.
    """

    def __init__(self, api_key: str = "k") -> None:
        self.api_key = api_key
        self.issued: list[str] = []
        self.revoked: set[str] = set()
        self.issue_refresh_token = True
        self.requests: list[dict[str, Any]] = []

    def record(self, request: web.Request, body: Any = None) -> None:
        self.requests.append(
            {
                "method": request.method,
                "path": request.path,
                "query": dict(request.query),
                "authorization": request.headers.get("Authorization"),
                "body": body,
            }
        )

    def last_request(self, path: str) -> dict[str, Any]:
        return [r for r in self.requests if r["path"] == path][-1]

    def revoke_all(self) -> None:
        self.revoked.update(self.issued)

    def _authorized(self, request: web.Request) -> bool:
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return False
        token = header.removeprefix("Bearer ")
        return token in self.issued and token not in self.revoked

    async def login(self, request: web.Request) -> web.Response:
        body = await request.json()
        self.record(request, body)
        if body.get("api_key") != self.api_key:
            return web.json_response({"message": "invalid api key"}, status=401)
        token = "A" if not self.issued else f"A{len(self.issued) + 1}"
        self.issued.append(token)
        payload: dict[str, Any] = {"message": "success", "access_token": token}
        if self.issue_refresh_token:
            payload["refresh_token"] = "R"
        return web.json_response(payload)

    def protected(self, payload: Any, status: int = 200) -> Handler:
        async def handler(request: web.Request) -> web.Response:
            body = await request.json() if request.can_read_body else None
            self.record(request, body)
            if not self._authorized(request):
                return web.json_response({"message": "token expired"}, status=401)
            return web.json_response(payload, status=status)

        return handler

    def app(self) -> web.Application:
        product = {"product_id": "p1", "name": "Course", "content": "secret"}
        payment = {"payment_id": "pay1", "product_id": "p1", "status": "pending"}
        app = web.Application()
        app.router.add_post("/accounts/apikeys/login", self.login)
        app.router.add_get(
            "/products", self.protected({"message": "ok", "products": [product]})
        )
        app.router.add_post(
            "/products", self.protected({"message": "ok", "product": product})
        )
        app.router.add_get("/products/{id}", self.protected(product))
        app.router.add_get(
            "/tokens",
            self.protected(
                {"count": 1, "tokens": [{"token_id": "t1", "symbol": "USDT"}]}
            ),
        )
        app.router.add_post(
            "/external/payments",
            self.protected(
                {"message": "ok", "payment_id": "pay1", "pay_link": "https://pay"}
            ),
        )
        app.router.add_get(
            "/payments/list",
            self.protected({"message": "ok", "payments": [payment], "total_count": 1}),
        )
        app.router.add_get("/payments/{id}", self.protected(payment))
        app.router.add_get(
            "/accounts/info",
            self.protected({"message": "internal error"}, status=500),
        )
        return app


@pytest.fixture
def stub_service() -> StubReddioService:
    return StubReddioService()


@pytest.fixture
async def stub_url(stub_service: StubReddioService) -> AsyncGenerator[str, None]:
    """Запустить stub-сервер и вернуть его базовый URL."""
    server = TestServer(stub_service.app())
    await server.start_server()
    yield str(server.make_url("/"))
    await server.close()
