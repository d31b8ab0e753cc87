"""Конфигурация для Reddio Pay API клиента.

Минимальная пользовательская конфигурация (API-ключ, базовый URL,
окружение, таймаут) превращается в полностью явную ResolvedConfig.

Конфигурацию можно прочитать из YAML-файла, путь к которому указывается
в переменной окружения REDDIOPAY_CONFIG. Переменные окружения
автоматически загружаются из .env файла.
"""

from functools import lru_cache
from os import getenv
from typing import Any, TypeVar, cast

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, SecretStr
from yaml import CSafeLoader as SafeLoader
from yaml import load

# Автоматически загружаем переменные из .env файла
load_dotenv()

ConfigType = TypeVar("ConfigType", bound=BaseModel)

PRODUCTION_URL = "https://reddio-service-prod.reddio.com"
DEVELOPMENT_URL = "https://reddio-service-dev.reddio.com"

ENVIRONMENT_URLS: dict[str, str] = {
    "prod": PRODUCTION_URL,
    "dev": DEVELOPMENT_URL,
}

# Таймаут запроса по умолчанию, миллисекунды
DEFAULT_TIMEOUT_MS = 30000


class ReddioPayConfig(BaseModel):
    """Пользовательская конфигурация Reddio Pay клиента."""

    # API-ключ аккаунта
    api_key: SecretStr

    # Явный базовый URL сервиса, имеет приоритет над environment
    base_url: str | None = None

    # Окружение: "prod" или "dev"
    environment: str | None = None

    # Таймаут запроса в миллисекундах
    timeout: int | None = None


class ResolvedConfig(BaseModel):
    """Конфигурация после применения значений по умолчанию."""

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr
    base_url: str
    timeout_ms: int

    @property
    def timeout_seconds(self) -> float:
        """Таймаут в секундах (для aiohttp.ClientTimeout)."""
        return self.timeout_ms / 1000


def resolve_base_url(config: ReddioPayConfig) -> str:
    """Определить базовый URL.

    Порядок: явный base_url, затем environment, затем production.
    Неизвестное окружение не является ошибкой.
    """
    if config.base_url:
        return config.base_url.rstrip("/")
    return ENVIRONMENT_URLS.get(config.environment or "prod", PRODUCTION_URL)


def resolve_config(config: ReddioPayConfig) -> ResolvedConfig:
    """Построить ResolvedConfig из пользовательской конфигурации.

    Args:
        config: Пользовательская конфигурация

    Returns:
        Полностью явная конфигурация
    """
    timeout = config.timeout if config.timeout is not None else DEFAULT_TIMEOUT_MS
    return ResolvedConfig(
        api_key=config.api_key,
        base_url=resolve_base_url(config),
        timeout_ms=timeout,
    )


@lru_cache
def parse_config_file() -> dict[str, Any]:
    """Прочитать и распарсить YAML-файл конфигурации.

    Путь к файлу берётся из переменной окружения REDDIOPAY_CONFIG.

    Returns:
        Словарь с конфигурацией

    Raises:
        ValueError: Если переменная окружения не задана
        FileNotFoundError: Если файл не найден
    """
    file_path = getenv("REDDIOPAY_CONFIG")
    if file_path is None:
        raise ValueError(
            "Переменная окружения REDDIOPAY_CONFIG не задана. "
            "Укажите путь к файлу конфигурации."
        )

    with open(file_path, "rb") as file:
        config_data = load(file, Loader=SafeLoader)

    if not isinstance(config_data, dict):
        raise ValueError("Конфигурация должна быть словарём")
    return config_data


@lru_cache
def get_config(model: type[ConfigType], root_key: str) -> ConfigType:
    """Получить конфигурацию определённого типа из файла.

    Args:
        model: Pydantic-модель для валидации
        root_key: Корневой ключ в YAML-файле

    Returns:
        Экземпляр модели с заполненными значениями

    Raises:
        ValueError: Если ключ не найден в конфигурации
    """
    config_dict = parse_config_file()
    if root_key not in config_dict:
        raise ValueError(f"Ключ '{root_key}' не найден в конфигурации")
    return model.model_validate(config_dict[root_key])


def get_reddiopay_config() -> ReddioPayConfig:
    """Получить конфигурацию Reddio Pay из файла."""
    return cast(ReddioPayConfig, get_config(ReddioPayConfig, "reddiopay"))
