"""Тесты для config_reader модуля."""

from collections.abc import Iterator
from pathlib import Path

import pytest
from pydantic import SecretStr, ValidationError

from reddiopay.config_reader import (
    DEFAULT_TIMEOUT_MS,
    DEVELOPMENT_URL,
    PRODUCTION_URL,
    ReddioPayConfig,
    get_config,
    get_reddiopay_config,
    parse_config_file,
    resolve_config,
)

pytestmark = pytest.mark.unit


def make_config(**kwargs: object) -> ReddioPayConfig:
    return ReddioPayConfig(api_key=SecretStr("k"), **kwargs)


class TestResolveConfig:
    """Тесты resolve_config."""

    @pytest.mark.parametrize("environment", [None, "prod", "dev", "staging"])
    def test_explicit_base_url_wins(self, environment: str | None) -> None:
        """Явный base_url всегда важнее environment."""
        config = make_config(base_url="https://custom.test", environment=environment)

        assert resolve_config(config).base_url == "https://custom.test"

    def test_dev_environment(self) -> None:
        assert resolve_config(make_config(environment="dev")).base_url == DEVELOPMENT_URL

    def test_prod_environment(self) -> None:
        assert resolve_config(make_config(environment="prod")).base_url == PRODUCTION_URL

    def test_defaults_to_production(self) -> None:
        assert resolve_config(make_config()).base_url == PRODUCTION_URL

    def test_unknown_environment_falls_back_to_production(self) -> None:
        """Неизвестное окружение не ошибка, а production."""
        assert resolve_config(make_config(environment="qa")).base_url == PRODUCTION_URL

    def test_default_timeout(self) -> None:
        resolved = resolve_config(make_config())

        assert resolved.timeout_ms == DEFAULT_TIMEOUT_MS == 30000
        assert resolved.timeout_seconds == 30.0

    def test_explicit_timeout(self) -> None:
        assert resolve_config(make_config(timeout=5000)).timeout_ms == 5000

    def test_trailing_slash_stripped(self) -> None:
        config = make_config(base_url="https://custom.test/api/")

        assert resolve_config(config).base_url == "https://custom.test/api"

    def test_resolved_config_is_frozen(self) -> None:
        resolved = resolve_config(make_config())

        with pytest.raises(ValidationError):
            resolved.base_url = "https://other.test"  # type: ignore[misc]

    def test_api_key_is_secret(self) -> None:
        resolved = resolve_config(make_config())

        assert "k" not in repr(resolved.api_key)
        assert resolved.api_key.get_secret_value() == "k"


class TestConfigFile:
    """Тесты чтения YAML-конфигурации."""

    @pytest.fixture(autouse=True)
    def clear_cache(self) -> Iterator[None]:
        parse_config_file.cache_clear()
        get_config.cache_clear()
        yield
        parse_config_file.cache_clear()
        get_config.cache_clear()

    def test_missing_env_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("REDDIOPAY_CONFIG", raising=False)

        with pytest.raises(ValueError, match="REDDIOPAY_CONFIG"):
            parse_config_file()

    def test_reads_reddiopay_section(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config_file = tmp_path / "config.yml"
        config_file.write_text(
            "reddiopay:\n  api_key: secret\n  environment: dev\n  timeout: 1000\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("REDDIOPAY_CONFIG", str(config_file))

        config = get_reddiopay_config()

        assert config.api_key.get_secret_value() == "secret"
        assert config.environment == "dev"
        assert config.timeout == 1000

    def test_missing_root_key(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config_file = tmp_path / "config.yml"
        config_file.write_text("other:\n  a: 1\n", encoding="utf-8")
        monkeypatch.setenv("REDDIOPAY_CONFIG", str(config_file))

        with pytest.raises(ValueError, match="reddiopay"):
            get_reddiopay_config()

    def test_non_mapping_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config_file = tmp_path / "config.yml"
        config_file.write_text("- a\n- b\n", encoding="utf-8")
        monkeypatch.setenv("REDDIOPAY_CONFIG", str(config_file))

        with pytest.raises(ValueError, match="словарём"):
            parse_config_file()
