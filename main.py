"""Пример использования Reddio Pay API клиента."""

import asyncio
import logging

from reddiopay import ReddioPayClient

# Настраиваем логирование
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


async def main() -> None:
    """Основная функция."""
    # Загружаем конфигурацию из config.yml (REDDIOPAY_CONFIG)
    client = ReddioPayClient.from_file()
    print(f"Подключение к серверу: {client.base_url}")

    try:
        await client.initialize()

        tokens = await client.token.list_tokens()
        print(f"\nПоддерживаемые токены ({len(tokens)} шт.):")
        for token in tokens[:5]:  # Показываем первые 5
            print(f"  - {token.symbol} / {token.chain_name} (id: {token.token_id})")

        page = await client.payment.list_payments(limit=5)
        print(f"\nПоследние платежи: {len(page.payments)} из {page.total_count}")

    finally:
        # Останавливаем обновление токена и закрываем соединение
        await client.destroy()
        print("\nСоединения закрыты.")


if __name__ == "__main__":
    asyncio.run(main())
