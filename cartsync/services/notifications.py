"""
User-facing failure notifications.

The cart store only needs ``report_error(message)``. Delivery is
fire-and-forget: nothing is returned and a delivery problem is logged, never
raised back into the cart operation that reported it.
"""

import asyncio
from typing import Protocol

import httpx

from cartsync.config import get_settings
from cartsync.logging import get_logger, sanitize_string_for_logging

logger = get_logger(__name__)

PERMANENT_ERROR_CODES = {400, 403, 404}


class Notifier(Protocol):
    def report_error(self, message: str) -> None: ...


class LogNotifier:
    """Writes reported messages to the ``cartsync.notifier`` logger."""

    def __init__(self):
        self._logger = get_logger("cartsync.notifier")

    def report_error(self, message: str) -> None:
        self._logger.warning(sanitize_string_for_logging(message, 200))


async def send_telegram_message(
    chat_id: int,
    text: str,
    bot_token: str,
    retries: int = 2,
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """
    Send a plain-text Telegram message, retrying timeouts and 5xx answers.

    Returns:
        True if sent, False otherwise
    """
    url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
    payload = {"chat_id": chat_id, "text": text}
    last_error = None

    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        for attempt in range(retries + 1):
            try:
                response = await client.post(url, json=payload)
                if response.status_code == 200:
                    return True
                last_error = f"HTTP {response.status_code}"
                logger.warning(f"Telegram API error for {chat_id}: {last_error}")
                if response.status_code in PERMANENT_ERROR_CODES:
                    return False
            except httpx.TransportError as e:
                last_error = str(e) or type(e).__name__
                logger.warning(f"Error sending to {chat_id} (attempt {attempt + 1}/{retries + 1}): {last_error}")

            if attempt < retries:
                await asyncio.sleep(0.5 * (2 ** attempt))

    logger.error(f"Failed to send message to {chat_id} after {retries + 1} attempts: {last_error}")
    return False


class TelegramNotifier:
    """Sends reported messages to a Telegram chat in a background task."""

    def __init__(self, bot_token: str, chat_id: int, transport: httpx.AsyncBaseTransport | None = None):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self._transport = transport
        self._pending: set[asyncio.Task] = set()

    def report_error(self, message: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, dropping notification: {sanitize_string_for_logging(message)}")
            return

        task = loop.create_task(
            send_telegram_message(self.chat_id, message, self.bot_token, transport=self._transport)
        )
        # The loop only keeps weak references to tasks
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for in-flight deliveries (used on shutdown)."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)


def notifier_from_settings() -> Notifier:
    """Telegram when TELEGRAM_TOKEN and NOTIFY_CHAT_ID are set, else the log."""
    settings = get_settings()
    if settings.telegram_token and settings.notify_chat_id is not None:
        return TelegramNotifier(settings.telegram_token, settings.notify_chat_id)
    return LogNotifier()
