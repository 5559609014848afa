"""
Notifier - Push short messages to the shop's Telegram chat.
Every outcome comes back as a Result; nothing here raises on network trouble.
"""

import logging

import requests

from shopcrm.config import config
from shopcrm.models import Result
from shopcrm.bus.events import bus, EVENT_NOTIFICATION_SENT

logger = logging.getLogger(__name__)


def send_notification(message: str) -> Result:
    """
    Send a Markdown message through the Bot API sendMessage call.
    Returns: Result.success() on HTTP 2xx, Result.failure(reason) otherwise
    """
    if not config.TELEGRAM_BOT_TOKEN or not config.TELEGRAM_CHAT_ID:
        logger.warning("send_notification: TELEGRAM_BOT_TOKEN / TELEGRAM_CHAT_ID not set, skipping")
        return Result.failure("TELEGRAM_BOT_TOKEN / TELEGRAM_CHAT_ID not set in environment")

    url = f"{config.TELEGRAM_API_URL}/bot{config.TELEGRAM_BOT_TOKEN}/sendMessage"
    payload = {
        "chat_id": config.TELEGRAM_CHAT_ID,
        "text": message,
        "parse_mode": "Markdown",
    }

    try:
        response = requests.post(url, json=payload, timeout=(10, config.HTTP_TIMEOUT_SECONDS))
    except requests.exceptions.RequestException as e:
        logger.error(f"Telegram connection error: {e}")
        return Result.failure(f"Connection error: {e}")

    if not response.ok:
        logger.error(f"Telegram rejected message: HTTP {response.status_code} {response.text[:200]}")
        return Result.failure(f"HTTP {response.status_code}: {response.text[:200]}")

    logger.info("Notification sent")
    bus.emit(EVENT_NOTIFICATION_SENT, {'message': message})
    return Result.success()
