from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import get_settings

logger = logging.getLogger(__name__)


def get_http_client() -> httpx.AsyncClient:
    settings = get_settings()
    return httpx.AsyncClient(timeout=settings.whatsapp_timeout_seconds)


def build_text_payload(to: str, text: str) -> dict[str, Any]:
    return {
        "messaging_product": "whatsapp",
        "to": to,
        "type": "text",
        "text": {"body": text},
    }


async def send_whatsapp_text(to: str, text: str) -> dict[str, Any] | None:
    """
    Send a text message via the WhatsApp Cloud API.

    Failures are logged and swallowed: the caller only sees None.
    There is no retry.
    """
    settings = get_settings()
    logger.info('Attempting to send reply to %s: "%s"', to, text)

    headers = {
        "Authorization": f"Bearer {settings.whatsapp_token}",
        "Content-Type": "application/json",
    }

    try:
        async with get_http_client() as client:
            response = await client.post(
                settings.messages_url,
                headers=headers,
                json=build_text_payload(to, text),
            )
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error(
            "Error sending message via WhatsApp API (status %s): %s",
            e.response.status_code,
            e.response.text,
        )
        return None
    except httpx.HTTPError as e:
        logger.error("Error sending message via WhatsApp API: %s", e)
        return None
    except Exception:
        # Bad credentials or URL in config; must not stop the remaining replies
        logger.exception("Unexpected error sending message to %s", to)
        return None

    logger.info("Reply sent successfully to %s. Status: %s", to, response.status_code)
    try:
        return response.json()
    except ValueError:
        # 2xx without a JSON body still counts as sent
        return {}
