from __future__ import annotations

import logging
from dataclasses import dataclass

from .webhook import (
    MESSAGES_FIELD,
    TEXT_TYPE,
    WHATSAPP_OBJECT,
    ChangeValue,
    InboundMessage,
    Notification,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutboundReply:
    to: str
    text: str


def plan_replies(notification: Notification, reply_text: str) -> list[OutboundReply]:
    """
    Walk a webhook notification and decide which replies to send.

    - only "whatsapp_business_account" notifications are processed
    - only changes on the "messages" field are looked at
    - each text message gets exactly one reply with `reply_text`
    - other message types and delivery statuses are only logged

    Nothing is sent here; the caller dispatches the returned replies.
    """
    if notification.object != WHATSAPP_OBJECT:
        logger.info("Ignoring notification for object %r", notification.object)
        return []

    replies: list[OutboundReply] = []
    for entry in notification.entry or []:
        for change in entry.changes or []:
            if change.field != MESSAGES_FIELD:
                continue
            replies.extend(_handle_messages_change(change.value, reply_text))
    return replies


def _handle_messages_change(value: ChangeValue | None, reply_text: str) -> list[OutboundReply]:
    messages = (value.messages if value else None) or []
    statuses = (value.statuses if value else None) or []

    if messages:
        replies: list[OutboundReply] = []
        for message in messages:
            reply = _reply_for_message(message, reply_text)
            if reply is not None:
                replies.append(reply)
        return replies

    if statuses:
        for status in statuses:
            logger.info(
                "Status update: message_id=%s status=%s recipient=%s",
                status.id,
                status.status,
                status.recipient_id,
            )
        return []

    logger.warning(
        "Received a 'messages' field event with neither messages nor statuses: %s",
        value.model_dump_json(exclude_none=True) if value else None,
    )
    return []


def _reply_for_message(message: InboundMessage, reply_text: str) -> OutboundReply | None:
    sender = message.from_

    if message.type != TEXT_TYPE:
        logger.info("Received non-text message type: %s from %s", message.type, sender)
        return None

    if not sender:
        # Nowhere to send the acknowledgment
        logger.warning("Text message %s has no sender; skipping reply", message.id)
        return None

    body = message.text.body if message.text else None
    logger.info("Received from %s: %s", sender, body or "")
    return OutboundReply(to=sender, text=reply_text)
