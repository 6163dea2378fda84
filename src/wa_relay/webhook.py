from __future__ import annotations

import logging
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    WrapValidator,
)

logger = logging.getLogger(__name__)

# Literals used by the WhatsApp Cloud API webhook
SUBSCRIBE_MODE = "subscribe"
WHATSAPP_OBJECT = "whatsapp_business_account"
MESSAGES_FIELD = "messages"
TEXT_TYPE = "text"


def _skip_invalid_items(value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
    """
    Validate a list item by item, dropping the ones that don't fit.

    One malformed message must not cost the rest of the batch its replies.
    Anything that isn't a list at all reads as absent.
    """
    if value is None:
        return None
    if not isinstance(value, list):
        logger.warning("Expected a list in notification, got %s; ignoring it", type(value).__name__)
        return None

    items: list[Any] = []
    for item in value:
        try:
            items.extend(handler([item]))
        except ValidationError as e:
            logger.warning(
                "Skipping malformed notification item: %s",
                e.errors(include_url=False, include_input=False),
            )
    return items


_lenient = WrapValidator(_skip_invalid_items)


class _Payload(BaseModel):
    # Meta adds fields over time; ignore anything we don't read.
    # Ids and phone numbers sometimes arrive as JSON numbers.
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)


class TextBody(_Payload):
    body: str | None = None


class InboundMessage(_Payload):
    id: str | None = None
    from_: str | None = Field(default=None, alias="from")
    timestamp: str | None = None
    type: str | None = None
    text: TextBody | None = None


class StatusUpdate(_Payload):
    id: str | None = None
    status: str | None = None
    recipient_id: str | None = None
    timestamp: str | None = None


class ChangeValue(_Payload):
    messaging_product: str | None = None
    metadata: Any = None
    contacts: Any = None
    messages: Annotated[list[InboundMessage] | None, _lenient] = None
    statuses: Annotated[list[StatusUpdate] | None, _lenient] = None


class Change(_Payload):
    field: str | None = None
    value: ChangeValue | None = None


class Entry(_Payload):
    id: str | None = None
    changes: Annotated[list[Change] | None, _lenient] = None


class Notification(_Payload):
    """
    Envelope of a WhatsApp webhook POST.

    Every level is optional: absent keys and JSON nulls parse to None,
    and callers iterate with `or []`. List items that don't match their
    model are logged and dropped instead of failing the whole envelope.
    """

    object: str | None = None
    entry: Annotated[list[Entry] | None, _lenient] = None
