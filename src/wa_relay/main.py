from __future__ import annotations

import logging
import secrets
from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, Depends, FastAPI, Query, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import Settings, get_settings
from .logging_config import configure_logging
from .pipeline import plan_replies
from .webhook import SUBSCRIBE_MODE, WHATSAPP_OBJECT, Notification
from .whatsapp_client import send_whatsapp_text

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/webhook"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: refuse to serve without credentials
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)
    settings.ensure_complete()
    yield


app = FastAPI(title="wa-relay", version="0.1.0", lifespan=lifespan)


def token_matches(received: str | None, expected: str | None) -> bool:
    if not received or not expected:
        return False
    return secrets.compare_digest(received.encode("utf-8"), expected.encode("utf-8"))


# --- Routes ---


@app.get("/")
def health() -> JSONResponse:
    return JSONResponse({"status": "ok"})


@app.get(WEBHOOK_PATH)
def verify_webhook(
    mode: str | None = Query(None, alias="hub.mode"),
    token: str | None = Query(None, alias="hub.verify_token"),
    challenge: str | None = Query(None, alias="hub.challenge"),
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    Subscription handshake sent by Meta when the webhook is registered.

    Echoes `hub.challenge` back only when the mode is "subscribe" and the
    token equals VERIFY_TOKEN; anything else is 403 with no body.
    """
    verified = mode == SUBSCRIBE_MODE and token_matches(token, settings.verify_token)
    logger.info(
        "Webhook validation received: mode=%s challenge=%s token_matches=%s",
        mode,
        challenge,
        verified,
    )

    if not verified:
        logger.warning("Verification failed: token or mode mismatch")
        return Response(status_code=403)

    logger.info("Webhook verified, returning challenge")
    return PlainTextResponse(challenge or "", status_code=200)


@app.post(WEBHOOK_PATH)
async def receive_notification(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    WhatsApp notification intake.

    Behaviour:
      - anything that isn't a WhatsApp Business Account notification is
        acknowledged without being read further
      - parse the notification and plan one reply per inbound text message
      - schedule each reply as its own background task
      - acknowledge with 200 right away (500 if the body couldn't be processed)
    """
    try:
        body = await request.json()
        logger.debug("Incoming WhatsApp notification: %s", body)

        notification_object = body.get("object") if isinstance(body, dict) else None
        if notification_object != WHATSAPP_OBJECT:
            logger.info("Ignoring notification for object %r", notification_object)
            return Response(status_code=200)

        notification = Notification.model_validate(body)
        replies = plan_replies(notification, settings.reply_text)
    except Exception:
        logger.exception("Error processing webhook")
        return Response(status_code=500)

    for reply in replies:
        background_tasks.add_task(send_whatsapp_text, reply.to, reply.text)

    return Response(status_code=200)
