from __future__ import annotations

import logging
import sys

import uvicorn

from .config import ConfigurationError, get_settings
from .logging_config import configure_logging
from .main import WEBHOOK_PATH, app

logger = logging.getLogger(__name__)


def main() -> None:
    """
    Run the relay with uvicorn on HOST:PORT.

    Exits with status 1 if VERIFY_TOKEN, WHATSAPP_TOKEN or PHONE_NUMBER_ID
    is missing.
    """
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)

    try:
        settings.ensure_complete()
    except ConfigurationError as e:
        logger.error("%s", e)
        sys.exit(1)

    logger.info("Server running on port %s", settings.port)
    logger.info("Webhook endpoint: http://localhost:%s%s", settings.port, WEBHOOK_PATH)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
