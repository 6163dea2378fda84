from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO", fmt: str = "text") -> None:
    """
    Install a single stream handler on the root logger.

    - fmt="json" writes one JSON object per line (for log shippers)
    - fmt="text" writes plain human-readable lines
    Existing root handlers are replaced so repeated calls don't duplicate output.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level: {level}. Valid: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    formatter: logging.Formatter
    if fmt.lower() == "json":
        formatter = JsonFormatter(JSON_FORMAT, rename_fields={"levelname": "level", "name": "logger"})
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level_upper)
    root.handlers = [handler]
