from __future__ import annotations

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

from .config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
SERVER_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")


def setup_logging(level: str = LOG_LEVEL) -> logging.Logger:
    """
    One JSON line per record on stdout:
    - every line carries `"app": "clinic"` so API, CLI and server output can be told apart
    - the root logger and the uvicorn loggers share the handler
    - previous handlers are dropped, so calling it twice does not double the output
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter(LOG_FORMAT, static_fields={"app": "clinic"}))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.setLevel(level)
        server_logger.handlers = [handler]
        server_logger.propagate = False  # already on the shared handler

    return root
