"""JSON logging for every Lambda in the service."""

import logging
import os

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "crm-insights"


def get_logger(name: str) -> logging.Logger:
    """
    Return a module logger that writes one JSON object per record.

    Loggers are configured on first use only. Query text is logged after
    sanitisation; summaries and row data stay out of the log stream.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    stream = logging.StreamHandler()
    stream.setFormatter(
        JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            static_fields={"service": SERVICE_NAME},
        )
    )
    logger.addHandler(stream)
    logger.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())
    logger.propagate = False
    return logger
