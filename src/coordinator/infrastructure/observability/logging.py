"""Structured logging configuration."""

from __future__ import annotations

import logging
import sys

import structlog


# AWS SDK loggers are chatty at INFO and would drown coordinator events.
NOISY_LOGGERS = ("botocore", "boto3", "urllib3")


def setup_logging(
    log_level: str = "INFO", service_name: str | None = None, json_output: bool = True,
) -> None:
    """Configure structured logging with structlog.

    ``json_output=False`` renders human-readable lines for local development.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                ],
            ),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    if service_name:
        structlog.contextvars.bind_contextvars(service=service_name)
