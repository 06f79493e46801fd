"""Logging configuration for the marketplace service."""

import logging

import structlog

from marketplace.utils.settings import LOG_LEVEL

structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(
        getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    ),
)

# sqlalchemy loguje kazde zapytanie na INFO
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str):
    return structlog.get_logger(name)
