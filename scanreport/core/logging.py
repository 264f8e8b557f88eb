"""Logging setup for scanreport: structlog events rendered through stdlib handlers.

Environment:
    SCANREPORT_LOG_LEVEL   level for the ``scanreport`` loggers (default INFO)
    SCANREPORT_LOG_FORMAT  ``console`` or ``json`` (default console)

Everything is written to stderr; ``scan-report build`` uses stdout for the
payload itself.
"""

from __future__ import annotations

import logging
import logging.config
import os

import structlog

LOG_LEVEL_ENV = "SCANREPORT_LOG_LEVEL"
LOG_FORMAT_ENV = "SCANREPORT_LOG_FORMAT"


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=False)


def setup_logging(level: str | None = None) -> None:
    """Route structlog and stdlib records for ``scanreport`` to stderr.

    ``level`` wins over ``SCANREPORT_LOG_LEVEL``; other libraries stay at WARNING.
    """
    log_level = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    log_format = os.environ.get(LOG_FORMAT_ENV, "console").strip().lower()
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = {
        "()": structlog.stdlib.ProcessorFormatter,
        "foreign_pre_chain": pre_chain,
        "processors": [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(log_format),
        ],
    }
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"scanreport": formatter},
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "scanreport",
                },
            },
            "root": {"handlers": ["stderr"], "level": "WARNING"},
            "loggers": {"scanreport": {"level": log_level}},
        }
    )
