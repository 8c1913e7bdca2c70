from __future__ import annotations

import logging.config


def configure_logging(level: str = "INFO") -> None:
    """Install a single console handler for the whole application."""

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {"format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                    "level": level.upper(),
                },
            },
            "root": {"handlers": ["console"], "level": level.upper()},
            "loggers": {
                "werkzeug": {"level": "WARNING"},
            },
        }
    )
