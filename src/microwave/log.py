from __future__ import annotations

import logging
import logging.config

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_CONFIGURED = False


def configure_logging(level: int | str = logging.INFO) -> None:
    """Install one stream handler for the ``microwave`` loggers, once per process."""
    global _CONFIGURED
    if _CONFIGURED:
        logging.getLogger("microwave").setLevel(level)
        return

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"plain": {"format": LOG_FORMAT}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "plain",
                },
            },
            "loggers": {
                "microwave": {
                    "handlers": ["console"],
                    "level": level,
                    "propagate": False,
                },
            },
        }
    )
    _CONFIGURED = True


__all__ = ["LOG_FORMAT", "configure_logging"]
