"""
Logging setup for the API process and the CLI.

Handlers and formatters come from the packaged `config/logging.yaml`; the level
comes from settings (`app.log_level`, overridable via `CIVICREPORT_LOG_LEVEL`)
unless the caller passes one explicitly.
"""

from __future__ import annotations

import copy
import logging.config

from civicreport.config.settings import get_logging_config, get_settings


def configure_logging(level: str | None = None) -> None:
    # get_logging_config() is cached; work on a copy.
    config = copy.deepcopy(get_logging_config())
    level = (level or get_settings().app.log_level).upper()

    config.setdefault("root", {})["level"] = level
    config.setdefault("loggers", {}).setdefault("civicreport", {})["level"] = level
    for handler in config.get("handlers", {}).values():
        if isinstance(handler, dict) and "level" in handler:
            handler["level"] = level

    logging.config.dictConfig(config)
