"""Logging configuration shared by the API and the CLI."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
HANDLER_NAME = "export_calc.console"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger("export_calc")
    root.setLevel(level.upper())
    if not any(h.get_name() == HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
