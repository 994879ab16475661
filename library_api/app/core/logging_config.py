"""
Logging set-up for the Library API.

``setup_logging`` attaches the console (and optional file) handlers to
the root logger once per process and decides whether the SQL trace
emitted by ``core.db`` connections is shown.
"""

import logging
from pathlib import Path
from typing import Optional

# Connections opened while ``settings.debug`` is on trace every statement here.
SQL_LOGGER_NAME = "library_api.sql"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO", logfile: Optional[str] = None, sql_trace: bool = False) -> None:
    """Configure application logging.

    ``sql_trace`` lowers the SQL logger to DEBUG so statement traces
    are emitted even when the root level is INFO; otherwise the SQL
    logger only passes warnings.  Handlers are attached only if the
    root logger has none yet.
    """
    sql_logger = logging.getLogger(SQL_LOGGER_NAME)
    sql_logger.setLevel(logging.DEBUG if sql_trace else logging.WARNING)

    root = logging.getLogger()
    if root.handlers:
        return
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handlers = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
