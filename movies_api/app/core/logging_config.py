"""
Logging setup for the Movies API.

``setup_logging`` gives the root logger one console handler and, when
``LOG_FILE`` is set, one file handler.  Application modules log through
``logging.getLogger(__name__)`` and reach both, including the Kafka
event summaries written by ``events.movie_events``.

Uvicorn's loggers lose their own handlers and propagate to the root, so
server and application records share one format and one destination
(``run.py`` starts uvicorn with ``log_config=None`` for that reason).

The function may be called many times (every ``create_app`` call does);
handlers are installed once and only the level is updated afterwards.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

CONSOLE_HANDLER = "movies_api.console"
FILE_HANDLER = "movies_api.file"

SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def parse_level(level: str) -> int:
    """Map a level name such as ``"debug"`` to its number; unknown names mean INFO."""
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def _named(handler: logging.Handler, name: str) -> logging.Handler:
    handler.set_name(name)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger and route uvicorn's loggers into it.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).  Case
        insensitive.
    logfile : Optional[str]
        File that receives every record as well.  Missing parent
        directories are created.
    """
    numeric_level = parse_level(level)
    root = logging.getLogger()
    root.setLevel(numeric_level)

    installed = {handler.get_name() for handler in root.handlers}
    if CONSOLE_HANDLER not in installed:
        root.addHandler(_named(logging.StreamHandler(), CONSOLE_HANDLER))
    if logfile and FILE_HANDLER not in installed:
        log_path = Path(logfile).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        root.addHandler(_named(logging.FileHandler(log_path, encoding="utf-8"), FILE_HANDLER))

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True
        server_logger.setLevel(numeric_level)
