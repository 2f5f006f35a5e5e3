# app/core/logging.py
import logging
import sys
import colorlog

# driver/transport loggers that log every round-trip
_QUIET_LOGGERS = ("pymongo", "httpx", "httpcore")

_LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def resolve_level(level: str | int | None, debug: bool = False) -> int:
    """LOG_LEVEL wins ("info", "WARNING", 10...); otherwise DEBUG/INFO from the debug flag."""
    if isinstance(level, int):
        return level
    if level:
        resolved = logging.getLevelName(level.upper())
        if isinstance(resolved, int):
            return resolved
    return logging.DEBUG if debug else logging.INFO


def configure_logging(level: int = logging.INFO) -> None:
    handler = colorlog.StreamHandler(sys.stdout)
    handler.setFormatter(
        colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s %(levelname)-8s [%(name)s]%(reset)s %(message)s",
            datefmt="%H:%M:%S",
            log_colors=_LOG_COLORS,
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    for name in ("uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
