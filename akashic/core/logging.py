import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attaches a single stream handler to the package logger. Safe to call more than once."""
    logger = logging.getLogger("akashic")
    logger.setLevel(level if isinstance(level, int) else level.upper())

    if not any(getattr(h, "_akashic", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._akashic = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
