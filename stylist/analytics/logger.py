"""Application logging: one shared logger plus per-conversation adapters."""

import logging
import sys
from pathlib import Path
from typing import Any, MutableMapping, Optional, Tuple

from stylist.utils.config import settings

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"


def setup_logger(
    name: str = "stylist", log_file: Optional[str] = None, log_level: str = "INFO"
) -> logging.Logger:
    """Configure the named logger with a stdout handler and an optional file handler."""
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, log_level.upper()))
    logger.propagate = False

    # Reconfiguring replaces earlier handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


class ConversationLogger(logging.LoggerAdapter):
    """Prefixes every record with ``[channel:session_id]``."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['channel']}:{self.extra['session_id']}] {msg}", kwargs


def conversation_logger(channel: str, session_id: str) -> ConversationLogger:
    return ConversationLogger(logger, {"channel": channel, "session_id": session_id})


# Global logger instance
logger = setup_logger(log_file=settings.log_file or None, log_level=settings.log_level)
