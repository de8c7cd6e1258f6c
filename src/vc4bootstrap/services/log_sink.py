"""Scoped console + file logging for a single installation run."""

import logging
import os
from typing import Optional


class LogSink:
    """Mirrors the run logger into an append-only log file while active.

    Console output is already handled by the root ``RichHandler``; this adds the
    file side on ``__enter__`` and guarantees it is flushed and detached on every
    exit path.
    """

    FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

    def __init__(self, logger: logging.Logger, log_file: str, level: int = logging.INFO):
        self.logger = logger
        self.log_file = log_file
        self.level = level
        self.handler: Optional[logging.FileHandler] = None

    def __enter__(self) -> "LogSink":
        try:
            os.makedirs(os.path.dirname(self.log_file) or ".", exist_ok=True)
            handler = logging.FileHandler(self.log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            self.logger.warning(
                "Could not open log file %s (%s). Logging to console only.",
                self.log_file,
                exc,
            )
            return self

        handler.setLevel(self.level)
        handler.setFormatter(logging.Formatter(self.FORMAT))
        self.logger.addHandler(handler)
        self.handler = handler
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @property
    def active(self) -> bool:
        return self.handler is not None

    def close(self):
        if self.handler is None:
            return
        self.handler.flush()
        self.logger.removeHandler(self.handler)
        self.handler.close()
        self.handler = None
