"""
Workspace console.

Bounded, ordered buffer of user-visible messages. It is the default
error-reporting sink for the poller and the coordinator, and
``ConsoleLogHandler`` can mirror ``logging`` records into it.
"""

import logging
from collections import deque
from typing import Callable, Deque, List, Optional

from ..models.workspace import LogLevel, LogMessage

logger = logging.getLogger(__name__)

ConsoleListener = Callable[[LogMessage], None]


class ConsoleLog:
    """Console message buffer keeping the most recent entries"""

    def __init__(self, max_entries: int = 500):
        if max_entries < 1:
            raise ValueError("Console must keep at least one entry")
        self.max_entries = max_entries
        self._entries: Deque[LogMessage] = deque(maxlen=max_entries)
        self._listeners: List[ConsoleListener] = []

    @property
    def entries(self) -> List[LogMessage]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add_listener(self, listener: ConsoleListener) -> None:
        self._listeners.append(listener)

    def log(self, level: LogLevel, message: str) -> LogMessage:
        entry = LogMessage(level=level, message=message)
        self._entries.append(entry)
        for listener in list(self._listeners):
            try:
                listener(entry)
            except Exception:
                logger.exception("Console listener failed")
        return entry

    def info(self, message: str) -> LogMessage:
        return self.log(LogLevel.INFO, message)

    def warning(self, message: str) -> LogMessage:
        return self.log(LogLevel.WARNING, message)

    def error(self, message: str) -> LogMessage:
        return self.log(LogLevel.ERROR, message)

    def report_error(self, message: str) -> None:
        """Error-reporting collaborator entry point"""
        self.error(message)

    def errors(self) -> List[LogMessage]:
        return [entry for entry in self._entries if entry.level == LogLevel.ERROR]

    def clear(self) -> int:
        """Remove all entries and return how many were removed"""
        count = len(self._entries)
        self._entries.clear()
        return count


class ConsoleLogHandler(logging.Handler):
    """Forwards log records to a ConsoleLog"""

    LEVELS = (
        (logging.ERROR, LogLevel.ERROR),
        (logging.WARNING, LogLevel.WARNING),
    )

    def __init__(self, console: ConsoleLog, level: int = logging.INFO):
        super().__init__(level=level)
        self.console = console

    @classmethod
    def to_console_level(cls, levelno: int) -> LogLevel:
        for threshold, console_level in cls.LEVELS:
            if levelno >= threshold:
                return console_level
        return LogLevel.INFO

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.console.log(self.to_console_level(record.levelno), self.format(record))
        except Exception:
            self.handleError(record)


def attach_console_handler(
    console: ConsoleLog,
    logger_name: str = "deck_workspace",
    level: int = logging.INFO
) -> ConsoleLogHandler:
    """Mirror records of a logger hierarchy into the console"""
    handler = ConsoleLogHandler(console, level=level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logging.getLogger(logger_name).addHandler(handler)
    return handler


def detach_console_handler(handler: ConsoleLogHandler, logger_name: Optional[str] = "deck_workspace") -> None:
    logging.getLogger(logger_name).removeHandler(handler)
