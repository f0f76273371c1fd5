"""
Logging helpers.

Records about an image carry three extra fields, `sender`, `idx_image` and
`idx_chain`, attached through `ImageLoggerAdapter`. `configure_logging` sets up
a console handler that prints them, and `LogBuffer` keeps entries in memory so
they can be read back after a run.
"""
import logging
import threading
from dataclasses import dataclass
from typing import List, Optional

PACKAGE_LOGGER = "spinham"
LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(sender)s] [%(idx_image)s/%(idx_chain)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ImageLoggerAdapter(logging.LoggerAdapter):
    """Tags every record with the sender and the image/chain it refers to."""

    def __init__(self, logger: logging.Logger, sender: str = "API", idx_image: int = -1, idx_chain: int = -1, **extra):
        super().__init__(logger, {"sender": sender, "idx_image": idx_image, "idx_chain": idx_chain, **extra})

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


class ImageFieldsFilter(logging.Filter):
    """Fills in the image fields for records that were not logged through an adapter."""

    def filter(self, record):
        for name, default in (("sender", "-"), ("idx_image", "-"), ("idx_chain", "-")):
            if not hasattr(record, name):
                setattr(record, name, default)
        return True


def configure_logging(level=logging.INFO) -> logging.Logger:
    """Attach a console handler with the image-aware format to the package logger."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    if not any(getattr(h, "_spinham_console", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler.addFilter(ImageFieldsFilter())
        handler._spinham_console = True
        logger.addHandler(handler)
    return logger


@dataclass(frozen=True)
class LogEntry:
    time: float
    level: int
    sender: str
    message: str
    idx_image: int
    idx_chain: int


class LogBuffer(logging.Handler):
    """
    In-memory log of one state.

    Only records whose `state_id` extra matches the buffer's are kept, so
    several states can share the package logger.
    """

    def __init__(self, state_id: str, level=logging.NOTSET):
        super().__init__(level)
        self.state_id = state_id
        self._entries: List[LogEntry] = []
        self._entries_lock = threading.Lock()

    def emit(self, record):
        if getattr(record, "state_id", None) != self.state_id:
            return
        entry = LogEntry(
            time=record.created,
            level=record.levelno,
            sender=getattr(record, "sender", "-"),
            message=record.getMessage(),
            idx_image=getattr(record, "idx_image", -1),
            idx_chain=getattr(record, "idx_chain", -1),
        )
        with self._entries_lock:
            self._entries.append(entry)

    def __len__(self):
        return len(self._entries)

    def entries(self, min_level: int = logging.NOTSET, idx_image: Optional[int] = None, idx_chain: Optional[int] = None) -> List[LogEntry]:
        """Stored entries, optionally filtered by level and image/chain."""
        with self._entries_lock:
            entries = list(self._entries)
        return [
            e for e in entries
            if e.level >= min_level
            and (idx_image is None or e.idx_image == idx_image)
            and (idx_chain is None or e.idx_chain == idx_chain)
        ]

    def clear(self):
        with self._entries_lock:
            self._entries.clear()
