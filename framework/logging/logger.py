import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Iterator, Optional
from loguru import logger
from framework.config import settings

# Trace id of the current logical operation (one request, one job, ...)
_current_trace_id: ContextVar[Optional[str]] = ContextVar("current_trace_id", default=None)

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<magenta>Trace:{extra[trace_id]}</magenta> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]}:{function}:{line} | Trace:{extra[trace_id]} - {message}"


class LogConfig:
    """Global logging configuration using Loguru."""

    @staticmethod
    def _log_dir() -> Path:
        log_dir = Path(settings.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        return log_dir

    @classmethod
    def setup_logging(cls, level: Optional[str] = None):
        """
        Console plus two rotating files: a daily full log and an error log.

        Records without a trace id (outside trace_context) are tagged "system".
        """
        log_dir = cls._log_dir()

        logger.remove()
        logger.configure(extra={"trace_id": "system", "name": "app"})

        logger.add(
            sys.stdout,
            enqueue=True,
            backtrace=True,
            diagnose=settings.DEBUG,
            format=CONSOLE_FORMAT,
            level=level or settings.LOG_LEVEL,
        )
        logger.add(
            log_dir / "data_access_{time:YYYY-MM-DD}.log",
            rotation="00:00",
            retention=settings.LOG_FILE_RETENTION,
            compression="zip",
            enqueue=True,
            format=FILE_FORMAT,
            level="DEBUG",
        )
        logger.add(
            log_dir / "data_access_error_{time:YYYY-MM-DD}.log",
            rotation="100 MB",
            enqueue=True,
            format=FILE_FORMAT,
            level="ERROR",
        )


@contextmanager
def trace_context(trace_id: Optional[str] = None) -> Iterator[str]:
    """Tag every log line emitted inside the block with a trace id."""
    trace_id = trace_id or uuid.uuid4().hex
    token = _current_trace_id.set(trace_id)
    try:
        with logger.contextualize(trace_id=trace_id):
            yield trace_id
    finally:
        _current_trace_id.reset(token)


def current_trace_id() -> str:
    return _current_trace_id.get() or "unknown"


def get_logger(name: str = None):
    """
    Get logger instance.

    The trace id is not bound here so that module-level loggers pick up the
    one set by trace_context() at log time.
    """
    if name:
        return logger.bind(name=name)
    return logger
