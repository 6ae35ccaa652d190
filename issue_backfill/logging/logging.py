"""
Run Logging
===========

structlog JSON logging for backfill runs.

Each run appends to two rotating files in the log directory:
backfill.log at the configured level and errors.log at ERROR, so the
issues that failed in a run can be looked up after it ends. Human-facing
progress goes to stderr through ``cli.output`` and never through these
handlers.
"""

import logging
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path
import tempfile

import structlog

LOG_DIR_FALLBACK_NAME = "issue_backfill_logs"
MAIN_LOG = "backfill.log"
ERROR_LOG = "errors.log"
MAX_LOG_BYTES = 10_485_760


def _writable(path: Path) -> bool:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError:
        return False
    return os.access(path, os.W_OK)


def _get_log_directory() -> Path:
    """
    Get a writable log directory.

    Priority:
    1. LOG_DIR environment variable
    2. Current working directory / logs
    3. System temp directory / issue_backfill_logs
    """
    candidates = []
    if env_log_dir := os.environ.get("LOG_DIR"):
        candidates.append(Path(env_log_dir))
    try:
        candidates.append(Path.cwd() / "logs")
    except OSError:
        pass

    for log_dir in candidates:
        if _writable(log_dir):
            return log_dir

    log_dir = Path(tempfile.gettempdir()) / LOG_DIR_FALLBACK_NAME
    log_dir.mkdir(exist_ok=True)
    return log_dir


def _validate_log_level(log_level: str) -> int:
    """
    Convert a level name (case-insensitive) to its numeric value.

    Raises:
        ValueError: If log_level is not a known logging level name
    """
    level = logging.getLevelName(str(log_level).upper())
    if not isinstance(level, int):
        raise ValueError(
            f"Invalid log level: '{log_level}'. Must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL"
        )
    return level


class LogManager:
    """
    Process-wide logging for the backfill.

    The first `setup` call installs the file handlers and configures
    structlog; later calls only change the level.
    """

    log_dir: Path | None = None
    _main_handler: RotatingFileHandler | None = None

    @classmethod
    def setup(cls, log_level: str = "INFO") -> None:
        """
        Configure logging at `log_level`.

        Raises:
            ValueError: If log_level is not a valid level name
        """
        level = _validate_log_level(log_level)
        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        if cls._main_handler is not None:
            cls._main_handler.setLevel(level)
            return

        log_dir = _get_log_directory()

        main_handler = RotatingFileHandler(log_dir / MAIN_LOG, maxBytes=MAX_LOG_BYTES, backupCount=5)
        main_handler.setLevel(level)
        error_handler = RotatingFileHandler(log_dir / ERROR_LOG, maxBytes=MAX_LOG_BYTES, backupCount=3)
        error_handler.setLevel(logging.ERROR)

        for handler in (main_handler, error_handler):
            handler.setFormatter(logging.Formatter("%(message)s"))
            root_logger.addHandler(handler)

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        cls.log_dir = log_dir
        cls._main_handler = main_handler
        structlog.get_logger().info("logging_initialized", log_dir=str(log_dir), level=logging.getLevelName(level))

    @classmethod
    def get_logger(cls, command_name: str, run_id: str, **context):
        """
        Get a logger bound to a command and run.

        Args:
            command_name: Name of the command (e.g. "populate")
            run_id: Identifier shared by every line of one run
            **context: Extra fields bound to every line (repository, index, ...)
        """
        if cls._main_handler is None:
            cls.setup()

        return structlog.get_logger().bind(command=command_name, run_id=run_id, **context)
