import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union


class UTCFormatter(logging.Formatter):
    """
    Formatter that renders every timestamp as ISO-8601 UTC.
    """

    converter = time.gmtime

    def formatTime(self, record, datefmt=None):
        ct = self.converter(record.created)
        if datefmt:
            return time.strftime(datefmt, ct)
        t = time.strftime("%Y-%m-%dT%H:%M:%S", ct)
        return "%s.%03dZ" % (t, record.msecs)


def get_logger(name: str) -> logging.Logger:
    """
    Returns a standard logger instance.

    Library modules name their logger after the module path so that
    everything lives under the ``flash_mongo`` namespace:
    >>> logger = get_logger(__name__)
    """
    return logging.getLogger(name)


def setup_logging(
    level: Union[int, str, None] = None,
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: int = 10_485_760,  # 10MB
    backup_count: int = 5,
    capture_roots: bool = False,
    module_name: str = "flash_mongo",
) -> logging.Logger:
    """
    Configure logging for the record layer.

    Args:
        level: Logging level. Defaults to ``LOG_LEVEL`` from the settings.
        log_file: Optional path of a rotating log file.
        capture_roots: If True, configures the root logger instead of
                       only the ``flash_mongo`` namespace.

    Returns:
        The logger that received the handlers.
    """
    if level is None:
        from .config import mongo_settings

        level = mongo_settings.LOG_LEVEL
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    target_logger = (
        logging.getLogger() if capture_roots else logging.getLogger(module_name)
    )

    # Reconfiguration replaces handlers instead of stacking them
    target_logger.handlers.clear()
    target_logger.setLevel(level)

    formatter = UTCFormatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    target_logger.addHandler(console)

    if log_file:
        file_path = Path(log_file).resolve()
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                file_path,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            target_logger.addHandler(file_handler)
        except OSError as e:
            # Read-only filesystems keep the console handler only
            sys.stderr.write(f"Failed to setup log file: {e}\n")

    if not capture_roots:
        target_logger.propagate = False

    return target_logger
