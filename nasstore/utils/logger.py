"""
Logging setup for command line tools.

The web application logs through Flask's app.logger; CLI tools attach
handlers to the shared 'homeserver' logger here.
"""
import sys
import logging
import logging.handlers
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(verbose: bool = False, log_file: Optional[str] = None,
                  max_file_size_mb: int = 10, backup_count: int = 5) -> logging.Logger:
    """
    Attach console and optional rotating file handlers to the 'homeserver' logger.

    Args:
        verbose: Log DEBUG to the console instead of INFO
        log_file: Optional path of a rotating log file
        max_file_size_mb: Rotation size of the log file
        backup_count: Number of rotated files to keep

    Returns:
        logging.Logger: The configured logger
    """
    logger = logging.getLogger('homeserver')
    logger.setLevel(logging.DEBUG)

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count
        )
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
