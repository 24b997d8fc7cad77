import logging
import sys
from pathlib import Path
from groundhog.core.config import settings

def setup_logging() -> logging.Logger:
    """Setup application logging"""

    # Create logger
    logger = logging.getLogger("groundhog")
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    if logger.handlers:
        return logger

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Console always, file only when a log directory is configured
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_dir:
        Path(settings.log_dir).mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(Path(settings.log_dir) / "application.log"))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # handled here only, not again by the root handler
    logger.propagate = False

    return logger
