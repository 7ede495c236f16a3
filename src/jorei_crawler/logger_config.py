import sys
from pathlib import Path
from typing import Optional

from loguru import logger


def configure_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)
    if log_dir is not None:
        logger.add(
            Path(log_dir) / "jorei_crawler_{time}.log",
            rotation="256 MB",
            retention="10 days",
            compression="zip",
            encoding="utf-8",  # titles are Japanese
            level="DEBUG",
        )
