import logging
from pathlib import Path
from typing import Union


def setup_logger(name: str, log_dir: Union[str, Path] = "logs") -> logging.Logger:
    """
    Set up a logger writing export warnings to both a file and the console.

    Args:
        name: Name of the logger, typically __name__ from the calling module
        log_dir: Directory for export.log, created if missing

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.WARNING)

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    # Add handlers to logger if they haven't been added already
    if not logger.handlers:
        fh = logging.FileHandler(log_dir / "export.log", encoding="utf-8")
        fh.setLevel(logging.WARNING)
        fh.setFormatter(formatter)

        ch = logging.StreamHandler()
        ch.setLevel(logging.WARNING)
        ch.setFormatter(formatter)

        logger.addHandler(fh)
        logger.addHandler(ch)

    return logger
