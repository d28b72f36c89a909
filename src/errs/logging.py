from __future__ import annotations

import logging
from typing import Optional

from rich.logging import RichHandler

from .config import ErrsConfig, get_config


def configure_logging(*, cfg: Optional[ErrsConfig] = None) -> logging.Logger:
    """
    Configure the ``errs`` logger: Rich console output plus an optional plain log file.

    The library itself only emits diagnostics (config fallbacks, unsupported
    format specs); it never logs the errors it builds.

    Returns
    -------
    logger
        The configured logger named "errs".

    Usage example
    -------------
        logger = configure_logging(cfg=ErrsConfig(log_level=logging.DEBUG))
    """
    cfg = cfg if cfg is not None else get_config()

    logger = logging.getLogger("errs")
    logger.setLevel(cfg.log_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    console_handler = RichHandler(show_path=False)
    console_handler.setLevel(cfg.log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if cfg.log_file is not None:
        cfg.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(cfg.log_file, encoding="utf-8")
        file_handler.setLevel(cfg.log_level)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)sZ | %(name)s | %(levelname)s | %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    logger.debug("Logging configured (level=%s, log_file=%s)", cfg.log_level, cfg.log_file)
    return logger
