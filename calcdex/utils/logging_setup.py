"""Logging setup utility for calcdex.

Usage:
    from calcdex.utils.logging_setup import setup_logging
    setup_logging()              # nivel de CALCDEX_LOG_LEVEL, o INFO
    setup_logging(logging.DEBUG, log_to_file=True)
"""
from __future__ import annotations
import logging
import logging.handlers
import os
from pathlib import Path
import sys

LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'

# librerías que hablan demasiado en INFO
QUIET_LOGGERS = ('urllib3', 'sqlalchemy.engine')


def level_from_env(default: int = logging.INFO) -> int:
    raw = (os.environ.get('CALCDEX_LOG_LEVEL') or '').strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default


def setup_logging(level: int | None = None, log_to_file: bool = False, log_dir: str | None = None) -> None:
    logger = logging.getLogger()
    if logger.handlers:
        # ya configurado (o lo configura el host)
        return
    logger.setLevel(level if level is not None else level_from_env())

    fmt = logging.Formatter(LOG_FORMAT)

    ch = logging.StreamHandler(stream=sys.stdout)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_to_file:
        path = Path(log_dir or (Path.cwd() / 'logs'))
        path.mkdir(parents=True, exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(path / 'calcdex.log', maxBytes=2_000_000, backupCount=3, encoding='utf-8')
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, logger.level))
