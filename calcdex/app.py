"""Punto de arranque: logging, base de datos y dex listos para usar.

Usage:
    from calcdex.app import create_controller
    ctrl = create_controller()
    ctrl.sync(battle_json)
"""
from __future__ import annotations
import logging
from typing import Optional

from .controllers.calcdex_controller import CalcdexController
from .db.base import SessionLocal, engine as default_engine, make_engine, make_session_factory
from .db.repository import init_db
from .services.dex import PokeApiDex
from .utils.logging_setup import setup_logging

log = logging.getLogger(__name__)


def create_controller(
    db_url: Optional[str] = None,
    cache_dir: Optional[str] = None,
    log_level: Optional[int] = None,
    log_to_file: bool = False,
) -> CalcdexController:
    setup_logging(log_level, log_to_file=log_to_file)

    if db_url:
        engine = make_engine(db_url)
        factory = make_session_factory(engine)
    else:
        engine, factory = default_engine, SessionLocal
    init_db(engine)

    dex = PokeApiDex(cache_dir=cache_dir)
    log.info("Calcdex listo (db=%s, cache=%s)", engine.url, dex.cache_dir)
    return CalcdexController(dex=dex, session_factory=factory)
