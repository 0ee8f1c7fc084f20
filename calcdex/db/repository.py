from __future__ import annotations

import json
from datetime import datetime
from typing import List, Optional
from sqlalchemy import Engine, select, asc, desc, func, delete
from sqlalchemy.orm import Session
from .base import Base, engine as default_engine
from .models import PresetRecord
from ..models.pokemon import Preset

def init_db(bind: Engine | None = None):
    Base.metadata.create_all(bind=bind or default_engine)

def to_preset(rec: PresetRecord) -> Preset:
    return Preset(
        calcdex_id=rec.calcdex_id,
        name=rec.name,
        source=rec.source,
        gen=rec.gen,
        format=rec.format,
        species_forme=rec.species_forme,
        ability=rec.ability,
        item=rec.item,
        nature=rec.nature,
        moves=tuple(json.loads(rec.moves_json or "[]")),
        ivs=json.loads(rec.ivs_json or "{}"),
        evs=json.loads(rec.evs_json or "{}"),
        tera_types=tuple(json.loads(rec.tera_types_json or "[]")),
    )

def save_preset(session: Session, preset: Preset, raw_text: str | None = None) -> PresetRecord:
    """Inserta o actualiza por calcdex_id."""
    rec = session.scalar(select(PresetRecord).where(PresetRecord.calcdex_id == preset.calcdex_id))
    if not rec:
        rec = PresetRecord(calcdex_id=preset.calcdex_id)
        session.add(rec)
    rec.name = preset.name
    rec.source = preset.source
    rec.gen = preset.gen
    rec.format = preset.format
    rec.species_forme = preset.species_forme or ""
    rec.ability = preset.ability
    rec.item = preset.item
    rec.nature = preset.nature
    rec.moves_json = json.dumps(list(preset.moves), ensure_ascii=False)
    rec.ivs_json = json.dumps(dict(preset.ivs), ensure_ascii=False)
    rec.evs_json = json.dumps(dict(preset.evs), ensure_ascii=False)
    rec.tera_types_json = json.dumps(list(preset.tera_types), ensure_ascii=False)
    if raw_text is not None:
        rec.raw_text = raw_text
    session.commit()
    return rec

def _filtered(stmt, species: Optional[str], format: Optional[str], gen: Optional[int],
              source: Optional[str], move_contains: Optional[list[str]],
              date_from: Optional[datetime], date_to: Optional[datetime]):
    if species:
        stmt = stmt.where(PresetRecord.species_forme.ilike(species))
    if format:
        stmt = stmt.where(PresetRecord.format.ilike(format))
    if gen is not None:
        stmt = stmt.where(PresetRecord.gen == gen)
    if source:
        stmt = stmt.where(PresetRecord.source == source)
    if date_from is not None:
        stmt = stmt.where(PresetRecord.created_at >= date_from)
    if date_to is not None:
        stmt = stmt.where(PresetRecord.created_at <= date_to)
    if move_contains:
        for token in move_contains:
            stmt = stmt.where(PresetRecord.moves_json.ilike(f"%{token}%"))
    return stmt

def list_presets(
    session: Session,
    species: Optional[str] = None,
    format: Optional[str] = None,
    gen: Optional[int] = None,
    source: Optional[str] = None,
    move_contains: Optional[list[str]] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    order_by: Optional[str] = None,
    order_dir: str = "desc",
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> List[Preset]:
    stmt = _filtered(select(PresetRecord), species, format, gen, source, move_contains, date_from, date_to)
    ob = (order_by or "created").lower()
    use_dir = desc if (order_dir or "desc").lower() == "desc" else asc
    columns = {
        "id": PresetRecord.id,
        "name": PresetRecord.name,
        "species": PresetRecord.species_forme,
        "format": PresetRecord.format,
    }
    stmt = stmt.order_by(use_dir(columns.get(ob, PresetRecord.created_at)), use_dir(PresetRecord.id))
    if offset is not None:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    return [to_preset(rec) for rec in session.scalars(stmt).all()]

def count_presets(
    session: Session,
    species: Optional[str] = None,
    format: Optional[str] = None,
    gen: Optional[int] = None,
    source: Optional[str] = None,
    move_contains: Optional[list[str]] = None,
) -> int:
    stmt = _filtered(select(func.count(PresetRecord.id)), species, format, gen, source, move_contains, None, None)
    return int(session.execute(stmt).scalar_one())

def get_preset(session: Session, calcdex_id: str) -> Preset | None:
    rec = session.scalar(select(PresetRecord).where(PresetRecord.calcdex_id == calcdex_id))
    return to_preset(rec) if rec else None

def delete_presets(session: Session, calcdex_ids: list[str]) -> int:
    if not calcdex_ids:
        return 0
    res = session.execute(delete(PresetRecord).where(PresetRecord.calcdex_id.in_(calcdex_ids)))
    session.commit()
    return int(res.rowcount or 0)
