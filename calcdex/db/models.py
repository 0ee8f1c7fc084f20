from __future__ import annotations
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column
from .base import Base

class PresetRecord(Base):
    __tablename__ = "presets"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    calcdex_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(128))
    source: Mapped[str | None] = mapped_column(String(32), nullable=True)
    gen: Mapped[int | None] = mapped_column(Integer, nullable=True)
    format: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    species_forme: Mapped[str] = mapped_column(String(64), index=True)
    ability: Mapped[str | None] = mapped_column(String(128), nullable=True)
    item: Mapped[str | None] = mapped_column(String(128), nullable=True)
    nature: Mapped[str | None] = mapped_column(String(32), nullable=True)

    moves_json: Mapped[str] = mapped_column(Text)
    ivs_json: Mapped[str] = mapped_column(Text)
    evs_json: Mapped[str] = mapped_column(Text)
    tera_types_json: Mapped[str] = mapped_column(Text, default="[]")

    raw_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
