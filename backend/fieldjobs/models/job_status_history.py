from __future__ import annotations
import uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Text, JSON, ForeignKey, DateTime, func
from typing import Optional

from .authz import Base


class JobStatusHistory(Base):
    """Append-only audit row written once per accepted status transition.

    ``location`` holds a GeoJSON point, ``{"type": "Point", "coordinates": [lng, lat]}``.
    """
    __tablename__ = 'job_status_history'
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    job_id: Mapped[str] = mapped_column(String(36), ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    changed_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    location: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    job = relationship('Job', back_populates='history')
