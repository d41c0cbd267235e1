from __future__ import annotations
import uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, ForeignKey, DateTime, text
from typing import Optional
from .authz import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Job(Base):
    __tablename__ = 'jobs'
    # Status constants
    STATUS_PENDING = 'pending'
    STATUS_ASSIGNED = 'assigned'
    STATUS_ACCEPTED = 'accepted'
    STATUS_TRAVELLING = 'travelling'
    STATUS_ONSITE = 'onsite'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    ALL_STATUSES = (
        STATUS_PENDING, STATUS_ASSIGNED, STATUS_ACCEPTED, STATUS_TRAVELLING,
        STATUS_ONSITE, STATUS_COMPLETED, STATUS_CANCELLED,
    )
    # Urgency constants, most pressing first
    URGENCY_EMERGENCY = 'emergency'
    URGENCY_URGENT = 'urgent'
    URGENCY_NORMAL = 'normal'
    URGENCY_SCHEDULED = 'scheduled'
    ALL_URGENCIES = (URGENCY_EMERGENCY, URGENCY_URGENT, URGENCY_NORMAL, URGENCY_SCHEDULED)
    URGENCY_RANK = {u: i for i, u in enumerate(ALL_URGENCIES)}

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    job_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    agency_id: Mapped[int] = mapped_column(Integer, ForeignKey('agencies.id', ondelete='SET NULL'), nullable=True, index=True)
    assigned_engineer_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    job_type: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_PENDING, index=True)
    urgency: Mapped[str] = mapped_column(String(16), nullable=False, default=URGENCY_NORMAL)
    assigned_at: Mapped[Optional[str]] = mapped_column(DateTime(timezone=True), nullable=True)
    accepted_at: Mapped[Optional[str]] = mapped_column(DateTime(timezone=True), nullable=True)
    started_at: Mapped[Optional[str]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[str]] = mapped_column(DateTime(timezone=True), nullable=True)
    history = relationship('JobStatusHistory', back_populates='job', cascade='all, delete-orphan', passive_deletes=True)
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'))
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))

# Status flow: pending -> assigned -> accepted -> travelling -> onsite -> completed
# Any non-terminal status may move to cancelled; completed and cancelled are terminal.
