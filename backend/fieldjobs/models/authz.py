from __future__ import annotations
from sqlalchemy.orm import declarative_base, relationship, Mapped, mapped_column
from sqlalchemy import String, Integer, Boolean, ForeignKey, DateTime, text
from typing import Optional

Base = declarative_base()

# Roles are fixed; the permission matrix lives in fieldjobs.constants.permissions
ROLE_ADMIN = 'admin'
ROLE_MANAGER = 'manager'
ROLE_VIEWER = 'viewer'
ROLE_ENGINEER = 'engineer'
AGENCY_ROLES = (ROLE_ADMIN, ROLE_MANAGER, ROLE_VIEWER)
ALL_ROLES = AGENCY_ROLES + (ROLE_ENGINEER,)


class Agency(Base):
    __tablename__ = 'agencies'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    users = relationship('User', back_populates='agency')
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'))


class User(Base):
    __tablename__ = 'users'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(32))
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ROLE_VIEWER)
    # engineers may be freelance (no agency); agency roles always carry one
    agency_id: Mapped[Optional[int]] = mapped_column(ForeignKey('agencies.id', ondelete='SET NULL'), nullable=True, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    agency = relationship('Agency', back_populates='users')
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))

    @property
    def is_engineer(self) -> bool:
        return self.role == ROLE_ENGINEER

    def set_password(self, raw: str):
        from werkzeug.security import generate_password_hash
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        from werkzeug.security import check_password_hash
        return check_password_hash(self.password_hash, raw)
