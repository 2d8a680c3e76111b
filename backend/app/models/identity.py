"""
Customer Details Backend — Identity SQLAlchemy Models
=======================================================

What:  Login accounts, roles and their many-to-many membership table.
Why:   The Login endpoint checks credentials and reads the account's role
       to put into the issued token.
Who:   Used by LoginService (lookup) and SeedService (provisioning).

Lookup rules:
    Usernames and role names are stored as typed and also upper-cased in a
    unique `normalized_*` column. Lookups compare normalized values, so
    "Alice" and "alice" are the same account.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Column, DateTime, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

ADMIN_ROLE = "Admin"
CLIENT_ROLE = "Client"
DEFAULT_ROLES = (ADMIN_ROLE, CLIENT_ROLE)


def normalize_name(value: str) -> str:
    return value.strip().upper()


def _new_id() -> str:
    return str(uuid.uuid4())


identity_user_roles = Table(
    "identity_user_roles",
    Base.metadata,
    Column("user_id", String(36), ForeignKey("identity_users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", String(36), ForeignKey("identity_roles.id", ondelete="CASCADE"), primary_key=True),
)


class IdentityRole(Base):
    __tablename__ = "identity_roles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    normalized_name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<IdentityRole(name='{self.name}')>"


class IdentityUser(Base):
    """
    A login account.

    roles are loaded eagerly (selectin) and ordered by name, so "the
    account's first role" is deterministic when issuing a token.
    """

    __tablename__ = "identity_users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    username: Mapped[str] = mapped_column(String(150), nullable=False)
    normalized_username: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # bcrypt hash, always 60 characters
    password_hash: Mapped[str] = mapped_column(String(60), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    roles: Mapped[List[IdentityRole]] = relationship(
        secondary=identity_user_roles,
        lazy="selectin",
        order_by=IdentityRole.name,
    )

    @property
    def primary_role(self) -> Optional[str]:
        return self.roles[0].name if self.roles else None

    def __repr__(self) -> str:
        return f"<IdentityUser(username='{self.username}')>"
