"""
Customer Details Backend — Customer SQLAlchemy Models
=======================================================

What:  ORM models for the `user_data` (customers) and `addresses` tables.
Why:   Maps customer records to Python objects for the customer services.
How:   Inherits from the shared DeclarativeBase; Alembic reads these for migrations.
Who:   Used by the edit, distance, search, listing and seed services.

Table Design:
    - String primary keys: customer ids come from the imported data set
      (24-char hex strings), so they are stored as given rather than generated.
    - Every demographic column is nullable; imported documents are uneven.
    - tags: JSON array (JSONB on PostgreSQL).
    - address_id: many-to-one; several customers may share one address row.
    - idx_addresses_zip_code: backs the zip code grouping and search.
"""

from typing import List, Optional

from sqlalchemy import JSON, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

# Plain JSON everywhere, JSONB when running on PostgreSQL
TagsType = JSON().with_variant(JSONB(), "postgresql")


class AddressData(Base):
    """A postal address referenced by one or more customers."""

    __tablename__ = "addresses"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    house_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    street: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    zip_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    __table_args__ = (
        Index("idx_addresses_zip_code", "zip_code"),
    )

    def __repr__(self) -> str:
        return f"<AddressData(id='{self.id}', zip_code='{self.zip_code}')>"


class UserData(Base):
    """
    A customer record.

    Not to be confused with IdentityUser: a UserData row is managed data,
    an IdentityUser is a login account that manages it.

    Query Patterns:
        - Single customer: WHERE id = :id (primary key)
        - Search: ILIKE over text columns joined to addresses
        - Listings: ORDER BY "index" with addresses eagerly loaded
    """

    __tablename__ = "user_data"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    # "index" is the position in the source data set, used for stable ordering
    index: Mapped[Optional[int]] = mapped_column("index", Integer, nullable=True)
    age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    eye_color: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    company: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    about: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    registered: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    tags: Mapped[Optional[List[str]]] = mapped_column(TagsType, nullable=True)

    address_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        ForeignKey("addresses.id", ondelete="SET NULL"),
        nullable=True,
    )
    address: Mapped[Optional[AddressData]] = relationship(lazy="raise")

    __table_args__ = (
        Index("idx_user_data_index", "index"),
    )

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def __repr__(self) -> str:
        return f"<UserData(id='{self.id}', name='{self.name}')>"
