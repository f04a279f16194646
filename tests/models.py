from __future__ import annotations

import datetime as dt
import enum
from decimal import Decimal

from sqlalchemy import Enum, ForeignKey, Index, Numeric, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class Status(enum.Enum):
    DRAFT = 'draft'
    PUBLISHED = 'published'


class Item(Base):
    __tablename__ = 'item'
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(50))


class Article(Base):
    """Covers every field kind the query layer distinguishes: nullable, unique, temporal, enum, bool, decimal."""

    __tablename__ = 'article'
    __table_args__ = (UniqueConstraint('slug'),)

    id: Mapped[int] = mapped_column(primary_key=True)
    slug: Mapped[str] = mapped_column(String(50))
    title: Mapped[str] = mapped_column(String(100))
    subtitle: Mapped[str | None] = mapped_column(String(100), nullable=True)
    score: Mapped[int | None] = mapped_column(nullable=True)
    price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    published_at: Mapped[dt.datetime | None] = mapped_column(nullable=True)
    is_featured: Mapped[bool] = mapped_column(default=False)
    status: Mapped[Status] = mapped_column(Enum(Status), default=Status.DRAFT)
    item_id: Mapped[int | None] = mapped_column(ForeignKey('item.id'), nullable=True)

    item: Mapped[Item | None] = relationship()


class Membership(Base):
    """Composite primary key, no single unique column."""

    __tablename__ = 'membership'
    __table_args__ = (Index('ix_membership_code', 'code', unique=True),)

    group_id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    role: Mapped[str] = mapped_column(String(20))
