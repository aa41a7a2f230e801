"""Declarative base and shared column mixins for the identity tables."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all identity ORM models."""

    pass


class TimestampMixin:
    """
    Audit timestamps. Both values are supplied by the caller or stamped by the
    repository from the injected clock; the database never fills them in.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, comment="Date and time the row was created."
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, comment="Date and time of the last update."
    )
