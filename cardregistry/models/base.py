"""Base for all ORM models"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class BaseModel(DeclarativeBase):
    # do not create separate table for this class
    __abstract__ = True

    # name of the natural key column, unique within the table
    business_key: ClassVar[str]

    # store-internal identity, never exposed as a lookup key
    id: Mapped[int] = mapped_column(primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), nullable=False
    )

    @property
    def key(self) -> str:
        return getattr(self, self.business_key)

    def __repr__(self):
        return f"<{self.__class__.__name__}(id={self.id!r}, {self.business_key}={self.key!r})>"
