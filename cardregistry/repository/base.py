"""Base repository: the minimal durable store contract shared by all records.

Lookups go by business key only, the surrogate `id` stays inside the store.
Repositories never commit, the surrounding UnitOfWork does.
"""

from typing import Generic, Type, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from cardregistry.models.base import BaseModel

_M = TypeVar("_M", bound=BaseModel)  # model


class BaseRepository(Generic[_M]):
    model: Type[_M]
    db: Session

    def __init__(self, db: Session):
        self.db = db

    def find_by_business_key(self, key: str) -> _M | None:
        column = getattr(self.model, self.model.business_key)
        return self.db.scalars(select(self.model).where(column == key)).first()

    def save(self, obj: _M) -> _M:
        """Persist `obj` and return the session-bound copy with its identity assigned.

        Merging leaves the caller's instance (and whatever it references) untouched,
        so cached records can be referenced from several sessions at once.
        """
        merged = self.db.merge(obj)
        self.db.flush()
        self.db.refresh(merged)
        return merged

    def delete_all(self) -> int:
        result = self.db.execute(delete(self.model))
        return result.rowcount

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(self.model)) or 0
