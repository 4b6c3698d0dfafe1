"""Repository for Account model"""

from typing import Sequence

from sqlalchemy import select

from cardregistry.models.account import Account
from cardregistry.models.person import Person
from cardregistry.repository.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    model = Account

    def find_all_by_owner(self, person: Person) -> Sequence[Account]:
        query = select(Account).where(Account.owner_id == person.id)
        return self.db.scalars(query).unique().all()
