"""Repository for Card model"""

from typing import Sequence

from sqlalchemy import select

from cardregistry.models.account import Account
from cardregistry.models.card import Card
from cardregistry.repository.base import BaseRepository


class CardRepository(BaseRepository[Card]):
    model = Card

    def find_all_by_account(self, account: Account) -> Sequence[Card]:
        query = select(Card).where(Card.account_id == account.id)
        return self.db.scalars(query).unique().all()
