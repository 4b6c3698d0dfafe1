"""Card model. Belongs to an account, issued by an issuer."""

import calendar
import enum
from datetime import date

from sqlalchemy import Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cardregistry.models.account import Account
from cardregistry.models.base import BaseModel
from cardregistry.models.issuer import Issuer


class CardType(enum.Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class Card(BaseModel):
    __tablename__ = "cards"
    business_key = "card_number"

    card_number: Mapped[str] = mapped_column(String(16), unique=True, index=True)
    card_type: Mapped[CardType] = mapped_column(Enum(CardType))
    active: Mapped[bool] = mapped_column(default=True)
    expiration_month: Mapped[str] = mapped_column(String(2))
    expiration_year: Mapped[str] = mapped_column(String(4))

    account_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"), nullable=False)
    account: Mapped[Account] = relationship(lazy="joined")

    issuer_id: Mapped[int] = mapped_column(ForeignKey("issuers.id"), nullable=False)
    issuer: Mapped[Issuer] = relationship(lazy="joined")

    def is_expired(self, today: date | None = None) -> bool:
        """Card is valid through the last day of its expiration month.

        Year and month are compared as plain numbers, whatever calendar they are
        written in. Garbage in either field means expired.
        """
        today = today or date.today()
        try:
            year = int(self.expiration_year)
            month = int(self.expiration_month)
            last_day = calendar.monthrange(year, month)[1]
        except (TypeError, ValueError):
            return True
        return (year, month, last_day) < (today.year, today.month, today.day)

    @property
    def expired(self) -> bool:
        return self.is_expired()
