"""Account model"""

import enum

from sqlalchemy import Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cardregistry.models.base import BaseModel
from cardregistry.models.person import Person


class AccountType(enum.Enum):
    CURRENT = "current"
    SAVINGS = "savings"
    LONG_TERM = "long_term"


class Account(BaseModel):
    __tablename__ = "accounts"
    business_key = "account_number"

    account_number: Mapped[str] = mapped_column(String(10), unique=True, index=True)
    account_type: Mapped[AccountType] = mapped_column(Enum(AccountType))

    owner_id: Mapped[int] = mapped_column(ForeignKey("persons.id"), nullable=False)
    # joined, so the owner is still readable once the record sits in the cache
    owner: Mapped[Person] = relationship(lazy="joined")
