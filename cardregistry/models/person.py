"""Person model. Owns accounts, identified by a 10 digit national code."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from cardregistry.models.base import BaseModel


class Person(BaseModel):
    __tablename__ = "persons"
    business_key = "national_code"

    national_code: Mapped[str] = mapped_column(String(10), unique=True, index=True)
    first_name: Mapped[str] = mapped_column(String(50))
    last_name: Mapped[str] = mapped_column(String(50))
    phone: Mapped[str] = mapped_column(String(11))
    address: Mapped[str] = mapped_column(String(255))
