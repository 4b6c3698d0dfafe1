"""Issuer model. A bank issuing cards, identified by a 6 digit code."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from cardregistry.models.base import BaseModel


class Issuer(BaseModel):
    __tablename__ = "issuers"
    business_key = "issuer_code"

    issuer_code: Mapped[str] = mapped_column(String(6), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(100))
