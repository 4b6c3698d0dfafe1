"""Schemas for cards and the records they reference"""

from pydantic import Field

from cardregistry.models.account import AccountType
from cardregistry.models.card import CardType
from cardregistry.schemas.base import BaseReadSchema, BaseSchema


class PersonSchema(BaseSchema):
    national_code: str
    first_name: str
    last_name: str


class IssuerSchema(BaseSchema):
    issuer_code: str
    name: str


class AccountSchema(BaseSchema):
    account_number: str
    account_type: AccountType
    owner: PersonSchema


class CardReadSchema(BaseReadSchema):
    card_number: str
    card_type: CardType
    active: bool
    expiration_month: str
    expiration_year: str
    expired: bool
    account: AccountSchema
    issuer: IssuerSchema


class CardCreateSchema(BaseSchema):
    card_number: str = Field(pattern=r"^\d{16}$")
    card_type: CardType
    expiration_month: str = Field(pattern=r"^(0[1-9]|1[0-2])$")
    expiration_year: str = Field(pattern=r"^\d{4}$")
    account_number: str = Field(pattern=r"^\d{10}$")
    issuer_code: str = Field(pattern=r"^\d{6}$")
