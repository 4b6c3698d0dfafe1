"""Card service"""

import logging

from fastapi import Depends

from cardregistry.cache import RegistryCache
from cardregistry.dependencies.services import get_registry_cache
from cardregistry.errors.card import CardNumberAlreadyExists
from cardregistry.errors.common import NotFoundError
from cardregistry.models.card import Card
from cardregistry.schemas.card import CardCreateSchema

logger = logging.getLogger(__name__)


class CardService:
    def __init__(self, cache: RegistryCache = Depends(get_registry_cache)):
        self.cache = cache

    def get_cards_by_national_code(self, national_code: str) -> list[Card]:
        cards = self.cache.get_cards_by_national_code(national_code)
        if not cards:
            raise NotFoundError(f"no cards for national_code={national_code}")
        return sorted(cards, key=lambda card: card.card_number)

    def create_card(self, schema: CardCreateSchema) -> Card:
        """
        Issue a new active card on an existing account.

        The account and the issuer must exist. Card numbers are unique, and the owner
        may hold only one card of a given type from a given issuer.
        """
        logger.info("Creating card: %s", schema.card_number)
        account = self.cache.find_account(schema.account_number)
        if account is None:
            raise NotFoundError(f"Account account_number={schema.account_number}")
        issuer = self.cache.find_issuer(schema.issuer_code)
        if issuer is None:
            raise NotFoundError(f"Issuer issuer_code={schema.issuer_code}")

        owner_cards = self.cache.get_cards_by_national_code(account.owner.national_code)
        if any(card.card_number == schema.card_number for card in owner_cards):
            raise CardNumberAlreadyExists(schema.card_number)

        card = Card(
            card_number=schema.card_number,
            card_type=schema.card_type,
            active=True,
            expiration_month=schema.expiration_month,
            expiration_year=schema.expiration_year,
            account=account,
            issuer=issuer,
        )
        saved = self.cache.save_card(card)
        logger.info("Card created successfully: %s", saved.card_number)
        return saved
