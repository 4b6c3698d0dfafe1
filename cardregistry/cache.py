"""In-process cache in front of the durable store.

The store is the source of truth: every index here can be re-derived from it, and an
index is only written after the matching store write has committed. The one exception
is the composite-uniqueness index, whose entry is claimed *before* the store write of
`save_card` so that two concurrent saves of the same (person, card type, issuer) can't
both reach the store. A failed write gives the claim back.

All indices are plain dicts touched through single operations (get, setdefault, item
assignment, pop), which are atomic for str keys, so no lock is needed.
"""

import logging
from contextlib import contextmanager
from types import MappingProxyType
from typing import Iterator, Mapping

from cardregistry.db import DatabaseConnection
from cardregistry.errors.card import CardAlreadyIssued
from cardregistry.errors.common import ValidationError
from cardregistry.models.account import Account
from cardregistry.models.card import Card, CardType
from cardregistry.models.issuer import Issuer
from cardregistry.models.person import Person
from cardregistry.repository.account import AccountRepository
from cardregistry.repository.card import CardRepository
from cardregistry.repository.issuer import IssuerRepository
from cardregistry.repository.person import PersonRepository
from cardregistry.uow import UnitOfWork

logger = logging.getLogger(__name__)


def unique_card_key(national_code: str, card_type: CardType, issuer_code: str) -> str:
    return f"{national_code}_{card_type.name}_{issuer_code}"


class RegistryCache:
    def __init__(self, db_conn: DatabaseConnection):
        self.db_conn = db_conn

        self._persons: dict[str, Person] = {}
        self._issuers: dict[str, Issuer] = {}
        self._accounts: dict[str, Account] = {}
        self._cards: dict[str, Card] = {}
        # national code -> {card number -> card}
        self._cards_by_national_code: dict[str, dict[str, Card]] = {}
        # unique_card_key(...) -> card, exists only here, not in the store
        self._unique_cards: dict[str, Card] = {}
        # national codes whose cards were read back from the store since the last clear,
        # only for those the composite index covers everything the store holds
        self._synced: set[str] = set()

    @contextmanager
    def unit_of_work(self) -> Iterator[UnitOfWork]:
        with UnitOfWork(self.db_conn.get_session()) as uow:
            yield uow

    # --- lookups ----------------------------------------------------------

    def find_person(self, national_code: str) -> Person | None:
        cached = self._persons.get(national_code)
        if cached is not None:
            logger.debug("Person found in cache: %s", national_code)
            return cached

        logger.debug("Person not in cache, fetching from DB: %s", national_code)
        with self.unit_of_work() as uow:
            person = PersonRepository(uow).find_by_business_key(national_code)
        if person is not None:
            self.cache_person(person)
        return person

    def find_issuer(self, issuer_code: str) -> Issuer | None:
        cached = self._issuers.get(issuer_code)
        if cached is not None:
            return cached

        logger.debug("Issuer not in cache, fetching from DB: %s", issuer_code)
        with self.unit_of_work() as uow:
            issuer = IssuerRepository(uow).find_by_business_key(issuer_code)
        if issuer is not None:
            self.cache_issuer(issuer)
        return issuer

    def find_account(self, account_number: str) -> Account | None:
        cached = self._accounts.get(account_number)
        if cached is not None:
            return cached

        logger.debug("Account not in cache, fetching from DB: %s", account_number)
        with self.unit_of_work() as uow:
            account = AccountRepository(uow).find_by_business_key(account_number)
        if account is not None:
            self.cache_account(account)
        return account

    def get_cards_by_national_code(self, national_code: str) -> set[Card]:
        """
        All cards of a person, across all of their accounts.

        An entry that is empty, or was never read back from the store (e.g. one the
        bootstrap loader filled from the file only), is repaired from the store:
        person -> accounts -> cards, and every card found is put back into all card
        indices.
        """
        cached = self._cards_by_national_code.get(national_code)
        if cached and national_code in self._synced:
            logger.debug("Cache hit: %d card(s) for %s", len(cached), national_code)
            return set(cached.values())
        return self.sync_cards(national_code)

    def sync_cards(self, national_code: str) -> set[Card]:
        """Read all cards of a person back from the store and index them."""
        with self.unit_of_work() as uow:
            person = PersonRepository(uow).find_by_business_key(national_code)
            if person is None:
                return set()
            card_repository = CardRepository(uow)
            cards = {
                card
                for account in AccountRepository(uow).find_all_by_owner(person)
                for card in card_repository.find_all_by_account(account)
            }

        for card in cards:
            self._index_card(card, national_code)
        self._synced.add(national_code)
        logger.info("Synced %d card(s) from DB to cache for %s", len(cards), national_code)
        return cards

    def get_all(self) -> Mapping[str, frozenset[Card]]:
        """Read-only snapshot of national code -> cards."""
        return MappingProxyType(
            {
                national_code: frozenset(cards.values())
                for national_code, cards in list(self._cards_by_national_code.items())
            }
        )

    # --- writes -----------------------------------------------------------

    def save_card(self, card: Card) -> Card:
        """Persist a new card and index it.

        Raises ValidationError when the card, its account, the account owner or
        the issuer is missing, and CardAlreadyIssued when the owner already holds
        a card of the same type from the same issuer.
        """
        self._validate_card(card)
        national_code = card.account.owner.national_code
        key = unique_card_key(national_code, card.card_type, card.issuer.issuer_code)

        # the uniqueness index must reflect the store before it can be trusted
        self.ensure_synced(national_code)

        claimed = self._unique_cards.setdefault(key, card)
        if claimed is not card:
            raise CardAlreadyIssued(national_code, card.card_type, card.issuer.name)

        try:
            with self.unit_of_work() as uow:
                saved = CardRepository(uow).save(card)
        except Exception:
            self._release_claim(key, card)
            raise

        self._index_card(saved, national_code)
        logger.info("Card synced: %s for person %s", saved.card_number, national_code)
        return saved

    def clear_all(self) -> None:
        """Forget everything cached, the store is untouched."""
        self._cards_by_national_code.clear()
        self._unique_cards.clear()
        self._persons.clear()
        self._issuers.clear()
        self._accounts.clear()
        self._cards.clear()
        self._synced.clear()
        logger.info("In-memory cache cleared")

    def clear_all_including_database(self) -> None:
        logger.info("Clearing all data (cache + database)...")
        # children before parents, the store enforces the foreign keys
        with self.unit_of_work() as uow:
            cards = CardRepository(uow).delete_all()
            accounts = AccountRepository(uow).delete_all()
            issuers = IssuerRepository(uow).delete_all()
            persons = PersonRepository(uow).delete_all()
        self.clear_all()
        logger.info(
            "All data cleared (cache + database): %d card(s), %d account(s), "
            "%d issuer(s), %d person(s)",
            cards,
            accounts,
            issuers,
            persons,
        )

    def get_statistics(self) -> dict[str, int]:
        return {
            "persons": len(self._persons),
            "issuers": len(self._issuers),
            "accounts": len(self._accounts),
            "cards": len(self._cards),
            "nationalCodeEntries": len(self._cards_by_national_code),
            "uniqueCardConstraints": len(self._unique_cards),
        }

    # --- index maintenance, also used by the bootstrap loader -------------

    def has_person(self, national_code: str) -> bool:
        return national_code in self._persons

    def has_issuer(self, issuer_code: str) -> bool:
        return issuer_code in self._issuers

    def has_account(self, account_number: str) -> bool:
        return account_number in self._accounts

    def has_unique_card(self, key: str) -> bool:
        return key in self._unique_cards

    def find_unique_card(self, key: str) -> Card | None:
        return self._unique_cards.get(key)

    def ensure_synced(self, national_code: str) -> None:
        if national_code not in self._synced:
            self.sync_cards(national_code)

    def cache_person(self, person: Person) -> None:
        self._persons[person.national_code] = person
        self._cards_by_national_code.setdefault(person.national_code, {})

    def cache_issuer(self, issuer: Issuer) -> None:
        self._issuers[issuer.issuer_code] = issuer

    def cache_account(self, account: Account) -> None:
        self._accounts[account.account_number] = account

    def cache_card(self, card: Card) -> bool:
        """Index a card that is already in the store.

        Returns False, leaving the indices as they were, if another card holds
        the same (person, card type, issuer) slot.
        """
        national_code = card.account.owner.national_code
        key = unique_card_key(national_code, card.card_type, card.issuer.issuer_code)
        claimed = self._unique_cards.setdefault(key, card)
        if claimed is not card and claimed.card_number != card.card_number:
            return False
        self._index_card(card, national_code)
        return True

    def _index_card(self, card: Card, national_code: str) -> None:
        key = unique_card_key(national_code, card.card_type, card.issuer.issuer_code)
        self._cards[card.card_number] = card
        self._cards_by_national_code.setdefault(national_code, {})[card.card_number] = card
        self._unique_cards[key] = card

    def _release_claim(self, key: str, card: Card) -> None:
        if self._unique_cards.get(key) is card:
            self._unique_cards.pop(key, None)

    @staticmethod
    def _validate_card(card: Card | None) -> None:
        if card is None:
            raise ValidationError("card must not be empty")
        if card.account is None:
            raise ValidationError("card account must not be empty")
        if card.account.owner is None:
            raise ValidationError("account owner must not be empty")
        if card.issuer is None:
            raise ValidationError("card issuer must not be empty")
