"""Bootstrap loader: fills the store and the cache from a flat record file.

One record per line, `kind=field,field,...`:

    person=firstName,lastName,nationalCode,phone,address
    issuer=issuerCode,name
    account=accountNumber,accountType,nationalCode
    card=cardNumber,cardType,active,expirationMonth,expirationYear,issuerCode,accountNumber

Blank lines and lines starting with `#` are ignored, kinds are case-insensitive.

Records are handled strictly in file order and references are resolved against the
cache, not the store: an account must come after its person, a card after its
account and issuer. A record whose references are not cached yet is dropped, it is
never retried. Re-loading a file doesn't create duplicates, every record is looked
up by business key first, and a card is only written once its owner's cards have
been read back from the store.

A bad record is logged and skipped. Only failing to read the source at all stops
the loader.
"""

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from cardregistry.cache import RegistryCache, unique_card_key
from cardregistry.errors.loader import SourceReadError
from cardregistry.models.account import Account, AccountType
from cardregistry.models.card import Card, CardType
from cardregistry.models.issuer import Issuer
from cardregistry.models.person import Person
from cardregistry.repository.account import AccountRepository
from cardregistry.repository.card import CardRepository
from cardregistry.repository.issuer import IssuerRepository
from cardregistry.repository.person import PersonRepository

logger = logging.getLogger(__name__)


class LoaderState(enum.Enum):
    NOT_STARTED = "not_started"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class InvalidRecord(Exception):
    """Record can't be turned into an entity, it is skipped"""


@dataclass
class LoadReport:
    persons: int = 0
    issuers: int = 0
    accounts: int = 0
    cards: int = 0
    skipped: int = 0

    def accept(self, kind: str) -> None:
        setattr(self, f"{kind}s", getattr(self, f"{kind}s") + 1)


def _split(data: str, min_fields: int, kind: str, maxsplit: int = -1) -> list[str]:
    tokens = [token.strip() for token in data.split(",", maxsplit)]
    if len(tokens) < min_fields:
        raise InvalidRecord(f"Invalid {kind} format: {data}")
    return tokens


def _parse_enum(enum_cls: type[enum.Enum], value: str):
    try:
        return enum_cls[value.strip().upper()]
    except KeyError:
        raise InvalidRecord(f"Invalid {enum_cls.__name__}: {value}") from None


class BootstrapLoader:
    def __init__(self, cache: RegistryCache):
        self.cache = cache
        self.state = LoaderState.NOT_STARTED
        self._handlers: dict[str, Callable[[str], bool]] = {
            "person": self._process_person,
            "issuer": self._process_issuer,
            "account": self._process_account,
            "card": self._process_card,
        }

    def load(self, path: str | Path) -> LoadReport:
        """Load records from a UTF-8 file. Raises SourceReadError if it can't be read."""
        self.state = LoaderState.LOADING
        logger.info("Loading initial data from %s", path)
        try:
            lines = Path(path).read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as exc:
            self.state = LoaderState.FAILED
            logger.error("Failed to load data from file %s: %s", path, exc)
            raise SourceReadError(f"{path}: {exc}", where="loader") from exc
        return self.load_lines(lines)

    def load_lines(self, lines: Iterable[str]) -> LoadReport:
        self.state = LoaderState.LOADING
        report = LoadReport()
        for raw_line in lines:
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            kind, sep, data = line.partition("=")
            kind = kind.strip().lower()
            handler = self._handlers.get(kind)
            if not sep or handler is None:
                logger.warning("Unknown record kind, line skipped: %s", line)
                report.skipped += 1
                continue
            if self._process(kind, handler, data):
                report.accept(kind)
            else:
                report.skipped += 1

        self.state = LoaderState.LOADED
        logger.info(
            "Initial data loaded: %d person(s), %d issuer(s), %d account(s), "
            "%d card(s), %d line(s) skipped",
            report.persons,
            report.issuers,
            report.accounts,
            report.cards,
            report.skipped,
        )
        self._log_statistics()
        return report

    def _process(self, kind: str, handler: Callable[[str], bool], data: str) -> bool:
        try:
            return handler(data)
        except InvalidRecord as exc:
            logger.warning("%s", exc)
        except Exception:
            logger.exception("Error processing %s: %s", kind, data)
        return False

    def _process_person(self, data: str) -> bool:
        first_name, last_name, national_code, phone, address = _split(data, 5, "person")[:5]
        with self.cache.unit_of_work() as uow:
            repository = PersonRepository(uow)
            person = repository.find_by_business_key(national_code)
            if person is None:
                person = repository.save(
                    Person(
                        first_name=first_name,
                        last_name=last_name,
                        national_code=national_code,
                        phone=phone,
                        address=address,
                    )
                )
        self.cache.cache_person(person)
        logger.debug("Person saved: %s %s (%s)", first_name, last_name, national_code)
        return True

    def _process_issuer(self, data: str) -> bool:
        # the name is the rest of the line
        issuer_code, name = _split(data, 2, "issuer", maxsplit=1)
        with self.cache.unit_of_work() as uow:
            repository = IssuerRepository(uow)
            issuer = repository.find_by_business_key(issuer_code)
            if issuer is None:
                issuer = repository.save(Issuer(issuer_code=issuer_code, name=name))
        self.cache.cache_issuer(issuer)
        logger.debug("Issuer saved: %s (%s)", name, issuer_code)
        return True

    def _process_account(self, data: str) -> bool:
        account_number, account_type, national_code = _split(data, 3, "account")[:3]
        account_type = _parse_enum(AccountType, account_type)
        if not self.cache.has_person(national_code):
            logger.error("Person not found in cache: %s", national_code)
            return False

        with self.cache.unit_of_work() as uow:
            repository = AccountRepository(uow)
            account = repository.find_by_business_key(account_number)
            if account is None:
                owner = PersonRepository(uow).find_by_business_key(national_code)
                if owner is None:
                    raise InvalidRecord(f"Person not found in DB: {national_code}")
                account = repository.save(
                    Account(
                        account_number=account_number,
                        account_type=account_type,
                        owner=owner,
                    )
                )
                logger.info("Account created: %s for person: %s", account_number, national_code)
            else:
                logger.debug("Account already exists in DB: %s", account_number)
        self.cache.cache_account(account)
        return True

    def _process_card(self, data: str) -> bool:
        (
            card_number,
            card_type,
            active,
            expiration_month,
            expiration_year,
            issuer_code,
            account_number,
        ) = _split(data, 7, "card")[:7]
        card_type = _parse_enum(CardType, card_type)
        logger.debug("Processing card: %s for account: %s", card_number, account_number)

        if not self.cache.has_account(account_number):
            logger.error("Account not found in cache: %s", account_number)
            return False
        if not self.cache.has_issuer(issuer_code):
            logger.error("Issuer not found in cache: %s", issuer_code)
            return False

        cached_account = self.cache.find_account(account_number)
        national_code = cached_account.owner.national_code
        key = unique_card_key(national_code, card_type, issuer_code)
        # the slot may be held by a card the store got outside this file
        self.cache.ensure_synced(national_code)
        holder = self.cache.find_unique_card(key)
        if holder is not None:
            if holder.card_number == card_number:
                logger.debug("Card already exists in DB: %s", card_number)
                return True
            logger.debug(
                "Card slot %s already taken by %s, record dropped", key, holder.card_number
            )
            return False

        with self.cache.unit_of_work() as uow:
            repository = CardRepository(uow)
            card = repository.find_by_business_key(card_number)
            if card is None:
                account = AccountRepository(uow).find_by_business_key(account_number)
                issuer = IssuerRepository(uow).find_by_business_key(issuer_code)
                if account is None or issuer is None:
                    raise InvalidRecord(
                        f"Account {account_number} or issuer {issuer_code} not found in DB"
                    )
                card = repository.save(
                    Card(
                        card_number=card_number,
                        card_type=card_type,
                        active=active.lower() == "true",
                        expiration_month=expiration_month,
                        expiration_year=expiration_year,
                        account=account,
                        issuer=issuer,
                    )
                )
                logger.info("Card created: %s for account: %s", card_number, account_number)
            else:
                logger.debug("Card already exists in DB: %s", card_number)
        return self.cache.cache_card(card)

    def _log_statistics(self) -> None:
        logger.info("Final cache statistics:")
        for name, value in self.cache.get_statistics().items():
            logger.info("  %-22s: %d", name, value)
        for national_code, cards in self.cache.get_all().items():
            logger.info("  %s has %d card(s)", national_code, len(cards))
            for card in cards:
                logger.info(
                    "    - %s %s from %s",
                    card.card_type.name,
                    card.card_number,
                    card.issuer.issuer_code,
                )
