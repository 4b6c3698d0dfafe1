"""Test configuration and shared fixtures"""

from collections import Counter
from pathlib import Path
from typing import Callable, Iterable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from cardregistry.app import app_factory
from cardregistry.cache import RegistryCache, unique_card_key
from cardregistry.config import Config
from cardregistry.db import DatabaseConnection
from cardregistry.loader import BootstrapLoader
from cardregistry.models.card import Card
from cardregistry.repository.account import AccountRepository
from cardregistry.repository.card import CardRepository
from cardregistry.repository.issuer import IssuerRepository
from cardregistry.repository.person import PersonRepository
from records import SCENARIO_A


# each test has its own empty database file
@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    return Config(
        # overwrite application name and database so nothing leaks into ./data
        app_name="cardregistry-test",
        database_url_env=f"sqlite:///{tmp_path / 'cardregistry-test.db'}",
        data_file_path=str(tmp_path / "initial-data.txt"),
        stats_report_interval=0,
    )


@pytest.fixture
def db_conn(test_config: Config):
    db_conn = DatabaseConnection(test_config)
    db_conn.create_tables()
    yield db_conn
    db_conn.dispose()


@pytest.fixture
def cache(db_conn: DatabaseConnection) -> RegistryCache:
    return RegistryCache(db_conn)


@pytest.fixture
def loader(cache: RegistryCache) -> BootstrapLoader:
    return BootstrapLoader(cache)


@pytest.fixture
def data_file(test_config: Config) -> Callable[[Iterable[str]], Path]:
    """Write bootstrap lines to the configured data file"""

    def f(lines: Iterable[str]) -> Path:
        path = Path(test_config.data_file_path)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return f


@pytest.fixture
def loaded(loader: BootstrapLoader, data_file) -> BootstrapLoader:
    """Loader that already went through Scenario A"""
    loader.load(data_file(SCENARIO_A))
    return loader


@pytest.fixture
def store_counts(cache: RegistryCache) -> Callable[[], dict[str, int]]:
    """Row counts of the store, bypassing the cache"""

    def f() -> dict[str, int]:
        with cache.unit_of_work() as uow:
            return {
                "persons": PersonRepository(uow).count(),
                "issuers": IssuerRepository(uow).count(),
                "accounts": AccountRepository(uow).count(),
                "cards": CardRepository(uow).count(),
            }

    return f


@pytest.fixture
def test_app(test_config: Config, data_file):
    data_file(SCENARIO_A)
    # context manager runs the lifespan: tables, bootstrap, cache
    with TestClient(app_factory(test_config)) as client:
        yield client


@pytest.fixture
def slot_counts(cache: RegistryCache) -> Callable[[], Counter]:
    """Stored cards per (national code, card type, issuer) slot, bypassing the cache"""

    def f() -> Counter:
        with cache.unit_of_work() as uow:
            cards = uow.scalars(select(Card)).all()
            return Counter(
                unique_card_key(
                    card.account.owner.national_code, card.card_type, card.issuer.issuer_code
                )
                for card in cards
            )

    return f
