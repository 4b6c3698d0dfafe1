"""Tests for the bootstrap loader"""

import pytest

from cardregistry.cache import RegistryCache, unique_card_key
from cardregistry.errors.loader import SourceReadError
from cardregistry.loader import BootstrapLoader, LoaderState
from cardregistry.models.account import AccountType
from cardregistry.models.card import Card, CardType
from records import ACCOUNT, CARD, ISSUER, PERSON, SCENARIO_A


class TestLoad:
    def test_scenario_a(self, cache, loader, data_file, store_counts):
        report = loader.load(data_file(SCENARIO_A))

        assert loader.state == LoaderState.LOADED
        assert (report.persons, report.issuers, report.accounts, report.cards) == (1, 1, 1, 1)
        assert report.skipped == 0
        assert store_counts() == {"persons": 1, "issuers": 1, "accounts": 1, "cards": 1}

        cards = cache.get_cards_by_national_code("1234567890")
        assert [card.card_number for card in cards] == ["6273531234567890"]
        card = cards.pop()
        assert card.active is True
        assert (card.expiration_month, card.expiration_year) == ("12", "1405")
        assert card.issuer.name == "TejaratBank"
        assert card.account.account_type == AccountType.SAVINGS

    def test_loading_twice_is_idempotent(self, cache, loader, data_file, store_counts):
        path = data_file(SCENARIO_A)
        loader.load(path)
        counts, stats = store_counts(), cache.get_statistics()

        loader.load(path)

        assert store_counts() == counts
        assert cache.get_statistics() == stats

    def test_reload_into_cold_cache(self, cache, loader, data_file, store_counts):
        path = data_file(SCENARIO_A)
        loader.load(path)
        cache.clear_all()

        report = BootstrapLoader(cache).load(path)

        assert report.cards == 1
        assert store_counts()["cards"] == 1
        assert cache.get_statistics()["cards"] == 1

    def test_reload_with_slot_held_in_store(self, cache, loader, data_file, db_conn, slot_counts):
        loader.load(data_file(SCENARIO_A))
        debit_card = Card(
            card_number="6273530000000001",
            card_type=CardType.DEBIT,
            active=True,
            expiration_month="06",
            expiration_year="1406",
            account=cache.find_account("1234567890"),
            issuer=cache.find_issuer("627353"),
        )
        cache.save_card(debit_card)
        second = "card=6273539999999999,DEBIT,true,01,1407,627353,1234567890"

        fresh = RegistryCache(db_conn)
        report = BootstrapLoader(fresh).load(data_file([*SCENARIO_A, second]))

        assert report.cards == 1
        assert report.skipped == 1
        assert slot_counts()[unique_card_key("1234567890", CardType.DEBIT, "627353")] == 1
        numbers = {c.card_number for c in fresh.get_cards_by_national_code("1234567890")}
        assert numbers == {"6273531234567890", "6273530000000001"}

    def test_comments_blank_lines_and_case(self, cache, loader, store_counts):
        lines = [
            "# initial data",
            "",
            "   ",
            "PERSON=Ali,Ahmadi,1234567890,09121234567,Tehran",
            "Issuer=627353,TejaratBank",
            "account=1234567890,savings,1234567890",
            "CARD=6273531234567890,credit,TRUE,12,1405,627353,1234567890",
        ]
        report = loader.load_lines(lines)

        assert report.skipped == 0
        assert store_counts() == {"persons": 1, "issuers": 1, "accounts": 1, "cards": 1}
        assert cache.find_account("1234567890").account_type == AccountType.SAVINGS

    def test_issuer_name_keeps_commas(self, cache, loader):
        loader.load_lines(["issuer=627353,Tejarat, Bank of Iran"])
        assert cache.find_issuer("627353").name == "Tejarat, Bank of Iran"

    @pytest.mark.parametrize("active,expected", [("true", True), ("false", False), ("yes", False)])
    def test_active_flag(self, cache, loader, active, expected):
        card = f"card=6273531234567890,CREDIT,{active},12,1405,627353,1234567890"
        loader.load_lines([PERSON, ISSUER, ACCOUNT, card])
        assert cache.get_cards_by_national_code("1234567890").pop().active is expected


class TestBadRecords:
    def test_short_card_line(self, cache, loader, store_counts):
        report = loader.load_lines(
            [PERSON, ISSUER, ACCOUNT, "card=6273531234567890,CREDIT,true,12", CARD]
        )

        assert loader.state == LoaderState.LOADED
        assert report.skipped == 1
        # the line after the broken one is still loaded
        assert report.cards == 1
        assert store_counts()["cards"] == 1

    def test_only_short_card_line(self, loader, store_counts):
        loader.load_lines([PERSON, ISSUER, ACCOUNT, "card=6273531234567890,CREDIT,true,12,1405,627353"])
        assert store_counts()["cards"] == 0

    @pytest.mark.parametrize(
        "line",
        [
            "person=Ali,Ahmadi,1234567890",
            "issuer=627353",
            "account=1234567890,SAVINGS",
            "account=1234567890,CHECKING,1234567890",
            "card=6273531234567890,GOLD,true,12,1405,627353,1234567890",
            "wallet=1,2,3",
            "no separator here",
        ],
    )
    def test_malformed_line_is_skipped(self, loader, line):
        report = loader.load_lines([PERSON, ISSUER, line])
        assert loader.state == LoaderState.LOADED
        assert report.skipped == 1
        assert (report.persons, report.issuers) == (1, 1)

    def test_account_before_person_is_dropped(self, cache, loader, store_counts):
        report = loader.load_lines([ACCOUNT, PERSON, ISSUER, CARD])

        assert report.skipped == 2
        assert store_counts() == {"persons": 1, "issuers": 1, "accounts": 0, "cards": 0}
        assert cache.get_cards_by_national_code("1234567890") == set()

    def test_card_before_issuer_is_dropped(self, loader, store_counts):
        loader.load_lines([PERSON, ACCOUNT, CARD, ISSUER])
        assert store_counts()["cards"] == 0

    def test_duplicate_slot_dropped_without_error(self, cache, loader, store_counts):
        second = "card=6273539999999999,CREDIT,true,01,1407,627353,1234567890"
        report = loader.load_lines([*SCENARIO_A, second])

        assert loader.state == LoaderState.LOADED
        assert report.cards == 1
        assert store_counts()["cards"] == 1
        numbers = {c.card_number for c in cache.get_cards_by_national_code("1234567890")}
        assert numbers == {"6273531234567890"}

    def test_same_person_other_type_is_accepted(self, cache, loader):
        debit = "card=6273539999999999,DEBIT,true,01,1407,627353,1234567890"
        report = loader.load_lines([*SCENARIO_A, debit])
        assert report.cards == 2
        assert len(cache.get_cards_by_national_code("1234567890")) == 2


class TestLoaderState:
    def test_initial_state(self, loader):
        assert loader.state == LoaderState.NOT_STARTED

    def test_missing_file(self, loader, tmp_path):
        with pytest.raises(SourceReadError) as exc_info:
            loader.load(tmp_path / "missing.txt")
        assert loader.state == LoaderState.FAILED
        assert "missing.txt" in exc_info.value.error

    def test_not_utf8(self, loader, tmp_path):
        path = tmp_path / "utf16.txt"
        path.write_bytes("person=Zoë,Ahmadi,1234567890,09121234567,Tehran".encode("utf-16"))
        with pytest.raises(SourceReadError):
            loader.load(path)
        assert loader.state == LoaderState.FAILED

    def test_empty_file(self, loader, data_file, store_counts):
        report = loader.load(data_file([]))
        assert loader.state == LoaderState.LOADED
        assert report.skipped == 0
        assert set(store_counts().values()) == {0}
