"""Periodic diagnostics report.

Logs the cache index sizes next to the row counts of the store, so drift between
the two is visible in the logs. Read-only, never touches either side.
"""

from __future__ import annotations

import asyncio
import logging

from cardregistry.cache import RegistryCache
from cardregistry.repository.account import AccountRepository
from cardregistry.repository.card import CardRepository
from cardregistry.repository.issuer import IssuerRepository
from cardregistry.repository.person import PersonRepository

logger = logging.getLogger(__name__)


def log_statistics(cache: RegistryCache) -> dict[str, dict[str, int]]:
    """Log and return cache and store counters."""
    with cache.unit_of_work() as uow:
        store = {
            "persons": PersonRepository(uow).count(),
            "issuers": IssuerRepository(uow).count(),
            "accounts": AccountRepository(uow).count(),
            "cards": CardRepository(uow).count(),
        }
    cached = cache.get_statistics()

    logger.info("Entity counts (store): %s", ", ".join(f"{k}={v}" for k, v in store.items()))
    logger.info("Index sizes (cache): %s", ", ".join(f"{k}={v}" for k, v in cached.items()))
    return {"store": store, "cache": cached}


async def schedule_stats_report(cache: RegistryCache, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        try:
            await asyncio.to_thread(log_statistics, cache)
        except Exception:
            logger.exception("Statistics report failed")
