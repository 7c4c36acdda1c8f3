from threading import Lock
from typing import Optional
from ldfi.blockchain import build_chain_clients
from ldfi.cache import SingleFlightCache
from ldfi.settings import settings, AggregationMode
from ldfi.supply import SupplyAggregator, SupplyService
import logging

logger = logging.getLogger("[API Depends]")

supply_service: Optional[SupplyService] = None
supply_service_lock = Lock()


def build_supply_service() -> SupplyService:
    aggregator = SupplyAggregator(
        build_chain_clients(settings),
        settings.address_set(),
        settings.token_decimals,
        batched=settings.aggregation_mode == AggregationMode.Batched
    )
    cache = SingleFlightCache(settings.cache_timeout.total_seconds())

    logger.info(f"Supply service ready: backend={settings.chain_backend.value} mode={settings.aggregation_mode.value} cache={settings.cache_timeout}")

    return SupplyService(cache, aggregator)


def get_supply_service() -> SupplyService:
    global supply_service

    # Every request must share the same cache
    with supply_service_lock:
        if supply_service is None:
            supply_service = build_supply_service()

    return supply_service
