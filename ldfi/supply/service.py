from ldfi.cache import SingleFlightCache
from ldfi.models import SupplyReport
from .aggregator import SupplyAggregator

# All supplies come from one aggregation cycle, so they share one entry
SUPPLIES_CACHE_KEY = "ldfi-supplies"


class SupplyService:
    def __init__(self, cache: SingleFlightCache, aggregator: SupplyAggregator, cache_key: str = SUPPLIES_CACHE_KEY):
        self.cache = cache
        self.aggregator = aggregator
        self.cache_key = cache_key

    def get_report(self) -> SupplyReport:
        return self.cache.get(self.cache_key, self.aggregator.compute)

    def get_total_supply(self) -> float:
        return self.get_report().total

    def get_circulating_supply(self) -> float:
        return self.get_report().circulating

    def get_max_supply(self) -> float:
        return self.get_report().max
