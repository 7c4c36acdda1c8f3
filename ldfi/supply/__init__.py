from .aggregator import SupplyAggregator
from .service import SupplyService
