from .chain import Chain, Holding
from .address_set import AddressSet
from .supply_report import SupplyReport
