from abc import ABC, abstractmethod
from typing import List

class ChainClient(ABC):
# The read-only queries the supply calculation needs from one chain
    @abstractmethod
    def total_supply(self, token_address: str) -> int:
        # Get the total supply of the token in base units
        pass

    @abstractmethod
    def get_balance(self, token_address: str, holder_address: str) -> int:
        # Get the token balance of the holder in base units
        pass

    def balances_of(self, token_address: str, holder_addresses: List[str]) -> List[int]:
        # Get the token balances of several holders
        # The result follows the order of holder_addresses
        return [self.get_balance(token_address, holder) for holder in holder_addresses]
