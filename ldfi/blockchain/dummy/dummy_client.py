from ..chain_client import ChainClient
from ldfi.errors import ProtocolError
from typing import Dict, Optional

class DummyChainClient(ChainClient):
    # Static amounts for local runs without explorer access

    def __init__(self, supplies: Optional[Dict[str, int]] = None, balances: Optional[Dict[str, Dict[str, int]]] = None) -> None:
        super().__init__()
        self.supplies = {token.lower(): amount for token, amount in (supplies or {}).items()}
        self.balances = {
            token.lower(): {holder.lower(): amount for holder, amount in holders.items()}
            for token, holders in (balances or {}).items()
        }

    def total_supply(self, token_address: str) -> int:
        token = token_address.lower()
        if token not in self.supplies:
            raise ProtocolError(f"Unknown token {token_address}")
        return self.supplies[token]

    def get_balance(self, token_address: str, holder_address: str) -> int:
        # Holders without a balance hold nothing
        return self.balances.get(token_address.lower(), {}).get(holder_address.lower(), 0)
