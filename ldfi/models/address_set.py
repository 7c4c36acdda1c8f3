from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Annotated, Dict, List, Tuple
from typing_extensions import Self
from .chain import Chain, Holding


class AddressSet(BaseModel):
    # Addresses that take part in the supply calculation
    model_config = ConfigDict(frozen=True)

    token_addresses: Dict[Chain, str]

    # Chain whose token contract reports the max supply
    supply_chain: Chain

    burn: Holding
    vesting: Holding
    project_wallets: Annotated[Tuple[Holding, ...], Field(min_length=1)]

    @model_validator(mode="after")
    def check_token_addresses(self) -> Self:
        for holding in self.holdings():
            if holding.chain not in self.token_addresses:
                raise ValueError(f"No token address for chain {holding.chain.value} ({holding})")

        # A holder listed twice would be subtracted twice
        seen = set()
        for holding in self.holdings():
            key = (holding.chain, holding.address.lower())
            if key in seen:
                raise ValueError(f"Holder {holding} is listed more than once")
            seen.add(key)

        if self.supply_chain not in self.token_addresses:
            raise ValueError(f"No token address for supply chain {self.supply_chain.value}")

        return self

    def holdings(self) -> List[Holding]:
        return [self.burn, self.vesting, *self.project_wallets]

    def token_address(self, chain: Chain) -> str:
        return self.token_addresses[chain]
