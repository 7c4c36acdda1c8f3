from pydantic import BaseModel, ConfigDict
import enum


class Chain(str, enum.Enum):
    BSC = "bsc"
    ETH = "eth"


class Holding(BaseModel):
    # One holder address on one chain
    model_config = ConfigDict(frozen=True)

    chain: Chain
    address: str

    def __str__(self) -> str:
        return f"{self.address}@{self.chain.value}"
