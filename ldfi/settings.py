import logging.handlers
from pydantic_settings import BaseSettings
from pydantic import model_validator, field_validator, Field, ValidationError
import logging
import enum
import os
import re
from datetime import timedelta
from typing import Annotated, Dict, Tuple
from typing_extensions import Self
from ldfi.errors import ConfigError
from ldfi.models import AddressSet, Chain, Holding

from dotenv import load_dotenv

env_file = os.getenv("LDFI_ENV_FILE", "persisted_data/.env")

if os.path.exists(env_file):
    load_dotenv(env_file)


class ChainBackend(str, enum.Enum):
    Explorer = "explorer"
    Dummy = "dummy"

class AggregationMode(str, enum.Enum):
    Individual = "individual"
    Batched = "batched"

explorer_endpoints = {
    Chain.BSC: "https://api.bscscan.com/api",
    Chain.ETH: "https://api.etherscan.io/api"
}

duration_units = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 3600
}

duration_part = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")


def parse_duration(value) -> timedelta:
    # Accepts seconds or Go style durations like "1m", "90s", "1m30s", "500ms"
    if isinstance(value, timedelta):
        return value

    if isinstance(value, (int, float)):
        return timedelta(seconds=value)

    text = str(value).strip()

    if re.fullmatch(r"\d+(\.\d+)?", text):
        return timedelta(seconds=float(text))

    parts = duration_part.findall(text)
    if len(parts) == 0 or "".join(number + unit for number, unit in parts) != text:
        raise ValueError(f"Invalid duration {text!r}")

    return timedelta(seconds=sum(float(number) * duration_units[unit] for number, unit in parts))


class LdfiSettings(BaseSettings):

    # Explorer API keys, one per chain
    api_bscscan: Annotated[str, Field(min_length=1)]
    api_etherscan: Annotated[str, Field(min_length=1)]

    bscscan_api_url: str = ""
    etherscan_api_url: str = ""
    explorer_timeout: Annotated[float, Field(default=5, gt=0)]

    chain_backend: ChainBackend = ChainBackend.Explorer
    aggregation_mode: AggregationMode = AggregationMode.Individual

    # Whole tokens reported by the dummy backend
    dummy_max_supply: Annotated[int, Field(default=1_000_000_000, ge=0)]

    # Empty host listens on all interfaces
    listen_address: str = ":8080"
    cache_timeout: timedelta = timedelta(minutes=1)

    api_rate_limit: str = "60/minute"

    log_level: str = 'INFO'
    log_dir: str = ""

    # Token
    token_decimals: Annotated[int, Field(default=18, ge=0)]
    bsc_token_address: str = "0x8f1e60d84182db487ac235acc65825e50b5477a1"
    eth_token_address: str = "0x8f1e60d84182db487ac235acc65825e50b5477a1"
    supply_chain: Chain = Chain.BSC

    # Holders, all on the supply chain except the vesting contract
    burn_address: str = "0x000000000000000000000000000000000000dead"
    vesting_contract: str = "0xc598d81c62f6391b2412d02a78fa3f3affe58b52"
    vesting_chain: Chain = Chain.ETH
    # Comma separated
    project_wallets: str = "0x30DD781D2143fE32C36E894a049898f268b82092"

    @field_validator("cache_timeout", mode="before")
    @classmethod
    def parse_cache_timeout(cls, value):
        return parse_duration(value)

    @field_validator("cache_timeout")
    @classmethod
    def cache_timeout_positive(cls, value: timedelta) -> timedelta:
        if value.total_seconds() <= 0:
            raise ValueError("cache_timeout must be positive")
        return value

    @field_validator("listen_address")
    @classmethod
    def check_listen_address(cls, value: str) -> str:
        _, sep, port = value.rpartition(":")
        if sep == "" or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError(f"Invalid listen address {value!r}, expected host:port")
        return value

    @field_validator("project_wallets")
    @classmethod
    def check_project_wallets(cls, value: str) -> str:
        if len([w for w in value.split(",") if w.strip() != ""]) == 0:
            raise ValueError("At least one project wallet must be set")
        return value

    @model_validator(mode="after")
    def set_explorer_urls(self) -> Self:
        if self.bscscan_api_url == "":
            self.bscscan_api_url = explorer_endpoints[Chain.BSC]
        if self.etherscan_api_url == "":
            self.etherscan_api_url = explorer_endpoints[Chain.ETH]
        return self

    def listen_host_port(self) -> Tuple[str, int]:
        host, _, port = self.listen_address.rpartition(":")
        if host == "":
            host = "0.0.0.0"
        return host, int(port)

    def explorer_api_keys(self) -> Dict[Chain, str]:
        return {
            Chain.BSC: self.api_bscscan,
            Chain.ETH: self.api_etherscan
        }

    def explorer_api_urls(self) -> Dict[Chain, str]:
        return {
            Chain.BSC: self.bscscan_api_url,
            Chain.ETH: self.etherscan_api_url
        }

    def address_set(self) -> AddressSet:
        try:
            return AddressSet(
                token_addresses={
                    Chain.BSC: self.bsc_token_address,
                    Chain.ETH: self.eth_token_address
                },
                supply_chain=self.supply_chain,
                burn=Holding(chain=self.supply_chain, address=self.burn_address),
                vesting=Holding(chain=self.vesting_chain, address=self.vesting_contract),
                project_wallets=tuple(
                    Holding(chain=self.supply_chain, address=w.strip())
                    for w in self.project_wallets.split(",") if w.strip() != ""
                )
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid addresses: {e}") from e


def load_settings() -> LdfiSettings:
    try:
        return LdfiSettings()
    except ValidationError as e:
        missing = [str(err["loc"][0]).upper() for err in e.errors() if err["type"] == "missing"]
        if len(missing) > 0:
            raise ConfigError(f"Missing environment key(s): {', '.join(missing)}") from e
        raise ConfigError(f"Invalid configuration: {e}") from e


settings = load_settings()


log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

handlers = [
    logging.StreamHandler()
]

if settings.log_dir != "":
    handlers.append(logging.handlers.TimedRotatingFileHandler(
        os.path.join(settings.log_dir, "ldfi.log"),
        when='midnight',
        backupCount=30
    ))


logging.basicConfig(
    format=log_format,
    level=settings.log_level,
    handlers=handlers
)

# Remove request level logging of the explorer calls
if settings.log_level != "DEBUG":
    logging.getLogger("urllib3").setLevel("WARN")
