import os

# Settings are loaded when ldfi.settings is first imported
os.environ.setdefault("API_BSCSCAN", "test-bscscan-key")
os.environ.setdefault("API_ETHERSCAN", "test-etherscan-key")
os.environ["API_RATE_LIMIT"] = "10000/minute"
os.environ["LDFI_ENV_FILE"] = os.path.join(os.path.dirname(__file__), "missing.env")

import pytest
from ldfi.blockchain.dummy.dummy_client import DummyChainClient
from ldfi.models import AddressSet, Chain, Holding

TOKEN = "0x8f1e60d84182db487ac235acc65825e50b5477a1"
BURN = "0x000000000000000000000000000000000000dead"
VESTING = "0xc598d81c62f6391b2412d02a78fa3f3affe58b52"
PROJECT = "0x30DD781D2143fE32C36E894a049898f268b82092"
E18 = 10 ** 18


@pytest.fixture
def address_set():
    return AddressSet(
        token_addresses={Chain.BSC: TOKEN, Chain.ETH: TOKEN},
        supply_chain=Chain.BSC,
        burn=Holding(chain=Chain.BSC, address=BURN),
        vesting=Holding(chain=Chain.ETH, address=VESTING),
        project_wallets=(Holding(chain=Chain.BSC, address=PROJECT),)
    )


@pytest.fixture
def make_clients():
    def _make(max_supply=1_000_000 * E18, burn=100_000 * E18, vesting=200_000 * E18, project=50_000 * E18, client_cls=DummyChainClient):
        return {
            Chain.BSC: client_cls(supplies={TOKEN: max_supply}, balances={TOKEN: {BURN: burn, PROJECT: project}}),
            Chain.ETH: client_cls(balances={TOKEN: {VESTING: vesting}})
        }
    return _make
