import functools
import threading
import pytest
from pydantic import ValidationError
from conftest import TOKEN, BURN, VESTING, PROJECT, E18
from ldfi.blockchain.dummy.dummy_client import DummyChainClient
from ldfi.errors import TransportError, ProtocolError, ComputationError, ConfigError
from ldfi.models import AddressSet, Chain, Holding
from ldfi.supply import SupplyAggregator


class FailingClient(DummyChainClient):
    def __init__(self, fail_holder: str, error: Exception, **kwargs):
        super().__init__(**kwargs)
        self.fail_holder = fail_holder
        self.error = error
        self.calls = []

    def get_balance(self, token_address: str, holder_address: str) -> int:
        self.calls.append(holder_address)
        if holder_address == self.fail_holder:
            raise self.error
        return super().get_balance(token_address, holder_address)


class BarrierClient(DummyChainClient):
    # Every call blocks until all queries of the cycle are running
    def __init__(self, barrier: threading.Barrier, **kwargs):
        super().__init__(**kwargs)
        self.barrier = barrier

    def total_supply(self, token_address: str) -> int:
        self.barrier.wait(timeout=5)
        return super().total_supply(token_address)

    def get_balance(self, token_address: str, holder_address: str) -> int:
        self.barrier.wait(timeout=5)
        return super().get_balance(token_address, holder_address)


class BatchRecordingClient(DummyChainClient):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.batches = []

    def balances_of(self, token_address, holder_addresses):
        self.batches.append(list(holder_addresses))
        return super().balances_of(token_address, holder_addresses)


class ShortBatchClient(DummyChainClient):
    def balances_of(self, token_address, holder_addresses):
        return super().balances_of(token_address, holder_addresses)[:-1]


def test_example_supplies(address_set, make_clients):
    report = SupplyAggregator(make_clients(), address_set, 18).compute()

    assert report.total == 900000.0
    assert report.circulating == 650000.0
    assert report.max == 1000000.0


def test_arithmetic_is_exact_before_conversion(address_set, make_clients):
    max_supply = 123_456_789_123_456_789_123_456_789
    burn = 987_654_321_987_654_321
    vesting = 11_111_111_111_111_111_111_111
    project = 3

    report = SupplyAggregator(make_clients(max_supply, burn, vesting, project), address_set, 18).compute()

    assert report.max == max_supply / 10 ** 18
    assert report.total == (max_supply - burn) / 10 ** 18
    assert report.circulating == (max_supply - burn - vesting - project) / 10 ** 18


def test_zero_decimals(address_set, make_clients):
    report = SupplyAggregator(make_clients(1000, 100, 200, 50), address_set, 0).compute()

    assert report.total == 900.0
    assert report.circulating == 650.0
    assert report.max == 1000.0


def test_project_wallets_are_summed(make_clients):
    second_wallet = "0x1111111111111111111111111111111111111111"
    address_set = AddressSet(
        token_addresses={Chain.BSC: TOKEN, Chain.ETH: TOKEN},
        supply_chain=Chain.BSC,
        burn=Holding(chain=Chain.BSC, address=BURN),
        vesting=Holding(chain=Chain.ETH, address=VESTING),
        project_wallets=(
            Holding(chain=Chain.BSC, address=PROJECT),
            Holding(chain=Chain.ETH, address=second_wallet),
        )
    )
    clients = make_clients()
    clients[Chain.ETH].balances[TOKEN][second_wallet] = 25_000 * E18

    report = SupplyAggregator(clients, address_set, 18).compute()

    assert report.total == 900000.0
    assert report.circulating == 625000.0


def test_vesting_timeout_fails_the_cycle(address_set, make_clients):
    clients = make_clients()
    timeout = TransportError("eth explorer account.tokenbalance timed out after 5s")
    eth = FailingClient(VESTING, timeout, balances={TOKEN: {VESTING: 200_000 * E18}})
    clients[Chain.ETH] = eth

    with pytest.raises(TransportError) as exc_info:
        SupplyAggregator(clients, address_set, 18).compute()

    assert VESTING in str(exc_info.value)
    assert "timed out" in str(exc_info.value)
    assert exc_info.value.__cause__ is timeout
    assert exc_info.value.retryable
    assert eth.calls == [VESTING]


def test_failure_keeps_its_class(address_set, make_clients):
    clients = make_clients()
    clients[Chain.BSC] = FailingClient(
        BURN, ProtocolError("bsc explorer account.tokenbalance returned a non integer amount: 'x'"),
        supplies={TOKEN: 1_000_000 * E18}
    )

    with pytest.raises(ProtocolError) as exc_info:
        SupplyAggregator(clients, address_set, 18).compute()

    assert BURN in str(exc_info.value)
    assert not exc_info.value.retryable


def test_unexpected_errors_propagate_unchanged(address_set, make_clients):
    clients = make_clients()
    error = RuntimeError("boom")
    clients[Chain.ETH] = FailingClient(VESTING, error)

    with pytest.raises(RuntimeError) as exc_info:
        SupplyAggregator(clients, address_set, 18).compute()

    assert exc_info.value is error


def test_burn_above_max_supply_is_an_error(address_set, make_clients):
    clients = make_clients(max_supply=10 * E18, burn=11 * E18, vesting=0, project=0)

    with pytest.raises(ComputationError):
        SupplyAggregator(clients, address_set, 18).compute()


def test_negative_circulating_supply_is_not_clamped(address_set, make_clients):
    clients = make_clients(max_supply=100 * E18, burn=10 * E18, vesting=60 * E18, project=31 * E18)

    with pytest.raises(ComputationError):
        SupplyAggregator(clients, address_set, 18).compute()


def test_negative_amount_from_client_is_rejected(address_set, make_clients):
    clients = make_clients(vesting=-1)

    with pytest.raises(ProtocolError):
        SupplyAggregator(clients, address_set, 18).compute()


def test_queries_run_in_parallel(address_set, make_clients):
    # One total supply call and three balance calls
    barrier = threading.Barrier(4)
    clients = make_clients(client_cls=functools.partial(BarrierClient, barrier))

    report = SupplyAggregator(clients, address_set, 18).compute()

    assert report.circulating == 650000.0


def test_batched_mode_sends_one_call_per_chain(address_set, make_clients):
    clients = make_clients(client_cls=BatchRecordingClient)

    report = SupplyAggregator(clients, address_set, 18, batched=True).compute()

    assert report.total == 900000.0
    assert report.circulating == 650000.0
    assert clients[Chain.BSC].batches == [[BURN, PROJECT]]
    assert clients[Chain.ETH].batches == [[VESTING]]


def test_batched_count_mismatch_aborts_the_cycle(make_clients):
    second_wallet = "0x1111111111111111111111111111111111111111"
    address_set = AddressSet(
        token_addresses={Chain.BSC: TOKEN, Chain.ETH: TOKEN},
        supply_chain=Chain.BSC,
        burn=Holding(chain=Chain.BSC, address=BURN),
        vesting=Holding(chain=Chain.ETH, address=VESTING),
        project_wallets=(
            Holding(chain=Chain.BSC, address=PROJECT),
            Holding(chain=Chain.BSC, address=second_wallet),
        )
    )
    clients = make_clients()
    clients[Chain.BSC] = ShortBatchClient(supplies={TOKEN: 1_000_000 * E18})

    with pytest.raises(ProtocolError) as exc_info:
        SupplyAggregator(clients, address_set, 18, batched=True).compute()

    assert "expected 3 balances, got 2" in str(exc_info.value)


def test_missing_chain_client(address_set, make_clients):
    clients = make_clients()
    del clients[Chain.ETH]

    with pytest.raises(ConfigError):
        SupplyAggregator(clients, address_set, 18)


@pytest.mark.parametrize("wallet", [
    Holding(chain=Chain.BSC, address=PROJECT),
    Holding(chain=Chain.BSC, address=PROJECT.lower()),
    Holding(chain=Chain.BSC, address=BURN),
    Holding(chain=Chain.ETH, address=VESTING),
])
def test_holder_listed_twice_is_rejected(wallet):
    with pytest.raises(ValidationError) as exc_info:
        AddressSet(
            token_addresses={Chain.BSC: TOKEN, Chain.ETH: TOKEN},
            supply_chain=Chain.BSC,
            burn=Holding(chain=Chain.BSC, address=BURN),
            vesting=Holding(chain=Chain.ETH, address=VESTING),
            project_wallets=(Holding(chain=Chain.BSC, address=PROJECT), wallet)
        )

    assert "listed more than once" in str(exc_info.value)


def test_same_address_on_another_chain_is_a_different_holder(make_clients):
    address_set = AddressSet(
        token_addresses={Chain.BSC: TOKEN, Chain.ETH: TOKEN},
        supply_chain=Chain.BSC,
        burn=Holding(chain=Chain.BSC, address=BURN),
        vesting=Holding(chain=Chain.ETH, address=VESTING),
        project_wallets=(
            Holding(chain=Chain.BSC, address=PROJECT),
            Holding(chain=Chain.ETH, address=PROJECT),
        )
    )
    clients = make_clients()
    clients[Chain.ETH].balances[TOKEN][PROJECT.lower()] = 25_000 * E18

    report = SupplyAggregator(clients, address_set, 18).compute()

    assert report.circulating == 625000.0
