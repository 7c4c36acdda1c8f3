from concurrent.futures import ThreadPoolExecutor, wait, FIRST_EXCEPTION
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple
from ldfi.blockchain.chain_client import ChainClient
from ldfi.errors import SupplyError, ProtocolError, ComputationError, ConfigError
from ldfi.models import AddressSet, Chain, Holding, SupplyReport
import logging

logger = logging.getLogger("[Supply Aggregator]")

# Result key of the max supply query
MAX_SUPPLY = "max_supply"


@dataclass(frozen=True)
class SupplyQuery:
    # One remote call of an aggregation cycle
    description: str
    run: Callable[[], List[Tuple[object, int]]]


class SupplyAggregator:
    """
    Computes the token supplies from the explorers of both chains.

    Every remote call runs in parallel. A cycle either gets all of its
    amounts or fails as a whole with the error of the first failed call.
    """

    def __init__(self, clients: Dict[Chain, ChainClient], address_set: AddressSet, decimals: int, batched: bool = False):
        if decimals < 0:
            raise ConfigError(f"Invalid decimals {decimals}")

        for chain in {address_set.supply_chain, *(h.chain for h in address_set.holdings())}:
            if chain not in clients:
                raise ConfigError(f"No chain client for {chain.value}")

        self.clients = clients
        self.address_set = address_set
        self.decimals = decimals
        self.batched = batched

    def compute(self) -> SupplyReport:
        amounts = self.fetch_amounts()

        max_supply = amounts[MAX_SUPPLY]
        burned = amounts[self.address_set.burn]
        vesting = amounts[self.address_set.vesting]
        project = sum(amounts[h] for h in self.address_set.project_wallets)

        # Total Supply = Max Supply minus Burnt Tokens
        total = max_supply - burned
        if total < 0:
            raise ComputationError(f"Burnt balance {burned} exceeds max supply {max_supply}")

        # Circulating Supply = Total Supply minus Vesting Contract minus Project Wallets
        circulating = total - vesting - project
        if circulating < 0:
            raise ComputationError(f"Vesting {vesting} and project {project} balances exceed total supply {total}")

        logger.info(f"vesting:{vesting} project:{project} burn:{burned} circulating={circulating} total={total} max={max_supply}")

        return SupplyReport(
            total=self.ui_amount(total),
            circulating=self.ui_amount(circulating),
            max=self.ui_amount(max_supply)
        )

    def ui_amount(self, amount: int) -> float:
        # int / int is correctly rounded for any size
        return amount / 10 ** self.decimals

    def fetch_amounts(self) -> Dict[object, int]:
        queries = self.queries()

        with ThreadPoolExecutor(max_workers=len(queries), thread_name_prefix="supply-query") as executor:
            futures = [executor.submit(query.run) for query in queries]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)

            for query, future in zip(queries, futures):
                if future in done and future.exception() is not None:
                    for p in pending:
                        p.cancel()
                    # Leaving the executor waits for the calls already running
                    error = future.exception()
                    if isinstance(error, SupplyError):
                        raise error.__class__(f"{query.description}: {error}") from error
                    raise error

        amounts = {}
        for query, future in zip(queries, futures):
            for key, amount in future.result():
                if not isinstance(amount, int) or amount < 0:
                    raise ProtocolError(f"{query.description}: invalid amount {amount!r}")
                amounts[key] = amount

        return amounts

    def queries(self) -> List[SupplyQuery]:
        supply_chain = self.address_set.supply_chain
        supply_token = self.address_set.token_address(supply_chain)

        queries = [SupplyQuery(
            description=f"total supply of {supply_token} on {supply_chain.value}",
            run=lambda: [(MAX_SUPPLY, self.clients[supply_chain].total_supply(supply_token))]
        )]

        holdings = self.address_set.holdings()

        if self.batched:
            for chain in Chain:
                chain_holdings = [h for h in holdings if h.chain == chain]
                if len(chain_holdings) > 0:
                    queries.append(self.batched_query(chain, chain_holdings))
        else:
            for holding in holdings:
                queries.append(self.balance_query(holding))

        return queries

    def balance_query(self, holding: Holding) -> SupplyQuery:
        token = self.address_set.token_address(holding.chain)
        client = self.clients[holding.chain]
        return SupplyQuery(
            description=f"balance of {holding.address} in {token} on {holding.chain.value}",
            run=lambda: [(holding, client.get_balance(token, holding.address))]
        )

    def batched_query(self, chain: Chain, holdings: List[Holding]) -> SupplyQuery:
        token = self.address_set.token_address(chain)
        client = self.clients[chain]
        description = f"balances of {len(holdings)} holders in {token} on {chain.value}"

        def run() -> List[Tuple[object, int]]:
            amounts = client.balances_of(token, [h.address for h in holdings])
            # Pairing by position is only safe when nothing is missing
            if len(amounts) != len(holdings):
                raise ProtocolError(f"expected {len(holdings)} balances, got {len(amounts)}")
            return list(zip(holdings, amounts))

        return SupplyQuery(description=description, run=run)
