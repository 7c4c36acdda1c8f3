from ..chain_client import ChainClient
from ldfi.errors import TransportError, ProtocolError
from ldfi.models import Chain
from typing import Any, Dict, Optional
import logging
import requests


class ExplorerClient(ChainClient):
    # Etherscan compatible explorer API (etherscan.io, bscscan.com)

    def __init__(self, chain: Chain, base_url: str, api_key: str, timeout: float = 5, session: Optional[requests.Session] = None) -> None:
        super().__init__()

        self.logger = logging.getLogger(f"[Explorer Client][{chain.value}]")

        self.chain = chain
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()


    def total_supply(self, token_address: str) -> int:
        return self.query_amount({
            "module": "stats",
            "action": "tokensupply",
            "contractaddress": token_address
        })


    def get_balance(self, token_address: str, holder_address: str) -> int:
        return self.query_amount({
            "module": "account",
            "action": "tokenbalance",
            "contractaddress": token_address,
            "address": holder_address,
            "tag": "latest"
        })


    def query_amount(self, params: Dict[str, str]) -> int:
        data = self.query(params)
        operation = f"{params['module']}.{params['action']}"

        if data["status"] != "1":
            # Rate limits and invalid keys come back as status 0
            raise TransportError(f"{self.chain.value} explorer {operation} failed: {data.get('message')} ({data['result']})")

        result = data["result"]
        if not isinstance(result, str) or not result.isascii() or not result.isdigit():
            raise ProtocolError(f"{self.chain.value} explorer {operation} returned a non integer amount: {result!r}")

        return int(result)


    def query(self, params: Dict[str, str]) -> Dict[str, Any]:
        operation = f"{params['module']}.{params['action']}"

        self.logger.debug(f"Query {operation} {params}")

        try:
            resp = self.session.get(
                self.base_url,
                params={**params, "apikey": self.api_key},
                timeout=self.timeout
            )
        except requests.Timeout as e:
            raise TransportError(f"{self.chain.value} explorer {operation} timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise TransportError(f"{self.chain.value} explorer {operation} request failed: {e}") from e

        if resp.status_code < 200 or resp.status_code >= 300:
            self.logger.error(f"[{resp.status_code}] {resp.text}")
            raise TransportError(f"{self.chain.value} explorer {operation} answered HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise ProtocolError(f"{self.chain.value} explorer {operation} returned invalid JSON") from e

        if not isinstance(data, dict) or "status" not in data or "result" not in data:
            raise ProtocolError(f"{self.chain.value} explorer {operation} returned an unexpected body: {data!r}")

        return data
