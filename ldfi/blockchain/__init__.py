from typing import Dict
from ldfi.models import Chain
from .chain_client import ChainClient


def build_chain_clients(settings) -> Dict[Chain, ChainClient]:
    # One client per chain, as selected by CHAIN_BACKEND
    from ldfi.settings import ChainBackend

    if settings.chain_backend == ChainBackend.Dummy:
        from .dummy.dummy_client import DummyChainClient
        # Every token holds the configured max supply, every holder holds nothing
        address_set = settings.address_set()
        max_supply = settings.dummy_max_supply * 10 ** settings.token_decimals
        return {
            chain: DummyChainClient(supplies={address_set.token_address(chain): max_supply})
            for chain in Chain
        }

    from .explorer.explorer_client import ExplorerClient
    urls = settings.explorer_api_urls()
    keys = settings.explorer_api_keys()
    return {
        chain: ExplorerClient(chain, urls[chain], keys[chain], timeout=settings.explorer_timeout)
        for chain in Chain
    }
