# PATH: tests/conftest.py
"""
Pytest configuration and fixtures for connector tests.
"""

import json
import sys
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import OdosConfig  # noqa: E402
from core.models import Token  # noqa: E402

WETH_ADDRESS = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
USDC_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
DAI_ADDRESS = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
ROUTER_ADDRESS = "0xCf5540fFFCdC3d510B18bFcA6d2b9987b0772559"
API_URL = "https://api.odos.test"


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


class FakeChain:
    """In-memory chain exposing the collaborator contract the adapter reads."""

    def __init__(self, tokens, chain_id=1, gas_price=Decimal("20")):
        self.chain_id = chain_id
        self.gas_price = gas_price
        self.stored_token_list = []
        self.provider = MagicMock()
        self.init_calls = 0
        self.closed = False
        self._tokens = list(tokens)
        self._ready = False

    def ready(self):
        return self._ready

    async def init(self):
        self.init_calls += 1
        self.stored_token_list = list(self._tokens)
        self._ready = True

    async def close(self):
        self.closed = True


class RecordingTransport:
    """Answers every request with a handler and keeps what was sent."""

    def __init__(self, handler):
        self.handler = handler
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def bodies(self):
        return [json.loads(r.content) for r in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def weth():
    return Token(chain_id=1, address=WETH_ADDRESS, decimals=18, symbol="WETH", name="Wrapped Ether")


@pytest.fixture
def usdc():
    return Token(chain_id=1, address=USDC_ADDRESS, decimals=6, symbol="USDC", name="USD Coin")


@pytest.fixture
def dai():
    return Token(chain_id=1, address=DAI_ADDRESS, decimals=18, symbol="DAI", name="Dai Stablecoin")


@pytest.fixture
def fake_chain(weth, usdc):
    return FakeChain([weth, usdc])


@pytest.fixture
def odos_config():
    return OdosConfig(
        api_url=API_URL,
        allowed_slippage="1/100",
        gas_limit_estimate=150000,
        ttl=600,
        contract_addresses={"ethereum": {"mainnet": {"router_address": ROUTER_ADDRESS}}},
        chain_names={"ethereum": {"mainnet": "eth"}, "avalanche": "avax"},
    )


@pytest.fixture
def recording_transport():
    """Factory: recording_transport(handler) -> RecordingTransport."""
    return RecordingTransport
