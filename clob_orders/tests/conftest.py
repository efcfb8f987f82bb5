"""Shared fixtures."""

import pytest

from ..auth.signer import Signer
from ..config import ClobOrderSettings
from ..trading.order_builder import OrderBuilder
from .fakes import FakeMarketData, TEST_PRIVATE_KEY


@pytest.fixture
def settings() -> ClobOrderSettings:
    """Default settings, isolated from the environment's .env file."""
    return ClobOrderSettings(_env_file=None)


@pytest.fixture
def signer() -> Signer:
    return Signer(TEST_PRIVATE_KEY)


@pytest.fixture
def market_data() -> FakeMarketData:
    return FakeMarketData()


@pytest.fixture
def builder(signer, settings, market_data) -> OrderBuilder:
    return OrderBuilder(signer, settings=settings, market_data=market_data)
