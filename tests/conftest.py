from datetime import timedelta
from decimal import Decimal
from random import Random

import pytest

from services.bitcoin_service import BitcoinPriceService
from services.cache import TtlCache
from services.history_synthesis import HistorySynthesizer
from tests.helpers.fake_clock import FakeClock
from tests.helpers.stub_market_source import StubMarketSource

ANCHORS = (Decimal("29400"), Decimal("26000"), Decimal("42000"), Decimal("70000"))


@pytest.fixture(scope="function")
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="function")
def cache(clock: FakeClock) -> TtlCache:
    return TtlCache(ttl=timedelta(minutes=10), clock=clock)


@pytest.fixture(scope="function")
def market_source() -> StubMarketSource:
    return StubMarketSource()


@pytest.fixture(scope="function")
def synthesizer() -> HistorySynthesizer:
    return HistorySynthesizer(anchor_prices=ANCHORS, rng=Random(3))


@pytest.fixture(scope="function")
def bitcoin_service(
    market_source: StubMarketSource,
    cache: TtlCache,
    synthesizer: HistorySynthesizer,
    clock: FakeClock,
) -> BitcoinPriceService:
    return BitcoinPriceService(source=market_source, cache=cache, synthesizer=synthesizer, clock=clock)
