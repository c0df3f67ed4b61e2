"""
Shared fixtures: isolated event log, controllable clock, fake remote services.
"""
import httpx
import pytest

from soteria.adapters.rdap import RDAPAdapter
from soteria.adapters.safe_browsing import SafeBrowsingAdapter
from soteria.detection.reputation_signal import ReputationSignal
from soteria.detection.score_aggregator import ScoreAggregator
from soteria.logging.event_logger import EventLogger
from soteria.lookup.registration_lookup import RegistrationLookup
from soteria.pipeline import TrustPipeline
from soteria.storage.score_cache import MemoryBackend, ScoreCache
from soteria.utils.clock import MockClock
from soteria import config


class FakeService:
    """
    Records requests and answers them with a canned handler.

    `respond` is either an httpx.Response factory or an exception to raise.
    """

    def __init__(self, respond):
        self.respond = respond
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.respond, Exception):
            raise self.respond
        return self.respond(request)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def json_response(body, status_code=200):
    return lambda request: httpx.Response(status_code, json=body)


@pytest.fixture
def event_logger(tmp_path):
    return EventLogger(log_path=tmp_path / "logs" / "events.jsonl")


@pytest.fixture
def clock():
    return MockClock()


@pytest.fixture
def cache(clock):
    return ScoreCache(backend=MemoryBackend(), ttl_ms=config.CACHE_TTL_MS, clock=clock)


@pytest.fixture
def safe_browsing_service():
    """Safe Browsing stub reporting no matches"""
    return FakeService(json_response({}))


@pytest.fixture
def rdap_service():
    """RDAP stub with a registration event"""
    return FakeService(json_response({
        "ldhName": "EXAMPLE.COM",
        "events": [
            {"eventAction": "expiration", "eventDate": "2026-08-13T04:00:00Z"},
            {"eventAction": "registration", "eventDate": "1995-08-14T04:00:00Z"}
        ]
    }))


@pytest.fixture
def reputation(safe_browsing_service, event_logger):
    adapter = SafeBrowsingAdapter(api_key="test-key", transport=safe_browsing_service.transport())
    return ReputationSignal(adapter=adapter, event_logger=event_logger)


@pytest.fixture
def aggregator(cache, reputation, event_logger):
    return ScoreAggregator(cache=cache, reputation=reputation, event_logger=event_logger)


@pytest.fixture
def registration(rdap_service, event_logger):
    adapter = RDAPAdapter(base_url="https://rdap.test", transport=rdap_service.transport())
    return RegistrationLookup(adapter=adapter, event_logger=event_logger)


@pytest.fixture
def pipeline(aggregator, registration, event_logger):
    return TrustPipeline(aggregator=aggregator, registration=registration, event_logger=event_logger)
