"""
Unit tests for score aggregation and caching.

Tests:
- Weighted total and rounding
- Worked examples
- Cache hit / TTL expiry / write-through
- Invalid URL short-circuit
- Degradation when reputation or cache fail
"""
import asyncio
import json

import httpx
import pytest

from conftest import FakeService, json_response
from soteria.adapters.safe_browsing import SafeBrowsingAdapter
from soteria.detection.reputation_signal import ReputationSignal
from soteria.detection.score_aggregator import ScoreAggregator, weighted_total
from soteria.errors import CacheUnavailableError, InvalidURLError
from soteria.schemas import ScoreResult, ScoringConfig, SignalScores
from soteria.storage.score_cache import JsonFileBackend, MemoryBackend, ScoreCache
from soteria import config


WEIGHTS = {"reputation": 70, "ssl": 20, "contact": 10}


class BrokenBackend(MemoryBackend):
    """Backend whose every read and write fails."""

    def read(self, key):
        raise CacheUnavailableError("backend down")

    def write(self, key, entry):
        raise CacheUnavailableError("backend down")


class TestWeightedTotal:
    """Test the pure weighting function."""

    def test_all_max(self):
        """Test perfect signals give 100."""
        assert weighted_total(SignalScores(reputation=100, ssl=100, contact=100), WEIGHTS) == 100

    def test_all_zero(self):
        """Test zero signals give 0."""
        assert weighted_total(SignalScores(reputation=0, ssl=0, contact=0), WEIGHTS) == 0

    def test_neutral_reputation(self):
        """Test neutral reputation contributes 35."""
        assert weighted_total(SignalScores(reputation=50, ssl=100, contact=0), WEIGHTS) == 55

    def test_rounds_half_up(self):
        """Test x.5 rounds up, unlike Python's round()."""
        weights = {"reputation": 50, "ssl": 25, "contact": 25}
        assert weighted_total(SignalScores(reputation=3, ssl=0, contact=0), weights) == 2
        # 2.5: round() would give 2
        assert weighted_total(SignalScores(reputation=5, ssl=0, contact=0), weights) == 3

    def test_rounds_to_nearest(self):
        """Test fractional totals round to the nearest integer."""
        assert weighted_total(SignalScores(reputation=1, ssl=1, contact=1), WEIGHTS) == 1
        assert weighted_total(SignalScores(reputation=1, ssl=0, contact=0), WEIGHTS) == 1
        assert weighted_total(SignalScores(reputation=0, ssl=1, contact=1), WEIGHTS) == 0

    @pytest.mark.parametrize("reputation", [0, 1, 49, 50, 51, 99, 100])
    @pytest.mark.parametrize("ssl", [0, 100])
    @pytest.mark.parametrize("contact", [0, 37, 100])
    def test_total_in_range(self, reputation, ssl, contact):
        """Test total stays within [0,100] for weights summing to 100."""
        total = weighted_total(SignalScores(reputation=reputation, ssl=ssl, contact=contact), WEIGHTS)
        assert 0 <= total <= 100


class TestScoreAggregator:
    """Test compute_score end to end with fake services."""

    def test_secure_clean_with_contact(self, aggregator):
        """Test https, no threat match, contact links -> 100."""
        result = asyncio.run(aggregator.compute_score("https://example.com", True))
        assert result == ScoreResult(
            total=100,
            details=SignalScores(reputation=100, ssl=100, contact=100)
        )

    def test_insecure_clean_without_contact(self, aggregator):
        """Test http, no threat match, no contact links -> 70."""
        result = asyncio.run(aggregator.compute_score("http://example.com", False))
        assert result.details == SignalScores(reputation=100, ssl=0, contact=0)
        assert result.total == 70

    def test_insecure_listed_without_contact(self, cache, event_logger):
        """Test http, listed threat, no contact links -> 0."""
        service = FakeService(json_response({"matches": [{"threatType": "MALWARE"}]}))
        reputation = ReputationSignal(
            adapter=SafeBrowsingAdapter(api_key="k", transport=service.transport()),
            event_logger=event_logger
        )
        aggregator = ScoreAggregator(cache=cache, reputation=reputation, event_logger=event_logger)

        result = asyncio.run(aggregator.compute_score("http://example.com", False))
        assert result.details.reputation == 0
        assert result.total == 0

    def test_secure_listed_without_contact(self, cache, event_logger):
        """Test https, listed threat, no contact links -> 20."""
        service = FakeService(json_response({"matches": [{"threatType": "MALWARE"}]}))
        reputation = ReputationSignal(
            adapter=SafeBrowsingAdapter(api_key="k", transport=service.transport()),
            event_logger=event_logger
        )
        aggregator = ScoreAggregator(cache=cache, reputation=reputation, event_logger=event_logger)

        result = asyncio.run(aggregator.compute_score("https://example.com", False))
        assert result.details == SignalScores(reputation=0, ssl=100, contact=0)
        assert result.total == 20

    def test_result_is_immutable(self, aggregator):
        """Test ScoreResult cannot be modified."""
        result = asyncio.run(aggregator.compute_score("https://example.com", True))
        with pytest.raises(Exception):
            result.total = 0

    def test_second_call_served_from_cache(self, aggregator, safe_browsing_service):
        """Test idempotence within TTL without a second remote call."""
        async def run():
            first = await aggregator.compute_score("https://example.com", True)
            second = await aggregator.compute_score("https://example.com", True)
            return first, second

        first, second = asyncio.run(run())
        assert first == second
        assert safe_browsing_service.calls == 1

    def test_cache_hit_ignores_new_contact_flag(self, aggregator):
        """Test cached results are returned unchanged, not re-validated."""
        async def run():
            await aggregator.compute_score("https://example.com", True)
            return await aggregator.compute_score("https://example.com", False)

        assert asyncio.run(run()).details.contact == 100

    def test_recomputed_after_ttl(self, aggregator, safe_browsing_service, clock):
        """Test expiry triggers fresh signal evaluation."""
        async def run():
            await aggregator.compute_score("https://example.com", True)
            clock.advance(hours=24)
            safe_browsing_service.respond = json_response({"matches": [{"threatType": "MALWARE"}]})
            return await aggregator.compute_score("https://example.com", True)

        result = asyncio.run(run())
        assert safe_browsing_service.calls == 2
        assert result.details.reputation == 0
        assert result.total == 30

    def test_exact_string_keys(self, aggregator, safe_browsing_service):
        """Test trailing slash is a different cache key."""
        async def run():
            await aggregator.compute_score("https://example.com", True)
            await aggregator.compute_score("https://example.com/", True)

        asyncio.run(run())
        assert safe_browsing_service.calls == 2

    def test_write_through(self, aggregator, cache):
        """Test computed result is cached under the input URL."""
        result = asyncio.run(aggregator.compute_score("https://example.com?x=1", False))
        assert asyncio.run(cache.get("https://example.com?x=1")) == result

    def test_reputation_timeout_is_neutral(self, cache, event_logger):
        """Test simulated timeout yields reputation 50 and no exception."""
        service = FakeService(httpx.ReadTimeout("timed out"))
        reputation = ReputationSignal(
            adapter=SafeBrowsingAdapter(api_key="k", transport=service.transport()),
            event_logger=event_logger
        )
        aggregator = ScoreAggregator(cache=cache, reputation=reputation, event_logger=event_logger)

        result = asyncio.run(aggregator.compute_score("https://example.com", True))
        assert result.details.reputation == 50
        assert result.total == 65

    @pytest.mark.parametrize("url", ["", "example.com", "not a url", "http://"])
    def test_invalid_url_short_circuits(self, aggregator, cache, safe_browsing_service, url):
        """Test malformed input fails before any network call or caching."""
        with pytest.raises(InvalidURLError):
            asyncio.run(aggregator.compute_score(url, True))
        assert safe_browsing_service.calls == 0
        assert cache.size() == 0

    def test_invalid_url_logged(self, aggregator, event_logger):
        """Test rejected URL produces a 1003 event."""
        with pytest.raises(InvalidURLError):
            asyncio.run(aggregator.compute_score("example.com"))
        assert event_logger.read_events()[0].event_id == 1003

    def test_cache_unavailable_falls_through(self, reputation, event_logger, clock):
        """Test backend failure still returns a fresh result."""
        cache = ScoreCache(backend=BrokenBackend(), clock=clock)
        aggregator = ScoreAggregator(cache=cache, reputation=reputation, event_logger=event_logger)

        result = asyncio.run(aggregator.compute_score("https://example.com", True))
        assert result.total == 100

        ids = [e.event_id for e in event_logger.read_events()]
        assert ids.count(4002) == 2
        assert 1001 in ids

    def test_corrupt_cache_file_falls_through(self, tmp_path, reputation, event_logger, clock):
        """Test unreadable cache file does not fail scoring."""
        path = tmp_path / "scores.json"
        path.write_text("{broken", encoding="utf-8")
        cache = ScoreCache(backend=JsonFileBackend(path), clock=clock)
        aggregator = ScoreAggregator(cache=cache, reputation=reputation, event_logger=event_logger)

        result = asyncio.run(aggregator.compute_score("https://example.com", True))
        assert result.total == 100

    def test_corrupt_cache_file_recovers(self, tmp_path, reputation, safe_browsing_service, event_logger, clock):
        """Test caching resumes after the corrupt file is reset."""
        path = tmp_path / "scores.json"
        path.write_text("{broken", encoding="utf-8")
        cache = ScoreCache(backend=JsonFileBackend(path), clock=clock)
        aggregator = ScoreAggregator(cache=cache, reputation=reputation, event_logger=event_logger)

        async def run():
            for _ in range(3):
                await aggregator.compute_score("https://example.com", True)

        asyncio.run(run())
        assert safe_browsing_service.calls == 1
        assert "https://example.com" in json.loads(path.read_text(encoding="utf-8"))
        assert [e.event_id for e in event_logger.read_events()].count(4002) == 1

    def test_custom_weights(self, cache, reputation, event_logger):
        """Test weights come from ScoringConfig passed at construction."""
        scoring_config = ScoringConfig(
            weights={"reputation": 0, "ssl": 100, "contact": 0},
            cache_ttl_ms=config.CACHE_TTL_MS
        )
        aggregator = ScoreAggregator(
            scoring_config=scoring_config, cache=cache,
            reputation=reputation, event_logger=event_logger
        )

        result = asyncio.run(aggregator.compute_score("http://example.com", True))
        assert result.total == 0

    def test_default_config_matches_module_constants(self):
        """Test default ScoringConfig mirrors config.py."""
        default = ScoringConfig.default()
        assert default.weights == {"reputation": 70, "ssl": 20, "contact": 10}
        assert sum(default.weights.values()) == 100
        assert default.cache_ttl_ms == 24 * 60 * 60 * 1000

    def test_concurrent_different_urls(self, aggregator, safe_browsing_service):
        """Test parallel evaluations of different URLs are independent."""
        urls = [f"https://site{i}.example" for i in range(10)]

        async def run():
            return await asyncio.gather(*(aggregator.compute_score(u, True) for u in urls))

        results = asyncio.run(run())
        assert all(r.total == 100 for r in results)
        assert safe_browsing_service.calls == 10
