"""
Score Aggregator: Orchestrates the 3 signals, weighting and caching.
"""
import asyncio
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional

from soteria.detection.contact_signal import ContactSignal, contact_signal
from soteria.detection.reputation_signal import ReputationSignal, reputation_signal
from soteria.detection.ssl_signal import SSLSignal, ssl_signal
from soteria.errors import CacheUnavailableError, InvalidURLError
from soteria.logging.event_logger import EventLogger, logger
from soteria.schemas import EventLevel, ScoreResult, ScoringConfig, SignalScores
from soteria.storage.score_cache import ScoreCache, score_cache
from soteria.utils.url_utils import URLUtils


def weighted_total(details: SignalScores, weights: Dict[str, int]) -> int:
    """
    Weighted aggregate of the signal scores, rounded half up.

    total = round(sum(score[k] * weight[k]) / 100)

    Examples:
        >>> weighted_total(SignalScores(reputation=100, ssl=0, contact=0), {"reputation": 70, "ssl": 20, "contact": 10})
        70

        >>> weighted_total(SignalScores(reputation=50, ssl=0, contact=100), {"reputation": 70, "ssl": 20, "contact": 10})
        45
    """
    scores = details.model_dump()
    raw = sum(Decimal(scores[name]) * Decimal(weight) for name, weight in weights.items()) / Decimal(100)
    return int(raw.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class ScoreAggregator:
    """
    Computes and caches the trust score for a URL.

    Weights (from ScoringConfig, default config.SIGNAL_WEIGHTS):
    1. Reputation (70) - Safe Browsing lookup
    2. SSL (20) - https scheme
    3. Contact (10) - contact links supplied by caller

    Flow: validate URL -> cache lookup -> signals -> weighted total ->
    write-through -> return.
    """

    def __init__(
        self,
        scoring_config: Optional[ScoringConfig] = None,
        cache: ScoreCache = score_cache,
        ssl: SSLSignal = ssl_signal,
        reputation: ReputationSignal = reputation_signal,
        contact: ContactSignal = contact_signal,
        event_logger: EventLogger = logger
    ):
        self.scoring_config = scoring_config or ScoringConfig.default()
        self.cache = cache
        self.ssl = ssl
        self.reputation = reputation
        self.contact = contact
        self.event_logger = event_logger

    async def compute_score(self, url: str, has_contact_info: bool = False) -> ScoreResult:
        """
        Trust score for `url`.

        Args:
            url: URL exactly as the caller saw it (also the cache key)
            has_contact_info: Result of the caller's page inspection

        Returns:
            ScoreResult with total and per-signal details

        Raises:
            InvalidURLError: URL cannot be parsed; nothing is cached
        """
        try:
            URLUtils.parse(url)
        except InvalidURLError as e:
            await self.event_logger.log_invalid_url(str(url), e.reason)
            raise

        cached = await self._cache_get(url)
        if cached is not None:
            await self.event_logger.log_score(url, cached, cached=True)
            return cached

        ssl_score, reputation_score = await asyncio.gather(
            self._ssl_score(url),
            self.reputation.score(url)
        )

        details = SignalScores(
            reputation=reputation_score,
            ssl=ssl_score,
            contact=self.contact.score(has_contact_info)
        )
        result = ScoreResult(
            total=weighted_total(details, self.scoring_config.weights),
            details=details
        )

        await self._cache_set(url, result)
        await self.event_logger.log_score(url, result)

        return result

    async def _ssl_score(self, url: str) -> int:
        return self.ssl.score(url)

    async def _cache_get(self, url: str) -> Optional[ScoreResult]:
        try:
            return await self.cache.get(url)
        except CacheUnavailableError as e:
            await self._log_cache_unavailable(url, "get", e)
            return None

    async def _cache_set(self, url: str, result: ScoreResult) -> None:
        try:
            await self.cache.set(url, result)
        except CacheUnavailableError as e:
            await self._log_cache_unavailable(url, "set", e)

    async def _log_cache_unavailable(self, url: str, operation: str, error: Exception):
        await self.event_logger.log_system_event(
            event_id=4002,
            message=f"Score cache {operation} failed - computing fresh result",
            details={"url": url, "operation": operation, "error": str(error)},
            level=EventLevel.WARNING
        )


# Global instance
score_aggregator = ScoreAggregator()
