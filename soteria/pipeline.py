"""
Soteria Pipeline: Runs trust scoring and registration lookup side by side.
"""
import asyncio
from typing import Callable, Dict, Optional

from soteria.detection.contact_signal import has_contact_links
from soteria.detection.score_aggregator import ScoreAggregator, score_aggregator
from soteria.logging.event_logger import EventLogger, logger
from soteria.lookup.registration_lookup import RegistrationLookup, registration_lookup
from soteria.schemas import AnalysisResponse, ScoreRequest
from soteria import config


# Display callback owned by the presentation layer: (total, details)
ScoreCallback = Callable[[int, Dict[str, int]], None]


class TrustPipeline:
    """
    End-to-end evaluation of one page.

    Flow:
    1. Resolve contact presence (boolean, or derived from raw links)
    2. Compute trust score (cached) and registration lookup concurrently
    3. Hand the score to the display callback as soon as it is ready
    4. Return both results; registration never touches the score
    """

    def __init__(
        self,
        aggregator: ScoreAggregator = score_aggregator,
        registration: RegistrationLookup = registration_lookup,
        event_logger: EventLogger = logger
    ):
        self.aggregator = aggregator
        self.registration = registration
        self.event_logger = event_logger

    async def analyze(
        self,
        url: str,
        has_contact_info: bool = False,
        on_score: Optional[ScoreCallback] = None
    ) -> AnalysisResponse:
        """
        Score `url` and look up its registration date.

        Args:
            url: Page URL
            has_contact_info: Caller's contact-link inspection result
            on_score: Optional display callback receiving (total, details)

        Returns:
            AnalysisResponse with score and registration

        Raises:
            InvalidURLError: URL cannot be parsed (registration is not attempted)
        """
        score_task = asyncio.ensure_future(self._score_and_notify(url, has_contact_info, on_score))
        registration_task = asyncio.ensure_future(self.registration.lookup_registration(url))

        try:
            score = await score_task
        except BaseException:
            registration_task.cancel()
            raise

        registration = await registration_task
        return AnalysisResponse(url=url, score=score, registration=registration)

    async def analyze_request(self, request: ScoreRequest, on_score: Optional[ScoreCallback] = None) -> AnalysisResponse:
        """Analyze an API ScoreRequest"""
        return await self.analyze(request.url, self.resolve_contact(request), on_score)

    @staticmethod
    def resolve_contact(request: ScoreRequest) -> bool:
        """Explicit flag wins; otherwise inspect the supplied links"""
        return request.has_contact_info or has_contact_links(request.links, config.CONTACT_KEYWORDS)

    async def _score_and_notify(self, url: str, has_contact_info: bool, on_score: Optional[ScoreCallback]):
        result = await self.aggregator.compute_score(url, has_contact_info)
        if on_score is not None:
            on_score(result.total, result.details.model_dump())
        return result

    async def initialize(self):
        """
        Log startup. Call this once at startup.
        """
        await self.event_logger.log_system_event(
            event_id=4001,
            message="Soteria service started",
            details={
                "safe_browsing_configured": self.aggregator.reputation.adapter.configured,
                "cached_scores": self.aggregator.cache.size(),
                "weights": dict(self.aggregator.scoring_config.weights)
            }
        )


# Global instance
trust_pipeline = TrustPipeline()
