"""
Signal: Domain Reputation

Remote threat-intelligence lookup with a neutral fallback.
"""
from soteria.adapters.safe_browsing import SafeBrowsingAdapter, safe_browsing
from soteria.errors import ThreatLookupError
from soteria.logging.event_logger import EventLogger, logger
from soteria.schemas import SignalOutcome
from soteria import config


class ReputationSignal:
    """
    Score a URL against the Safe Browsing threat lists.

    - at least one match: 0
    - no match: 100
    - any lookup failure: neutral score (50)

    The failure is kept in a SignalOutcome and logged before it is
    collapsed to the neutral score.
    """

    name = "reputation"

    def __init__(
        self,
        adapter: SafeBrowsingAdapter = safe_browsing,
        event_logger: EventLogger = logger,
        neutral_score: int = config.NEUTRAL_REPUTATION_SCORE
    ):
        self.adapter = adapter
        self.event_logger = event_logger
        self.neutral_score = neutral_score

    async def evaluate(self, url: str) -> SignalOutcome:
        """
        Run the lookup without collapsing failures.

        Returns:
            SignalOutcome with either a score or the error message
        """
        try:
            matches = await self.adapter.find_matches(url)
        except ThreatLookupError as e:
            return SignalOutcome(signal=self.name, error=str(e))

        return SignalOutcome(signal=self.name, score=0 if matches else 100)

    async def score(self, url: str) -> int:
        """
        Reputation score between 0 (listed threat) and 100 (clean).

        Never raises on remote failure.
        """
        outcome = await self.evaluate(url)
        score = outcome.unwrap_or(self.neutral_score)

        if not outcome.ok:
            await self.event_logger.log_reputation(url, score, error=outcome.error)
        elif score == 0:
            await self.event_logger.log_reputation(url, 0)

        return score


# Global instance
reputation_signal = ReputationSignal()
