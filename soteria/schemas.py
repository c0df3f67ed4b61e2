"""
Pydantic data models for Soteria.

Defines all core data structures: Events, Signal Scores, Score Results,
Cache Entries, Registration Info and API request/response models.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone
from enum import Enum


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ==================== Event System ====================

class EventLevel(str, Enum):
    """Windows Event Viewer style event levels"""
    INFORMATION = "Information"
    WARNING = "Warning"
    ERROR = "Error"
    CRITICAL = "Critical"


class EventCategory(str, Enum):
    """Event category taxonomy"""
    SCORING = "Scoring"
    REPUTATION = "Reputation"
    REGISTRATION = "Registration"
    SYSTEM = "System"


class Event(BaseModel):
    """
    Windows Event Viewer style event.

    One line of logs/events.jsonl.
    """
    event_id: int  # SOT-1001 to SOT-4003
    timestamp: datetime = Field(default_factory=_utcnow)
    level: EventLevel
    category: EventCategory
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)

    def to_jsonl(self) -> str:
        """Serialize to JSONL format for logging"""
        return self.model_dump_json()


# ==================== Trust Scoring ====================

class SignalScores(BaseModel):
    """
    Three-signal trust breakdown.

    Each signal is an integer between 0 (untrusted) and 100 (trusted).
    """
    model_config = ConfigDict(frozen=True)

    reputation: int = Field(ge=0, le=100, description="Threat-intelligence reputation score")
    ssl: int = Field(ge=0, le=100, description="Transport security score")
    contact: int = Field(ge=0, le=100, description="Contact information presence score")


class ScoreResult(BaseModel):
    """
    Weighted trust score plus the per-signal breakdown.

    Immutable once constructed.
    """
    model_config = ConfigDict(frozen=True)

    total: int = Field(ge=0, le=100)
    details: SignalScores


class CacheEntry(BaseModel):
    """Cached score result, stored as {timestamp, data} under the URL key."""
    timestamp: int  # epoch milliseconds
    data: ScoreResult


class SignalOutcome(BaseModel):
    """
    Result of evaluating one remote signal.

    Either `score` is set, or `error` holds the failure that prevented it.
    """
    signal: str
    score: Optional[int] = Field(default=None, ge=0, le=100)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.score is not None

    def unwrap_or(self, default: int) -> int:
        """Return the score, or `default` if evaluation failed"""
        return self.score if self.ok else default


class ScoringConfig(BaseModel):
    """Weights and cache lifetime handed to the aggregator and cache store."""
    model_config = ConfigDict(frozen=True)

    weights: Dict[str, int]
    cache_ttl_ms: int = Field(gt=0)

    @classmethod
    def default(cls) -> "ScoringConfig":
        from soteria import config
        return cls(weights=dict(config.SIGNAL_WEIGHTS), cache_ttl_ms=config.CACHE_TTL_MS)


# ==================== Registration Lookup ====================

class RegistrationInfo(BaseModel):
    """
    Domain registration metadata from RDAP.

    Informational only; never cached and never merged into a ScoreResult.
    """
    model_config = ConfigDict(populate_by_name=True)

    creation_date: str = Field(alias="creationDate")
    raw_data: Optional[Any] = Field(default=None, alias="rawData")


# ==================== API Request/Response Models ====================

class ContactLink(BaseModel):
    """Hyperlink text and target scraped by the caller"""
    text: str = ""
    href: str = ""


class ScoreRequest(BaseModel):
    """API request model for trust scoring"""
    url: str = Field(min_length=1, max_length=8192)
    has_contact_info: bool = False
    links: List[ContactLink] = Field(default_factory=list, description="Optional raw page links")


class RegistrationRequest(BaseModel):
    """API request model for registration lookup"""
    url: str = Field(min_length=1, max_length=8192)


class AnalysisResponse(BaseModel):
    """API response model for a combined score and registration lookup"""
    url: str
    score: ScoreResult
    registration: RegistrationInfo
    timestamp: datetime = Field(default_factory=_utcnow)


class SystemStatus(BaseModel):
    """API response model for system health check"""
    status: str
    version: str
    safe_browsing_configured: bool
    cached_scores: int
    event_count: int
