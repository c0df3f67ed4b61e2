"""
JSONL event logger with Windows Event Viewer style Event IDs.

Async-safe logging of scoring, reputation, registration and system events.
"""
import asyncio
from pathlib import Path
from typing import Optional, List, Dict, Any

from soteria.schemas import Event, EventLevel, EventCategory, ScoreResult
from soteria import config


class EventLogger:
    """
    Async JSONL logger for Soteria events.

    Event ID ranges:
    - SOT-1001 to SOT-1999: Scoring events
    - SOT-2001 to SOT-2999: Reputation events
    - SOT-3001 to SOT-3999: Registration events
    - SOT-4001 to SOT-4999: System events

    All events written to logs/events.jsonl in append-only mode.
    """

    def __init__(self, log_path: Path = config.EVENT_LOG_FILE):
        self.log_path = log_path
        self.lock = asyncio.Lock()

    async def log_event(self, event: Event) -> None:
        """
        Append event to JSONL log file.

        Serialized with an async lock so concurrent evaluations never
        interleave partial lines.

        Args:
            event: Event object to log
        """
        async with self.lock:
            # Ensure parent directory exists (handles reset scenarios)
            self.log_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(event.to_jsonl() + "\n")

    async def log_score(self, url: str, result: ScoreResult, cached: bool = False):
        """
        Log a score served to a caller.

        Event ID: SOT-1001 (computed) or SOT-1002 (cache hit)
        """
        event_id = 1002 if cached else 1001
        event = Event(
            event_id=event_id,
            level=EventLevel.INFORMATION,
            category=EventCategory.SCORING,
            message=f"{config.EVENT_IDS[event_id]}: {result.total} for {url[:100]}",
            details={
                "url": url,
                "total": result.total,
                "details": result.details.model_dump(),
                "cached": cached
            }
        )
        await self.log_event(event)

    async def log_invalid_url(self, url: str, reason: str):
        """Event ID: SOT-1003"""
        event = Event(
            event_id=1003,
            level=EventLevel.WARNING,
            category=EventCategory.SCORING,
            message=f"Invalid URL rejected: {reason}",
            details={"url": url[:200], "reason": reason}
        )
        await self.log_event(event)

    async def log_reputation(self, url: str, score: int, error: Optional[str] = None):
        """
        Log a reputation outcome worth recording.

        Event IDs:
        - SOT-2001: Lookup failed, neutral score applied
        - SOT-2002: Threat match found
        """
        if error is not None:
            event_id = 2001
            level = EventLevel.WARNING
        else:
            event_id = 2002
            level = EventLevel.ERROR

        event = Event(
            event_id=event_id,
            level=level,
            category=EventCategory.REPUTATION,
            message=f"{config.EVENT_IDS[event_id]}: {url[:100]}",
            details={"url": url, "score": score, "error": error}
        )
        await self.log_event(event)

    async def log_registration(self, hostname: Optional[str], creation_date: str, error: Optional[str] = None):
        """
        Log registration lookup result.

        Event IDs:
        - SOT-3001: Registration date found
        - SOT-3002: No registration event in RDAP response
        - SOT-3003: Lookup failed
        """
        if error is not None:
            event_id = 3003
            level = EventLevel.WARNING
        elif creation_date == config.REGISTRATION_UNAVAILABLE:
            event_id = 3002
            level = EventLevel.INFORMATION
        else:
            event_id = 3001
            level = EventLevel.INFORMATION

        event = Event(
            event_id=event_id,
            level=level,
            category=EventCategory.REGISTRATION,
            message=f"{config.EVENT_IDS[event_id]}: {hostname}",
            details={"hostname": hostname, "creation_date": creation_date, "error": error}
        )
        await self.log_event(event)

    async def log_system_event(
        self,
        event_id: int,
        message: str,
        details: Optional[dict] = None,
        level: EventLevel = EventLevel.INFORMATION
    ):
        """
        Log system-level event.

        Event IDs:
        - SOT-4001: Service started
        - SOT-4002: Cache unavailable
        - SOT-4003: Cache reset
        """
        event = Event(
            event_id=event_id,
            level=level,
            category=EventCategory.SYSTEM,
            message=message,
            details=details or {}
        )
        await self.log_event(event)

    def read_events(self, limit: int = 100, level: Optional[EventLevel] = None) -> List[Event]:
        """
        Read recent events from log.

        Args:
            limit: Maximum number of events to return
            level: Filter by event level (optional)

        Returns:
            List of Event objects (most recent first)
        """
        if not self.log_path.exists():
            return []

        events = []
        with open(self.log_path, "r", encoding="utf-8") as f:
            lines = f.readlines()

        # Process most recent events first
        for line in reversed(lines):
            if not line.strip():
                continue
            try:
                event = Event.model_validate_json(line)
            except ValueError:
                # Skip malformed lines
                continue
            if level is None or event.level == level:
                events.append(event)
                if len(events) >= limit:
                    break

        return events

    def get_event_count(self) -> int:
        """Get total number of events logged"""
        if not self.log_path.exists():
            return 0

        with open(self.log_path, "r", encoding="utf-8") as f:
            return sum(1 for line in f if line.strip())


# Global logger instance
logger = EventLogger()
