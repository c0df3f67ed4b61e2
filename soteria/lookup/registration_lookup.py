"""
Registration lookup: When was this domain registered?

Informational only. Results are not cached and never feed the trust score.
"""
from typing import Any, Dict, Optional

from soteria.adapters.rdap import RDAPAdapter, rdap
from soteria.errors import InvalidURLError, RegistrationLookupError
from soteria.logging.event_logger import EventLogger, logger
from soteria.schemas import RegistrationInfo
from soteria.utils.url_utils import URLUtils
from soteria import config


class RegistrationLookup:
    """
    Resolve a URL's domain creation date via RDAP.

    Never raises: failures come back as the "lookup failed" sentinel,
    a response without a registration event as "unavailable" (with the
    raw RDAP payload attached).
    """

    def __init__(self, adapter: RDAPAdapter = rdap, event_logger: EventLogger = logger):
        self.adapter = adapter
        self.event_logger = event_logger

    async def lookup_registration(self, url: str) -> RegistrationInfo:
        """
        Look up registration metadata for the host of `url`.

        Args:
            url: Page URL (already validated by the caller)

        Returns:
            RegistrationInfo with creationDate and optional rawData
        """
        hostname: Optional[str] = None
        try:
            hostname = URLUtils.hostname(url)
            if not hostname:
                raise RegistrationLookupError(f"URL has no hostname: {url}")
            data = await self.adapter.fetch_domain(hostname)
        except (InvalidURLError, RegistrationLookupError) as e:
            await self.event_logger.log_registration(
                hostname, config.REGISTRATION_LOOKUP_FAILED, error=str(e)
            )
            return RegistrationInfo(creation_date=config.REGISTRATION_LOOKUP_FAILED)

        creation_date = self.find_registration_date(data)
        if creation_date is None:
            info = RegistrationInfo(creation_date=config.REGISTRATION_UNAVAILABLE, raw_data=data)
        else:
            info = RegistrationInfo(creation_date=creation_date, raw_data=data)

        await self.event_logger.log_registration(hostname, info.creation_date)
        return info

    @staticmethod
    def find_registration_date(data: Dict[str, Any]) -> Optional[str]:
        """
        eventDate of the first "registration" event, if any.

        Examples:
            >>> RegistrationLookup.find_registration_date(
            ...     {"events": [{"eventAction": "registration", "eventDate": "1995-08-14T04:00:00Z"}]})
            '1995-08-14T04:00:00Z'

            >>> RegistrationLookup.find_registration_date({"events": []}) is None
            True
        """
        events = data.get("events")
        if not isinstance(events, list):
            return None

        for event in events:
            if isinstance(event, dict) and event.get("eventAction") == "registration":
                event_date = event.get("eventDate")
                return str(event_date) if event_date else None

        return None


# Global instance
registration_lookup = RegistrationLookup()
