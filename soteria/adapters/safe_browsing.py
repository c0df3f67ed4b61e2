"""
Google Safe Browsing adapter for the reputation signal.

Thin wrapper around the v4 threatMatches:find endpoint.
"""
import httpx
from typing import List, Dict, Any, Optional

from soteria.errors import ThreatLookupError
from soteria import config


class SafeBrowsingAdapter:
    """
    Wrapper for the Safe Browsing Lookup API.

    Any transport, status or decode problem is raised as ThreatLookupError;
    callers decide how to degrade.
    """

    def __init__(
        self,
        api_key: str = config.SAFE_BROWSING_API_KEY,
        endpoint: str = config.SAFE_BROWSING_ENDPOINT,
        timeout: float = config.REQUEST_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key
        self.endpoint = endpoint
        self.timeout = timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def build_payload(self, url: str) -> Dict[str, Any]:
        """Request body submitting `url` as a single candidate threat entry"""
        return {
            "client": {
                "clientId": config.SAFE_BROWSING_CLIENT_ID,
                "clientVersion": config.SAFE_BROWSING_CLIENT_VERSION
            },
            "threatInfo": {
                "threatTypes": list(config.THREAT_TYPES),
                "platformTypes": list(config.PLATFORM_TYPES),
                "threatEntryTypes": list(config.THREAT_ENTRY_TYPES),
                "threatEntries": [
                    {"url": url}
                ]
            }
        }

    async def find_matches(self, url: str) -> List[Dict[str, Any]]:
        """
        Look up `url` against the malware and social engineering lists.

        Args:
            url: Candidate URL

        Returns:
            List of threat matches (empty if the URL is not listed)

        Raises:
            ThreatLookupError: on timeout, connection error, non-2xx status,
                or a body that is not the expected JSON shape
        """
        if not self.configured:
            raise ThreatLookupError("Safe Browsing API key is not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.endpoint,
                    params={"key": self.api_key},
                    json=self.build_payload(url),
                    headers={"Content-Type": "application/json"}
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise ThreatLookupError(f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            raise ThreatLookupError(f"Malformed response body: {e}") from e

        if not isinstance(data, dict):
            raise ThreatLookupError(f"Unexpected response type: {type(data).__name__}")

        matches = data.get("matches") or []
        if not isinstance(matches, list):
            raise ThreatLookupError(f"Unexpected 'matches' type: {type(matches).__name__}")

        return matches


# Global instance
safe_browsing = SafeBrowsingAdapter()
