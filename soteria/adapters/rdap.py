"""
RDAP adapter for domain registration data.
"""
import httpx
from typing import Dict, Any, Optional

from soteria.errors import RegistrationLookupError
from soteria import config


class RDAPAdapter:
    """
    Wrapper for an RDAP bootstrap service (rdap.org by default).

    rdap.org answers with a redirect to the authoritative registry, so
    redirects are followed.
    """

    def __init__(
        self,
        base_url: str = config.RDAP_BASE_URL,
        timeout: float = config.REQUEST_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def domain_endpoint(self, hostname: str) -> str:
        return f"{self.base_url}/domain/{hostname}"

    async def fetch_domain(self, hostname: str) -> Dict[str, Any]:
        """
        Fetch the RDAP domain object for `hostname`.

        Raises:
            RegistrationLookupError: on timeout, connection error, non-2xx
                status, or a body that is not a JSON object
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport,
                follow_redirects=True
            ) as client:
                response = await client.get(
                    self.domain_endpoint(hostname),
                    headers={"Accept": "application/rdap+json"}
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise RegistrationLookupError(
                f"RDAP error for {hostname}: {e.response.status_code} {e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            raise RegistrationLookupError(f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            raise RegistrationLookupError(f"Malformed RDAP body: {e}") from e

        if not isinstance(data, dict):
            raise RegistrationLookupError(f"Unexpected RDAP response type: {type(data).__name__}")

        return data


# Global instance
rdap = RDAPAdapter()
