"""
Exception hierarchy for Soteria.

SoteriaError (base)
├── InvalidURLError          - malformed input, terminal for scoring
├── ThreatLookupError        - reputation service unreachable or malformed
├── RegistrationLookupError  - RDAP service unreachable or malformed
└── CacheUnavailableError    - score cache backend failure

Only InvalidURLError ever reaches a caller of the scoring API. The others
are recovered where they are raised.
"""


class SoteriaError(Exception):
    """Base class for all Soteria errors."""


class InvalidURLError(SoteriaError, ValueError):
    """URL could not be parsed at all."""

    def __init__(self, url: str, reason: str = "malformed URL"):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid URL {url!r}: {reason}")


class ThreatLookupError(SoteriaError):
    """Transport or parse failure talking to the threat-matching service."""


class RegistrationLookupError(SoteriaError):
    """Transport or parse failure talking to the RDAP service."""


class CacheUnavailableError(SoteriaError):
    """Score cache backend could not be read or written."""
