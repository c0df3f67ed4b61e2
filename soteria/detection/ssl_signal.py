"""
Signal: Transport Security

Local, synchronous scheme check.
"""
from soteria.utils.url_utils import URLUtils


class SSLSignal:
    """
    Score 100 for https URLs, 0 for anything else.

    Parse failures score 0 rather than raising, so this signal never
    blocks aggregation.
    """

    name = "ssl"

    def score(self, url: str) -> int:
        return 100 if URLUtils.is_secure(url) else 0


# Global instance
ssl_signal = SSLSignal()
