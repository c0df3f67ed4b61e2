"""
URL parsing helpers.

Soteria only needs to know whether a string is a URL at all, what its
scheme is, and which host it points at.
"""
import re
from typing import Optional
from urllib.parse import urlsplit, SplitResult

from soteria.errors import InvalidURLError


class URLUtils:
    """
    Strict-enough URL parsing.

    A URL is valid when it has a scheme, and, for schemes that address a
    network host (http, https, ftp, ws, wss), a non-empty host and a
    well-formed port.
    """

    SCHEME_PATTERN = re.compile(r'^[A-Za-z][A-Za-z0-9+.\-]*$')
    HOST_SCHEMES = {"http", "https", "ftp", "ws", "wss"}
    SECURE_SCHEME = "https"

    @staticmethod
    def parse(url: str) -> SplitResult:
        """
        Parse URL or raise InvalidURLError.

        Examples:
            >>> URLUtils.parse("https://example.com/a?b=c").hostname
            'example.com'

            >>> URLUtils.is_valid("example.com")
            False
        """
        if not isinstance(url, str) or not url.strip():
            raise InvalidURLError(str(url), "empty URL")

        if url != url.strip() or any(c in url for c in "\r\n\t "):
            raise InvalidURLError(url, "whitespace in URL")

        try:
            parts = urlsplit(url)
        except ValueError as e:
            raise InvalidURLError(url, str(e)) from e

        if not parts.scheme or not URLUtils.SCHEME_PATTERN.match(parts.scheme):
            raise InvalidURLError(url, "missing scheme")

        if parts.scheme.lower() in URLUtils.HOST_SCHEMES:
            if not parts.netloc or not parts.hostname:
                raise InvalidURLError(url, "missing host")
            try:
                parts.port
            except ValueError as e:
                raise InvalidURLError(url, str(e)) from e

        return parts

    @staticmethod
    def is_valid(url: str) -> bool:
        try:
            URLUtils.parse(url)
        except InvalidURLError:
            return False
        return True

    @staticmethod
    def is_secure(url: str) -> bool:
        """True only for the https scheme; unparseable input is not secure"""
        try:
            return URLUtils.parse(url).scheme.lower() == URLUtils.SECURE_SCHEME
        except InvalidURLError:
            return False

    @staticmethod
    def hostname(url: str) -> Optional[str]:
        """Hostname of a URL, or None when it has none"""
        return URLUtils.parse(url).hostname
