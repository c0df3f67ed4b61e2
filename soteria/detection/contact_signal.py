"""
Signal: Contact Information

The page inspection happens in the caller; this signal only turns its
answer into a score. `has_contact_links` is the heuristic callers use to
produce that answer from scraped links.
"""
from typing import Iterable, List, Optional, Tuple, Union

from soteria.schemas import ContactLink
from soteria import config


LinkLike = Union[ContactLink, Tuple[Optional[str], Optional[str]]]


def has_contact_links(links: Iterable[LinkLike], keywords: Optional[List[str]] = None) -> bool:
    """
    True if any link text or target contains a contact keyword.

    Matching is a case-insensitive substring test.

    Args:
        links: ContactLink models or (text, href) pairs
        keywords: Override config.CONTACT_KEYWORDS

    Examples:
        >>> has_contact_links([("Contact us", "/c")])
        True

        >>> has_contact_links([("Home", "/"), ("Blog", "/blog")])
        False
    """
    keywords = [k.lower() for k in (keywords or config.CONTACT_KEYWORDS)]

    for link in links:
        if isinstance(link, ContactLink):
            text, href = link.text, link.href
        else:
            text, href = link
        haystacks = [(text or "").lower(), (href or "").lower()]
        for keyword in keywords:
            if any(keyword in h for h in haystacks):
                return True

    return False


class ContactSignal:
    """Score 100 when the page exposes contact information, else 0."""

    name = "contact"

    def score(self, has_contact_info: bool) -> int:
        return 100 if has_contact_info else 0


# Global instance
contact_signal = ContactSignal()
