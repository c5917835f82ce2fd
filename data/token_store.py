"""
Durable continuation-token cache over VideoStore settings.
One slot per query fingerprint, so a token never leaks into another query.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

_PREFIX = "page_token:"


class PageTokenStore:
    """Persist the provider's nextPageToken per query fingerprint.

    Keys live in the settings table as `page_token:{fingerprint}`.
    """

    def __init__(self, store):
        self._store = store

    def store(self, fingerprint: str, token: str) -> None:
        """Remember the token for the page after the current one, replacing any older token."""
        if not token:
            return
        self._store.set_setting(_PREFIX + fingerprint, token)
        logger.debug("Cached page token for %r", fingerprint)

    def retrieve(self, fingerprint: str) -> Optional[str]:
        """Last token stored for this fingerprint, or None."""
        return self._store.get_setting(_PREFIX + fingerprint, "") or None

    def clear(self, fingerprint: str = "") -> int:
        """Forget one fingerprint's token, or all tokens when none is given."""
        if fingerprint:
            return int(self._store.delete_setting(_PREFIX + fingerprint))
        return self._store.delete_settings(_PREFIX)
