"""
Keeps issued quotes in the Django cache for their lifetime.
A quote can be taken out exactly once.
"""

import logging
from typing import Optional
from uuid import UUID

from django.core.cache import cache as default_cache

from apps.exchange.domain.models import Quote

logger = logging.getLogger(__name__)

CACHE_QUOTE_PREFIX = "quote"


class QuoteStore:

    def __init__(self, cache=None):
        self.cache = cache or default_cache

    @staticmethod
    def _key(quote_id) -> str:
        return f"{CACHE_QUOTE_PREFIX}:{quote_id}"

    def save(self, quote: Quote, timeout_seconds: int) -> None:
        self.cache.set(self._key(quote.id), quote, timeout_seconds)

    def take(self, quote_id: UUID) -> Optional[Quote]:
        """Remove and return the quote; None when unknown, expired or already taken."""
        key = self._key(quote_id)
        quote = self.cache.get(key)
        if quote is None:
            return None
        if not self.cache.delete(key):
            logger.info("Quote %s was consumed concurrently", quote_id)
            return None
        return quote
