import asyncio
from typing import Any

import aiohttp
from src.config.logger_config import logger

from src.routing.application.ports import CacheStorePort
from src.routing.domain.cache_keys import build_taxonomy_cache_key
from src.routing.domain.errors import TaxonomyUnavailable
from src.routing.domain.models import CredentialScope, TaxonomySnapshot
from src.routing.domain.taxonomy import parse_taxonomy_payload
from src.routing.infrastructure.sidebar_client import SidebarApiClient

TAXONOMY_TTL_SECONDS = 1800


class CachedTaxonomyProvider:
    """Synchronous taxonomy port over the async sidebar client, with a snapshot cache."""

    def __init__(
        self,
        client: SidebarApiClient,
        cache: CacheStorePort,
        ttl: int = TAXONOMY_TTL_SECONDS,
    ) -> None:
        self.client = client
        self.cache = cache
        self.ttl = ttl

    def get_taxonomy(self, scope: CredentialScope) -> TaxonomySnapshot | None:
        if scope.is_empty:
            return None

        key = build_taxonomy_cache_key(scope.api_token)
        cached = self.cache.get(key)
        if cached is not None:
            try:
                return parse_taxonomy_payload(cached)
            except TaxonomyUnavailable as exc:
                logger.warning("Dropping unusable cached taxonomy {}: {}", key, exc)
                self.cache.delete(key)

        payload = asyncio.run(self.fetch_payload_async(scope))
        if payload is None:
            logger.warning("Taxonomy fetch failed for website property {}", scope.website_property_id)
            return None
        try:
            snapshot = parse_taxonomy_payload(payload)
        except TaxonomyUnavailable as exc:
            logger.error("Taxonomy payload rejected: {}", exc)
            return None

        self.cache.set(key, payload, self.ttl)
        return snapshot

    async def fetch_payload_async(self, scope: CredentialScope) -> dict[str, Any] | None:
        connector = aiohttp.TCPConnector(limit=0, limit_per_host=10, ttl_dns_cache=300)
        async with aiohttp.ClientSession(connector=connector) as session:
            return await self.client.fetch_sidebar(session, [scope.api_token])
