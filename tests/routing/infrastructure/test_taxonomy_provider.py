import unittest
from unittest.mock import AsyncMock, patch

from src.routing.domain.cache_keys import build_taxonomy_cache_key
from src.routing.domain.models import CredentialScope
from src.routing.infrastructure.sidebar_client import SidebarApiClient
from src.routing.infrastructure.taxonomy_provider import TAXONOMY_TTL_SECONDS, CachedTaxonomyProvider
from tests.utils.fakes import FakeCache

SCOPE = CredentialScope(api_token="tok", website_property_id="prop")
PAYLOAD = {
    "success": True,
    "data": [{"name": "Body", "procedures": [{"name": "Liposuction", "slugName": "lipo", "ids": [11]}]}],
}


class CachedTaxonomyProviderTests(unittest.TestCase):
    def test_fetches_once_then_serves_from_cache(self):
        cache = FakeCache()
        provider = CachedTaxonomyProvider(SidebarApiClient(base_url="http://unit.invalid"), cache)

        with patch.object(provider, "fetch_payload_async", new=AsyncMock(return_value=PAYLOAD)) as fetch:
            first = provider.get_taxonomy(SCOPE)
            second = provider.get_taxonomy(SCOPE)

        self.assertEqual(fetch.await_count, 1)
        self.assertEqual(first, second)
        self.assertEqual([p.slug for p in first.iter_procedures()], ["lipo"])
        key = build_taxonomy_cache_key("tok")
        self.assertEqual(cache.values[key], PAYLOAD)
        self.assertEqual(cache.ttls[key], TAXONOMY_TTL_SECONDS)

    def test_empty_scope_returns_none_without_fetch(self):
        provider = CachedTaxonomyProvider(SidebarApiClient(), FakeCache())
        with patch.object(provider, "fetch_payload_async", new=AsyncMock(return_value=PAYLOAD)) as fetch:
            self.assertIsNone(provider.get_taxonomy(CredentialScope()))
        fetch.assert_not_awaited()

    def test_failed_fetch_or_bad_payload_is_not_cached(self):
        cache = FakeCache()
        provider = CachedTaxonomyProvider(SidebarApiClient(), cache)
        for payload in (None, {"success": True, "data": "broken"}):
            with self.subTest(payload=payload):
                with patch.object(provider, "fetch_payload_async", new=AsyncMock(return_value=payload)):
                    self.assertIsNone(provider.get_taxonomy(SCOPE))
        self.assertEqual(cache.values, {})

    def test_unusable_cached_payload_is_refetched(self):
        cache = FakeCache()
        cache.values[build_taxonomy_cache_key("tok")] = ["stale"]
        provider = CachedTaxonomyProvider(SidebarApiClient(), cache)

        with patch.object(provider, "fetch_payload_async", new=AsyncMock(return_value=PAYLOAD)):
            snapshot = provider.get_taxonomy(SCOPE)

        self.assertFalse(snapshot.is_empty)
        self.assertEqual(cache.values[build_taxonomy_cache_key("tok")], PAYLOAD)


class FetchPayloadTests(unittest.IsolatedAsyncioTestCase):
    async def test_fetch_payload_passes_scope_token(self):
        client = SidebarApiClient(base_url="http://unit.invalid")
        provider = CachedTaxonomyProvider(client, FakeCache())
        with patch.object(client, "fetch_sidebar", new=AsyncMock(return_value=PAYLOAD)) as fetch:
            result = await provider.fetch_payload_async(SCOPE)

        self.assertEqual(result, PAYLOAD)
        self.assertEqual(fetch.await_args.args[1], ["tok"])


if __name__ == "__main__":
    unittest.main()
