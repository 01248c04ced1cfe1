import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

from aiohttp import ContentTypeError

from src.config.logger_config import logger
from src.routing.infrastructure.sidebar_client import SIDEBAR_ENDPOINT, SidebarApiClient


class FakeResponse:
    def __init__(self, status=200, json_data=None, text_data=""):
        self.status = status
        self._json_data = json_data
        self._text_data = text_data
        self.request_info = SimpleNamespace(real_url="http://test.invalid")
        self.history = ()

    async def json(self):
        if isinstance(self._json_data, Exception):
            raise self._json_data
        return self._json_data

    async def text(self):
        return self._text_data

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, responses):
        self._responses = list(responses)
        self.calls = []

    def post(self, url, json=None, **kwargs):
        if not self._responses:
            raise AssertionError("No more fake responses configured")
        self.calls.append((url, json))
        return self._responses.pop(0)


SIDEBAR = {"success": True, "data": [{"name": "Body", "procedures": []}]}


class SidebarApiClientTests(unittest.IsolatedAsyncioTestCase):
    async def test_fetch_posts_tokens_and_returns_payload(self):
        client = SidebarApiClient(base_url="http://unit.invalid/")
        session = FakeSession([FakeResponse(json_data=SIDEBAR)])

        result = await client.fetch_sidebar(session, [" tok ", ""])

        self.assertEqual(result, SIDEBAR)
        self.assertEqual(session.calls, [(f"http://unit.invalid{SIDEBAR_ENDPOINT}", {"apiTokens": ["tok"]})])

    async def test_no_tokens_skips_request(self):
        session = FakeSession([])
        self.assertIsNone(await SidebarApiClient().fetch_sidebar(session, ["", "  "]))
        self.assertEqual(session.calls, [])

    async def test_retries_on_500_then_success(self):
        client = SidebarApiClient(base_url="http://unit.invalid")
        session = FakeSession([FakeResponse(status=500), FakeResponse(status=429), FakeResponse(json_data=SIDEBAR)])

        with patch("src.routing.infrastructure.sidebar_client.asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await client.fetch_sidebar(session, ["tok"])

        self.assertEqual(result, SIDEBAR)
        self.assertEqual(len(session.calls), 3)
        self.assertEqual([call.args[0] for call in sleep.await_args_list], [2, 4])

    async def test_gives_up_after_retries(self):
        client = SidebarApiClient(base_url="http://unit.invalid")
        session = FakeSession([FakeResponse(status=503) for _ in range(3)])

        with patch("src.routing.infrastructure.sidebar_client.asyncio.sleep", new_callable=AsyncMock):
            result = await client.fetch_sidebar(session, ["tok"], retries=3)

        self.assertIsNone(result)
        self.assertEqual(len(session.calls), 3)

    async def test_client_error_status_is_not_retried(self):
        client = SidebarApiClient(base_url="http://unit.invalid")
        session = FakeSession([FakeResponse(status=403, text_data="forbidden")])
        self.assertIsNone(await client.fetch_sidebar(session, ["tok"]))
        self.assertEqual(len(session.calls), 1)

    async def test_invalid_json_is_retried(self):
        client = SidebarApiClient(base_url="http://unit.invalid")
        bad_json = ContentTypeError(SimpleNamespace(real_url="http://test.invalid"), ())
        session = FakeSession([FakeResponse(json_data=bad_json, text_data="<html>"), FakeResponse(json_data=SIDEBAR)])

        with patch("src.routing.infrastructure.sidebar_client.asyncio.sleep", new_callable=AsyncMock):
            result = await client.fetch_sidebar(session, ["tok"])

        self.assertEqual(result, SIDEBAR)

    async def test_api_error_payload_returns_none(self):
        client = SidebarApiClient(base_url="http://unit.invalid")
        session = FakeSession([FakeResponse(json_data={"success": False, "message": "invalid token"})])
        self.assertIsNone(await client.fetch_sidebar(session, ["tok"]))

        session = FakeSession([FakeResponse(json_data=["unexpected"])])
        self.assertIsNone(await client.fetch_sidebar(session, ["tok"]))

    async def test_attempt_log_never_contains_tokens(self):
        messages = []
        sink_id = logger.add(messages.append, level="DEBUG")
        client = SidebarApiClient(base_url="http://unit.invalid", run_id="run_1")
        session = FakeSession([FakeResponse(json_data=SIDEBAR)])
        try:
            await client.fetch_sidebar(session, ["super-secret"])
        finally:
            logger.remove(sink_id)

        text = "".join(str(message) for message in messages)
        self.assertIn("[run_1] /api/plugin/combine/sidebar attempt 1 -> success", text)
        self.assertNotIn("super-secret", text)


if __name__ == "__main__":
    unittest.main()
