import unittest
from unittest.mock import patch

from src.config.settings import Settings
from src.routing.application.config_loader import (
    OPTION_API_TOKEN,
    OPTION_FLUSH_REWRITE_RULES,
    OPTION_PAGE_SLUG,
    OPTION_SHOW_REWRITE_NOTICE,
    OPTION_WEBSITE_PROPERTY_ID,
)
from src.routing.application.flush_controller import create_nonce
from src.routing.bootstrap import (
    build_runtime,
    handle_manual_flush,
    resolve_request,
    rewrite_notice,
    run_route_flush,
)
from src.routing.domain.models import PageRecord
from src.routing.domain.taxonomy import parse_taxonomy_payload
from src.routing.infrastructure.taxonomy_provider import CachedTaxonomyProvider
from tests.utils.tempdir import managed_temp_dir

SNAPSHOT = parse_taxonomy_payload(
    {"data": [{"name": "Body", "procedures": [{"name": "Liposuction", "slugName": "lipo", "ids": [11, 12]}]}]}
)


def make_settings(tmp):
    return Settings(
        api_base_url="http://unit.invalid",
        state_db_path=tmp / "router_state.db",
        nonce_secret="s3cret",
    )


def seed(settings, options=None):
    runtime = build_runtime(settings)
    try:
        runtime.pages.upsert_page(PageRecord(10, "gallery", "Gallery", "[brag_book_gallery]", "publish"))
        for name, value in (options or {}).items():
            runtime.options.set(name, value)
    finally:
        runtime.close()


class BootstrapTests(unittest.TestCase):
    def test_flush_pass_publishes_when_requested(self):
        with managed_temp_dir("bootstrap_flush") as tmp:
            settings = make_settings(tmp)
            seed(settings, {OPTION_FLUSH_REWRITE_RULES: True})

            outcome = run_route_flush(settings=settings, show_progress=False)
            self.assertTrue(outcome.published)
            self.assertEqual(outcome.processed_slugs, ("gallery",))

            second = run_route_flush(settings=settings, show_progress=False)
            self.assertFalse(second.published)

            runtime = build_runtime(settings)
            try:
                self.assertEqual(len(runtime.route_table.load()), 3)
                self.assertIsNone(runtime.options.get(OPTION_FLUSH_REWRITE_RULES))
            finally:
                runtime.close()

    def test_resolve_request_uses_taxonomy(self):
        with managed_temp_dir("bootstrap_resolve") as tmp:
            settings = make_settings(tmp)
            seed(settings, {OPTION_API_TOKEN: ["tok"], OPTION_WEBSITE_PROPERTY_ID: ["prop"]})

            with patch.object(CachedTaxonomyProvider, "get_taxonomy", return_value=SNAPSHOT):
                request = resolve_request("/gallery/lipo/123-abc", settings=settings)

            self.assertEqual(request.page_slug, "gallery")
            self.assertEqual(request.procedure_title, "lipo")
            self.assertEqual(request.procedure_ids, (11, 12))
            self.assertEqual(request.case.seo_suffix, "123-abc")

    def test_manual_flush_and_notice(self):
        with managed_temp_dir("bootstrap_manual") as tmp:
            settings = make_settings(tmp)
            seed(settings, {OPTION_PAGE_SLUG: ["gallery"], OPTION_SHOW_REWRITE_NOTICE: True})

            self.assertIsNotNone(rewrite_notice(settings=settings))
            self.assertEqual(handle_manual_flush("wrong", True, settings=settings).message, "Security check failed.")

            response = handle_manual_flush(create_nonce("s3cret"), True, settings=settings)
            self.assertTrue(response.success)
            self.assertIsNone(rewrite_notice(settings=settings))


if __name__ == "__main__":
    unittest.main()
