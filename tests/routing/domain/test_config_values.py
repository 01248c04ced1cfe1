import unittest

from src.routing.domain.config_values import Scalar, SlugList, normalize_option, parse_config_value
from src.routing.domain.errors import ConfigurationMissing, MalformedInput
from src.routing.domain.models import CredentialScope, RoutingConfig


class ConfigValueTests(unittest.TestCase):
    def test_scalar_and_list_shapes_normalize_the_same(self):
        self.assertEqual(parse_config_value("gallery"), Scalar("gallery"))
        self.assertEqual(parse_config_value(["a", "b"]), SlugList(("a", "b")))
        self.assertEqual(normalize_option("gallery"), normalize_option(["gallery"]))

    def test_blank_entries_are_dropped(self):
        self.assertEqual(normalize_option(["", "  ", " a "]), ["a"])
        self.assertEqual(normalize_option(None), [])
        self.assertEqual(normalize_option(""), [])

    def test_index_keyed_mapping_is_accepted(self):
        self.assertEqual(normalize_option({"0": "one", "1": "two"}), ["one", "two"])

    def test_unsupported_shape_raises(self):
        with self.assertRaises(MalformedInput):
            parse_config_value(3.5)


class CredentialScopeTests(unittest.TestCase):
    def test_require_raises_when_half_configured(self):
        with self.assertRaises(ConfigurationMissing):
            CredentialScope(api_token="t").require()
        scope = CredentialScope(api_token="t", website_property_id="p")
        self.assertIs(scope.require(), scope)

    def test_is_gallery_slug(self):
        config = RoutingConfig(gallery_slugs=("gallery",))
        self.assertTrue(config.is_gallery_slug("gallery"))
        self.assertFalse(config.is_gallery_slug("other"))


if __name__ == "__main__":
    unittest.main()
