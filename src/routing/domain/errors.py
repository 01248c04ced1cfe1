class RoutingError(Exception):
    """Base class for routing and resolution failures."""


class ConfigurationMissing(RoutingError):
    """No api token / website property configured for a lookup."""


class TaxonomyUnavailable(RoutingError):
    """Taxonomy fetch failed or returned an unusable payload."""


class PageAmbiguous(RoutingError):
    """A gallery slug has neither a published page nor a configured page id."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"No published page or configured gallery page id for slug '{slug}'")
        self.slug = slug


class MalformedInput(RoutingError):
    """Input rejected at a component boundary (blank slug, bad config shape)."""
