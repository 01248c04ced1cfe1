"""Use cases and ports for gallery routing."""

from src.routing.application.flush_controller import ManualFlushHandler, RouteFlushController
from src.routing.application.page_discovery import PageDiscoverer
from src.routing.application.request_resolver import GalleryRequestResolver
from src.routing.application.rule_compiler import RuleCompiler
from src.routing.application.slug_resolver import SlugResolver

__all__ = [
    "GalleryRequestResolver",
    "ManualFlushHandler",
    "PageDiscoverer",
    "RouteFlushController",
    "RuleCompiler",
    "SlugResolver",
]
