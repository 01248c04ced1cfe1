"""Infrastructure adapters for gallery routing."""

from src.routing.infrastructure.cache_sqlite import SQLiteCacheStore
from src.routing.infrastructure.options_sqlite import SQLiteOptionsStore
from src.routing.infrastructure.pages_sqlite import SQLitePageRepository
from src.routing.infrastructure.route_table_sqlite import SQLiteRouteTable
from src.routing.infrastructure.sidebar_client import SidebarApiClient
from src.routing.infrastructure.taxonomy_provider import CachedTaxonomyProvider

__all__ = [
    "CachedTaxonomyProvider",
    "SQLiteCacheStore",
    "SQLiteOptionsStore",
    "SQLitePageRepository",
    "SQLiteRouteTable",
    "SidebarApiClient",
]
