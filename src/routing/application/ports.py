from typing import Any, Protocol, Sequence, runtime_checkable

from src.routing.domain.models import CredentialScope, PageRecord, RewriteRule, TaxonomySnapshot


@runtime_checkable
class PageRepositoryPort(Protocol):
    def find_pages_with_marker(self, marker: str) -> Sequence[PageRecord]:
        """Published pages whose content contains the marker (substring scan)."""
        ...

    def find_page_by_slug(self, slug: str) -> PageRecord | None: ...

    def find_page_by_path(self, path: str) -> PageRecord | None: ...

    def get_page(self, page_id: int) -> PageRecord | None: ...


@runtime_checkable
class OptionsStorePort(Protocol):
    def get(self, name: str, default: Any = None) -> Any: ...

    def set(self, name: str, value: Any) -> None: ...

    def delete(self, name: str) -> None: ...


@runtime_checkable
class CacheStorePort(Protocol):
    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on miss/expiry."""
        ...

    def set(self, key: str, value: Any, ttl: int) -> None: ...

    def delete(self, key: str) -> None: ...


@runtime_checkable
class TaxonomyProviderPort(Protocol):
    def get_taxonomy(self, scope: CredentialScope) -> TaxonomySnapshot | None:
        """Return None when the snapshot cannot be fetched."""
        ...


@runtime_checkable
class RouteTablePort(Protocol):
    def publish(self, rules: Sequence[RewriteRule]) -> None: ...

    def load(self) -> list[tuple[str, str]]: ...
