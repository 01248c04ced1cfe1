from typing import Any

from src.routing.domain.models import CredentialScope, PageRecord, TaxonomySnapshot


class FakeOptions:
    def __init__(self, values: dict[str, Any] | None = None) -> None:
        self.values: dict[str, Any] = dict(values or {})

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self.values[name] = value

    def delete(self, name: str) -> None:
        self.values.pop(name, None)


class FakeCache:
    def __init__(self) -> None:
        self.values: dict[str, Any] = {}
        self.ttls: dict[str, int] = {}
        self.deleted: list[str] = []

    def get(self, key: str) -> Any | None:
        return self.values.get(key)

    def set(self, key: str, value: Any, ttl: int) -> None:
        self.values[key] = value
        self.ttls[key] = ttl

    def delete(self, key: str) -> None:
        self.deleted.append(key)
        self.values.pop(key, None)


class FakePages:
    def __init__(self, pages: list[PageRecord] | None = None, fail_scan: bool = False) -> None:
        self.pages = list(pages or [])
        self.fail_scan = fail_scan
        self.scan_calls = 0

    def find_pages_with_marker(self, marker: str) -> list[PageRecord]:
        self.scan_calls += 1
        if self.fail_scan:
            raise RuntimeError("scan failed")
        return [page for page in self.pages if marker in page.content]

    def find_page_by_slug(self, slug: str) -> PageRecord | None:
        return next((page for page in self.pages if page.slug == slug), None)

    def find_page_by_path(self, path: str) -> PageRecord | None:
        return next((page for page in self.pages if (page.path or page.slug) == path), None)

    def get_page(self, page_id: int) -> PageRecord | None:
        return next((page for page in self.pages if page.id == page_id), None)


class FakeTaxonomy:
    def __init__(self, snapshot: TaxonomySnapshot | None) -> None:
        self.snapshot = snapshot
        self.calls: list[CredentialScope] = []

    def get_taxonomy(self, scope: CredentialScope) -> TaxonomySnapshot | None:
        self.calls.append(scope)
        return self.snapshot


class FakeRouteTable:
    def __init__(self, should_fail: bool = False) -> None:
        self.should_fail = should_fail
        self.published: list[tuple[str, str]] = []
        self.publish_calls = 0

    def publish(self, rules) -> None:
        self.publish_calls += 1
        if self.should_fail:
            raise RuntimeError("route table locked")
        self.published = [rule.as_entry() for rule in rules]

    def load(self) -> list[tuple[str, str]]:
        return list(self.published)


def make_page(page_id: int, slug: str, content: str = "", status: str = "publish", path: str = "") -> PageRecord:
    return PageRecord(id=page_id, slug=slug, title=slug.title(), content=content, status=status, path=path)
