from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

from src.routing.domain.errors import ConfigurationMissing, PageAmbiguous


class PageSource(str, Enum):
    CONTENT_SCAN = "content_scan"
    CONFIGURED = "configured"
    LEGACY_PATH = "legacy_path"
    CONFIGURED_PAGE_ID = "configured_page_id"


class RulePriority(IntEnum):
    FAVORITES = 0
    CASE_DETAIL = 1
    PROCEDURE_FILTER = 2


@dataclass(frozen=True)
class PageRecord:
    id: int
    slug: str
    title: str
    content: str
    status: str
    path: str = ""

    @property
    def published(self) -> bool:
        return self.status == "publish"


@dataclass(frozen=True)
class GalleryPage:
    slug: str
    internal_id: int | None
    published: bool
    source: PageSource


@dataclass(frozen=True)
class RewriteRule:
    pattern: str
    target_template: str
    priority: RulePriority
    page_slug: str

    @property
    def kind(self) -> str:
        return self.priority.name.lower()

    def as_entry(self) -> tuple[str, str]:
        return self.pattern, self.target_template


@dataclass(frozen=True)
class CredentialScope:
    api_token: str = ""
    website_property_id: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.api_token.strip() or not self.website_property_id.strip()

    def require(self) -> "CredentialScope":
        if self.is_empty:
            raise ConfigurationMissing("api token and website property id must both be configured")
        return self


@dataclass(frozen=True)
class RoutingConfig:
    gallery_slugs: tuple[str, ...] = ()
    gallery_page_id: int = 0
    stored_page_paths: tuple[str, ...] = ()
    flush_requested: bool = False
    credential_scope: CredentialScope = field(default_factory=CredentialScope)

    def is_gallery_slug(self, slug: str) -> bool:
        return bool(slug) and slug in self.gallery_slugs


@dataclass(frozen=True)
class ProcedureNode:
    name: str
    slug: str
    numeric_ids: tuple[int, ...]
    case_count: int
    contains_sensitive_content: bool

    @property
    def canonical_id(self) -> int:
        return self.numeric_ids[0]


@dataclass(frozen=True)
class TaxonomyNode:
    category_name: str
    procedures: tuple[ProcedureNode, ...]


@dataclass(frozen=True)
class TaxonomySnapshot:
    categories: tuple[TaxonomyNode, ...]

    def iter_procedures(self):
        for category in self.categories:
            yield from category.procedures

    @property
    def is_empty(self) -> bool:
        return not any(category.procedures for category in self.categories)


@dataclass(frozen=True)
class CompilationResult:
    rules: tuple[RewriteRule, ...]
    processed_slugs: tuple[str, ...]
    warnings: tuple[PageAmbiguous, ...] = ()

    def entries(self) -> list[tuple[str, str]]:
        return [rule.as_entry() for rule in self.rules]


@dataclass(frozen=True)
class FlushOutcome:
    published: bool
    flush_requested: bool
    rule_count: int
    processed_slugs: tuple[str, ...]
    query_vars: tuple[str, ...]
    error: str | None = None
    # slugs routed by pagename because no page or configured page id backs them
    ambiguous_slugs: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "published": self.published,
            "flush_requested": self.flush_requested,
            "rule_count": self.rule_count,
            "processed_slugs": list(self.processed_slugs),
            "query_vars": list(self.query_vars),
            "error": self.error,
            "ambiguous_slugs": list(self.ambiguous_slugs),
        }


@dataclass(frozen=True)
class RouteMatch:
    rule: RewriteRule | None
    query_vars: dict[str, str]


@dataclass(frozen=True)
class CaseTarget:
    case_id: int | None
    seo_suffix: str | None


@dataclass(frozen=True)
class GalleryRequest:
    page_slug: str
    favorites_page: bool = False
    filter_procedure: str | None = None
    procedure_title: str | None = None
    case: CaseTarget | None = None
    procedure_id: int | None = None
    procedure_ids: tuple[int, ...] = ()
    matched_by: str = "rule"
