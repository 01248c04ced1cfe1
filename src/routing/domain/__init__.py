"""Domain models and deterministic rules for gallery routing."""

from src.routing.domain.cache_keys import build_cases_cache_key, build_procedure_lookup_key
from src.routing.domain.models import (
    CredentialScope,
    GalleryPage,
    RewriteRule,
    RoutingConfig,
    RulePriority,
    TaxonomySnapshot,
)
from src.routing.domain.rules import QUERY_VARS, slugify, validate_gallery_slug
from src.routing.domain.taxonomy import find_procedure, parse_taxonomy_payload

__all__ = [
    "build_cases_cache_key",
    "build_procedure_lookup_key",
    "CredentialScope",
    "find_procedure",
    "GalleryPage",
    "parse_taxonomy_payload",
    "QUERY_VARS",
    "RewriteRule",
    "RoutingConfig",
    "RulePriority",
    "slugify",
    "TaxonomySnapshot",
    "validate_gallery_slug",
]
