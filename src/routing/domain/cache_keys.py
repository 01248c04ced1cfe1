import hashlib
import re
from typing import Iterable

from src.routing.domain.models import CredentialScope
from src.routing.domain.rules import slugify

CASES_NAMESPACE = "gallery_cases"
PROCEDURE_LOOKUP_NAMESPACE = "gallery_procedure_id"
PROCEDURE_IDS_NAMESPACE = "gallery_procedure_ids"
TAXONOMY_NAMESPACE = "gallery_sidebar"
CASE_VIEW_NAMESPACE = "gallery_case"
CONTENT_SCAN_CACHE_KEY = "gallery_pages_with_marker"

_KEY_UNSAFE = re.compile(r"[^a-z0-9_\-]")


def digest(value: str) -> str:
    return hashlib.sha1((value or "").encode("utf-8")).hexdigest()


def sanitize_key(value: str) -> str:
    return _KEY_UNSAFE.sub("", (value or "").strip().lower())


def normalize_procedure_ids(procedure_ids: Iterable[object] | None) -> list[int]:
    clean: set[int] = set()
    for raw in procedure_ids or ():
        try:
            value = abs(int(str(raw).strip()))
        except (TypeError, ValueError):
            continue
        if value > 0:
            clean.add(value)
    return sorted(clean)


def build_cases_cache_key(
    api_token: str,
    website_property_id: str,
    procedure_ids: Iterable[object] | None = None,
    page: int = 1,
) -> str:
    scope_id = sanitize_key(website_property_id)
    if not (api_token or "").strip() or not scope_id:
        return f"{CASES_NAMESPACE}_default"

    parts = [CASES_NAMESPACE, digest(api_token), scope_id]
    ids = normalize_procedure_ids(procedure_ids)
    if ids:
        parts.append("procs_" + "_".join(str(x) for x in ids))
    if page > 1:
        parts.append(f"page_{page}")
    return "_".join(parts)


def build_procedure_lookup_key(slug: str, scope: CredentialScope) -> str:
    material = "|".join((slugify(slug), scope.api_token.strip(), scope.website_property_id.strip()))
    return f"{PROCEDURE_LOOKUP_NAMESPACE}_{digest(material)}"


def build_procedure_ids_key(slug: str, scope: CredentialScope) -> str:
    """Sibling of the lookup key holding every id of the matched procedure."""
    material = "|".join((slugify(slug), scope.api_token.strip(), scope.website_property_id.strip()))
    return f"{PROCEDURE_IDS_NAMESPACE}_{digest(material)}"


def build_taxonomy_cache_key(api_token: str) -> str:
    if not (api_token or "").strip():
        return f"{TAXONOMY_NAMESPACE}_default"
    return f"{TAXONOMY_NAMESPACE}_{digest(api_token.strip())}"


def build_case_view_cache_key(procedure_slug: str, case_suffix: str) -> str:
    slug = slugify(procedure_slug) or "unknown"
    suffix = sanitize_key(case_suffix) or "unknown"
    return f"{CASE_VIEW_NAMESPACE}_{slug}_{suffix}"
