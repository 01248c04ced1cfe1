import re
from typing import Sequence
from urllib.parse import unquote, urlsplit

from src.config.logger_config import logger
from src.routing.application.slug_resolver import SlugResolver
from src.routing.domain.models import CredentialScope, GalleryRequest, RewriteRule, RouteMatch
from src.routing.domain.rules import FAVORITES_SEGMENT, expand_target, parse_case_identifier, slugify


def normalize_request_path(path: str) -> str:
    return unquote(urlsplit(path or "").path).strip("/")


def match_request(path: str, rules: Sequence[RewriteRule]) -> RouteMatch | None:
    """First rule in priority order whose pattern matches the request path."""
    request_path = normalize_request_path(path)
    if not request_path:
        return None
    for rule in sorted(rules, key=lambda r: r.priority):
        match = re.match(rule.pattern, request_path)
        if match:
            return RouteMatch(rule=rule, query_vars=expand_target(rule.target_template, match))
    return None


def parse_gallery_path(path: str, gallery_slugs: Sequence[str]) -> RouteMatch | None:
    """Direct parse used when no compiled rule matched, e.g. stale published rules."""
    segments = [segment for segment in normalize_request_path(path).split("/") if segment]
    for slug in gallery_slugs:
        if slug not in segments:
            continue
        index = segments.index(slug)
        rest = segments[index + 1 :]
        if not rest:
            continue
        if rest[0] == FAVORITES_SEGMENT:
            return RouteMatch(rule=None, query_vars={"favorites_page": "1", "page_slug": slug})
        if len(rest) >= 2:
            return RouteMatch(
                rule=None,
                query_vars={"procedure_title": rest[0], "case_suffix": rest[1], "page_slug": slug},
            )
        return RouteMatch(rule=None, query_vars={"filter_procedure": rest[0], "page_slug": slug})
    return None


class GalleryRequestResolver:
    def __init__(
        self,
        rules: Sequence[RewriteRule],
        resolver: SlugResolver,
        credential_scope: CredentialScope,
        gallery_slugs: Sequence[str] = (),
    ) -> None:
        self.rules = list(rules)
        self.resolver = resolver
        self.credential_scope = credential_scope
        self.gallery_slugs = list(gallery_slugs) or sorted({rule.page_slug for rule in self.rules})

    def resolve(self, path: str) -> GalleryRequest | None:
        route = match_request(path, self.rules)
        matched_by = "rule"
        if route is None:
            route = parse_gallery_path(path, self.gallery_slugs)
            matched_by = "path"
        if route is None:
            return None

        query_vars = route.query_vars
        page_slug = route.rule.page_slug if route.rule is not None else query_vars.get("page_slug", "")
        if query_vars.get("favorites_page") == "1":
            return GalleryRequest(page_slug=page_slug, favorites_page=True, matched_by=matched_by)

        procedure_slug = query_vars.get("procedure_title") or query_vars.get("filter_procedure") or ""
        procedure_ids = self.resolver.resolve_procedure_ids(procedure_slug, self.credential_scope)
        procedure_id = procedure_ids[0] if procedure_ids else None
        if procedure_id is None:
            logger.info("Procedure slug '{}' did not resolve for {}", procedure_slug, path)

        if "case_suffix" in query_vars:
            return GalleryRequest(
                page_slug=page_slug,
                procedure_title=slugify(procedure_slug) or None,
                case=parse_case_identifier(query_vars.get("case_suffix")),
                procedure_id=procedure_id,
                procedure_ids=procedure_ids,
                matched_by=matched_by,
            )
        return GalleryRequest(
            page_slug=page_slug,
            filter_procedure=slugify(procedure_slug) or None,
            procedure_id=procedure_id,
            procedure_ids=procedure_ids,
            matched_by=matched_by,
        )
