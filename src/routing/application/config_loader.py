from typing import Any

from src.config.logger_config import logger
from src.routing.application.ports import OptionsStorePort
from src.routing.domain.config_values import normalize_option
from src.routing.domain.errors import MalformedInput
from src.routing.domain.models import CredentialScope, RoutingConfig
from src.routing.domain.rules import validate_gallery_slug

OPTION_PAGE_SLUG = "gallery_page_slug"
OPTION_GALLERY_PAGE_SLUG = "gallery_gallery_page_slug"
OPTION_PAGE_ID = "gallery_page_id"
OPTION_STORED_PAGES = "gallery_stored_pages"
OPTION_FLUSH_REWRITE_RULES = "gallery_flush_rewrite_rules"
OPTION_SHOW_REWRITE_NOTICE = "gallery_show_rewrite_notice"
OPTION_API_TOKEN = "gallery_api_token"
OPTION_WEBSITE_PROPERTY_ID = "gallery_website_property_id"

MAX_GALLERY_SLUGS = 10


def _safe_list(options: OptionsStorePort, name: str) -> list[str]:
    try:
        return normalize_option(options.get(name))
    except MalformedInput as exc:
        logger.warning("Ignoring option {}: {}", name, exc)
        return []


def _as_int(raw: Any) -> int:
    try:
        return max(0, int(raw or 0))
    except (TypeError, ValueError):
        return 0


def _first(values: list[str]) -> str:
    return values[0] if values else ""


def load_stored_page_paths(options: OptionsStorePort) -> tuple[str, ...]:
    raw = options.get(OPTION_STORED_PAGES)
    if raw is None:
        return ()
    if not isinstance(raw, (list, tuple)):
        logger.warning(
            "Ignoring option {}: expected a list of page paths, got {}",
            OPTION_STORED_PAGES,
            type(raw).__name__,
        )
        return ()
    return tuple(str(path).strip() for path in raw if isinstance(path, str) and path.strip())


def load_routing_config(options: OptionsStorePort) -> RoutingConfig:
    """Read every routing option once; the result is passed down the compile pass."""
    slugs: list[str] = []
    for name in (OPTION_PAGE_SLUG, OPTION_GALLERY_PAGE_SLUG):
        for raw_slug in _safe_list(options, name):
            slug = validate_gallery_slug(raw_slug)
            if slug and slug not in slugs:
                slugs.append(slug)

    # Tokens and property ids are stored index-aligned; the first pair is the active scope.
    scope = CredentialScope(
        api_token=_first(_safe_list(options, OPTION_API_TOKEN)),
        website_property_id=_first(_safe_list(options, OPTION_WEBSITE_PROPERTY_ID)),
    )
    return RoutingConfig(
        gallery_slugs=tuple(slugs),
        gallery_page_id=_as_int(options.get(OPTION_PAGE_ID, 0)),
        stored_page_paths=load_stored_page_paths(options),
        flush_requested=bool(options.get(OPTION_FLUSH_REWRITE_RULES, False)),
        credential_scope=scope,
    )


def request_flush(options: OptionsStorePort) -> None:
    options.set(OPTION_FLUSH_REWRITE_RULES, True)


def add_gallery_slug(options: OptionsStorePort, raw_slug: str) -> bool:
    slug = validate_gallery_slug(raw_slug)
    if not slug:
        return False
    slugs = _safe_list(options, OPTION_PAGE_SLUG)
    if slug in slugs:
        return True
    if len(slugs) >= MAX_GALLERY_SLUGS:
        logger.warning("Gallery slug limit ({}) reached, not adding {}", MAX_GALLERY_SLUGS, slug)
        return False
    options.set(OPTION_PAGE_SLUG, [*slugs, slug])
    request_flush(options)
    return True


def remove_gallery_slug(options: OptionsStorePort, raw_slug: str) -> bool:
    slug = validate_gallery_slug(raw_slug)
    slugs = _safe_list(options, OPTION_PAGE_SLUG)
    if not slug or slug not in slugs:
        return False
    options.set(OPTION_PAGE_SLUG, [s for s in slugs if s != slug])
    request_flush(options)
    return True


def set_gallery_page_id(options: OptionsStorePort, page_id: int) -> None:
    if _as_int(options.get(OPTION_PAGE_ID, 0)) == _as_int(page_id):
        return
    options.set(OPTION_PAGE_ID, _as_int(page_id))
    request_flush(options)
