from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone

from src.config.logger_config import logger
from src.config.settings import Settings, load_settings
from src.routing.application.config_loader import load_routing_config
from src.routing.application.flush_controller import (
    FlushRequest,
    FlushResponse,
    ManualFlushHandler,
    RewriteNotice,
    RouteFlushController,
    check_rewrite_rules,
)
from src.routing.application.page_discovery import PageDiscoverer
from src.routing.application.request_resolver import GalleryRequestResolver
from src.routing.application.rule_compiler import RuleCompiler
from src.routing.application.slug_resolver import SlugResolver
from src.routing.domain.models import FlushOutcome, GalleryRequest
from src.routing.infrastructure.cache_sqlite import SQLiteCacheStore
from src.routing.infrastructure.options_sqlite import SQLiteOptionsStore
from src.routing.infrastructure.pages_sqlite import SQLitePageRepository
from src.routing.infrastructure.route_table_sqlite import SQLiteRouteTable
from src.routing.infrastructure.sidebar_client import SidebarApiClient
from src.routing.infrastructure.taxonomy_provider import CachedTaxonomyProvider


@dataclass
class RouterRuntime:
    settings: Settings
    options: SQLiteOptionsStore
    pages: SQLitePageRepository
    cache: SQLiteCacheStore
    route_table: SQLiteRouteTable
    controller: RouteFlushController
    slug_resolver: SlugResolver

    def close(self) -> None:
        for store in (self.options, self.pages, self.cache, self.route_table):
            store.close()


def build_runtime(settings: Settings | None = None, *, show_progress: bool = False) -> RouterRuntime:
    settings = settings or load_settings()
    db_path = settings.state_db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    run_id = _build_run_id()

    options = SQLiteOptionsStore(db_path)
    pages = SQLitePageRepository(db_path)
    cache = SQLiteCacheStore(db_path)
    route_table = SQLiteRouteTable(db_path)

    client = SidebarApiClient(base_url=settings.api_base_url, run_id=run_id)
    taxonomy = CachedTaxonomyProvider(client, cache)
    controller = RouteFlushController(
        options=options,
        discoverer=PageDiscoverer(pages, cache=cache),
        compiler=RuleCompiler(pages, show_progress=show_progress),
        route_table=route_table,
    )
    logger.debug("Router runtime {} using {}", run_id, db_path)
    return RouterRuntime(
        settings=settings,
        options=options,
        pages=pages,
        cache=cache,
        route_table=route_table,
        controller=controller,
        slug_resolver=SlugResolver(taxonomy, cache),
    )


def run_route_flush(*, force: bool = False, settings: Settings | None = None, show_progress: bool = True) -> FlushOutcome:
    runtime = build_runtime(settings, show_progress=show_progress)
    try:
        return runtime.controller.maybe_flush(force=force)
    finally:
        runtime.close()


def resolve_request(path: str, *, settings: Settings | None = None) -> GalleryRequest | None:
    runtime = build_runtime(settings)
    try:
        config = load_routing_config(runtime.options)
        compilation = runtime.controller.compile(config)
        resolver = GalleryRequestResolver(
            rules=compilation.rules,
            resolver=runtime.slug_resolver,
            credential_scope=config.credential_scope,
            gallery_slugs=compilation.processed_slugs,
        )
        return resolver.resolve(path)
    finally:
        runtime.close()


def handle_manual_flush(
    nonce: str | None,
    can_manage_options: bool,
    *,
    settings: Settings | None = None,
) -> FlushResponse:
    runtime = build_runtime(settings)
    try:
        handler = ManualFlushHandler(runtime.controller, runtime.options, runtime.settings.nonce_secret)
        return handler.handle(FlushRequest(nonce=nonce, can_manage_options=can_manage_options))
    finally:
        runtime.close()


def rewrite_notice(*, settings: Settings | None = None) -> RewriteNotice | None:
    runtime = build_runtime(settings)
    try:
        return check_rewrite_rules(runtime.options, runtime.route_table.load())
    finally:
        runtime.close()


def _build_run_id() -> str:
    return datetime.now(timezone.utc).strftime("gallery_%Y%m%dT%H%M%S%fZ")
