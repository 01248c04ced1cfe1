import hashlib
import hmac
from dataclasses import dataclass
from typing import Sequence

from src.config.logger_config import logger
from src.routing.application.config_loader import (
    OPTION_FLUSH_REWRITE_RULES,
    OPTION_SHOW_REWRITE_NOTICE,
    load_routing_config,
)
from src.routing.application.page_discovery import PageDiscoverer
from src.routing.application.ports import OptionsStorePort, RouteTablePort
from src.routing.application.query_vars import register_query_vars
from src.routing.application.rule_compiler import RuleCompiler
from src.routing.domain.models import CompilationResult, FlushOutcome, RoutingConfig
from src.routing.domain.rules import case_detail_pattern

FLUSH_NONCE_ACTION = "gallery_flush"


class RouteFlushController:
    """Recompiles the routing table every pass; publishes only on request."""

    def __init__(
        self,
        options: OptionsStorePort,
        discoverer: PageDiscoverer,
        compiler: RuleCompiler,
        route_table: RouteTablePort,
    ) -> None:
        self.options = options
        self.discoverer = discoverer
        self.compiler = compiler
        self.route_table = route_table
        self.last_compilation: CompilationResult | None = None

    def compile(self, config: RoutingConfig | None = None, invalidate_scan: bool = False) -> CompilationResult:
        config = config or load_routing_config(self.options)
        if invalidate_scan:
            self.discoverer.invalidate_content_scan()
        pages = self.discoverer.discover_pages(config)
        self.last_compilation = self.compiler.compile_all(pages, config)
        return self.last_compilation

    def maybe_flush(self, force: bool = False) -> FlushOutcome:
        config = load_routing_config(self.options)
        flush_requested = config.flush_requested
        should_publish = force or flush_requested
        compilation = self.compile(config, invalidate_scan=should_publish)
        query_vars = tuple(register_query_vars())
        ambiguous_slugs = tuple(warning.slug for warning in compilation.warnings)

        if not should_publish:
            return FlushOutcome(
                published=False,
                flush_requested=False,
                rule_count=len(compilation.rules),
                processed_slugs=compilation.processed_slugs,
                query_vars=query_vars,
                ambiguous_slugs=ambiguous_slugs,
            )

        try:
            self.route_table.publish(compilation.rules)
        except Exception as exc:
            logger.error("Publishing rewrite rules failed, flush flag kept: {}", exc)
            return FlushOutcome(
                published=False,
                flush_requested=flush_requested,
                rule_count=len(compilation.rules),
                processed_slugs=compilation.processed_slugs,
                query_vars=query_vars,
                ambiguous_slugs=ambiguous_slugs,
                error=f"{type(exc).__name__}:{exc}",
            )

        self.options.delete(OPTION_FLUSH_REWRITE_RULES)
        logger.info(
            "Published {} rewrite rules for slugs {} (forced={})",
            len(compilation.rules),
            list(compilation.processed_slugs),
            force,
        )
        return FlushOutcome(
            published=True,
            flush_requested=flush_requested,
            rule_count=len(compilation.rules),
            processed_slugs=compilation.processed_slugs,
            query_vars=query_vars,
            ambiguous_slugs=ambiguous_slugs,
        )


@dataclass(frozen=True)
class RewriteNotice:
    message: str
    gallery_slugs: tuple[str, ...]


def check_rewrite_rules(
    options: OptionsStorePort,
    published: Sequence[tuple[str, str]],
) -> RewriteNotice | None:
    """Advisory shown to admins when the live table lacks the gallery case-detail rules."""
    if not options.get(OPTION_SHOW_REWRITE_NOTICE, False):
        return None
    slugs = load_routing_config(options).gallery_slugs
    patterns = {pattern for pattern, _ in published}
    if any(case_detail_pattern(slug) in patterns for slug in slugs):
        return None
    return RewriteNotice(
        message="Rewrite rules may need to be flushed.",
        gallery_slugs=slugs,
    )


def create_nonce(secret: str, action: str = FLUSH_NONCE_ACTION) -> str:
    return hmac.new(secret.encode("utf-8"), action.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_nonce(secret: str, nonce: str, action: str = FLUSH_NONCE_ACTION) -> bool:
    if not secret or not nonce:
        return False
    return hmac.compare_digest(create_nonce(secret, action), nonce)


@dataclass(frozen=True)
class FlushRequest:
    nonce: str | None
    can_manage_options: bool


@dataclass(frozen=True)
class FlushResponse:
    success: bool
    message: str

    def to_dict(self) -> dict[str, object]:
        return {"success": self.success, "data": {"message": self.message}}


class ManualFlushHandler:
    def __init__(self, controller: RouteFlushController, options: OptionsStorePort, nonce_secret: str) -> None:
        self.controller = controller
        self.options = options
        self.nonce_secret = nonce_secret

    def handle(self, request: FlushRequest) -> FlushResponse:
        if not request.nonce:
            return FlushResponse(False, "Security token missing.")
        if not verify_nonce(self.nonce_secret, request.nonce):
            return FlushResponse(False, "Security check failed.")
        if not request.can_manage_options:
            return FlushResponse(False, "Insufficient permissions.")

        outcome = self.controller.maybe_flush(force=True)
        if not outcome.published:
            return FlushResponse(False, "Failed to flush rewrite rules. Please try again.")

        self.options.delete(OPTION_SHOW_REWRITE_NOTICE)
        return FlushResponse(True, "Rewrite rules flushed successfully.")
