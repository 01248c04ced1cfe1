from typing import Sequence

from tqdm import tqdm

from src.config.logger_config import logger
from src.routing.application.ports import PageRepositoryPort
from src.routing.domain.errors import PageAmbiguous
from src.routing.domain.models import CompilationResult, GalleryPage, RewriteRule, RoutingConfig
from src.routing.domain.rules import build_page_rules, page_id_base, pagename_base, validate_gallery_slug


class RuleCompiler:
    def __init__(self, pages: PageRepositoryPort, show_progress: bool = False) -> None:
        self.pages = pages
        self.show_progress = show_progress

    def resolve_base_query(self, slug: str, config: RoutingConfig) -> tuple[str, PageAmbiguous | None]:
        page = self.pages.find_page_by_slug(slug)
        if page is not None and page.published:
            return page_id_base(page.id), None

        if config.is_gallery_slug(slug) and config.gallery_page_id > 0:
            return page_id_base(config.gallery_page_id), None

        warning = PageAmbiguous(slug)
        logger.warning("{}; routing by pagename, requests will 404 until the page exists", warning)
        return pagename_base(slug), warning

    def compile_rules_for_page(self, slug: str, config: RoutingConfig) -> list[RewriteRule]:
        rules, _ = self._compile(slug, config)
        return rules

    def compile_all(self, pages: Sequence[GalleryPage], config: RoutingConfig) -> CompilationResult:
        rules: list[RewriteRule] = []
        processed: list[str] = []
        warnings: list[PageAmbiguous] = []

        for page in tqdm(
            pages,
            total=len(pages),
            desc="Compiling rewrite rules",
            unit="page",
            leave=False,
            disable=not self.show_progress,
        ):
            if page.slug in processed:
                continue
            try:
                page_rules, warning = self._compile(page.slug, config)
            except Exception as exc:
                logger.exception("Failed compiling rules for slug {}: {}", page.slug, exc)
                continue
            if not page_rules:
                continue
            rules.extend(page_rules)
            processed.append(page_rules[0].page_slug)
            if warning is not None:
                warnings.append(warning)

        logger.info("Compiled {} rewrite rules for {} gallery slugs", len(rules), len(processed))
        return CompilationResult(rules=tuple(rules), processed_slugs=tuple(processed), warnings=tuple(warnings))

    def _compile(self, raw_slug: str, config: RoutingConfig) -> tuple[list[RewriteRule], PageAmbiguous | None]:
        slug = validate_gallery_slug(raw_slug)
        if not slug:
            logger.debug("Rejected gallery slug {!r}", raw_slug)
            return [], None
        base_query, warning = self.resolve_base_query(slug, config)
        return build_page_rules(slug, base_query), warning
