from dataclasses import asdict
from typing import Callable, Iterable

from src.config.logger_config import logger
from src.routing.application.ports import CacheStorePort, PageRepositoryPort
from src.routing.domain.cache_keys import CONTENT_SCAN_CACHE_KEY
from src.routing.domain.models import GalleryPage, PageRecord, PageSource, RoutingConfig
from src.routing.domain.rules import GALLERY_MARKER, validate_gallery_slug

CONTENT_SCAN_TTL_SECONDS = 3600


class PageDiscoverer:
    """Collects gallery page slugs from content scan, configuration and legacy paths.

    The content scan is a substring match on page content, so a page that only
    mentions the marker in text is included too. Extra rules for such a page
    are harmless and downstream code expects them.
    """

    def __init__(
        self,
        pages: PageRepositoryPort,
        cache: CacheStorePort | None = None,
        marker: str = GALLERY_MARKER,
        content_scan_ttl: int = CONTENT_SCAN_TTL_SECONDS,
    ) -> None:
        self.pages = pages
        self.cache = cache
        self.marker = marker
        self.content_scan_ttl = content_scan_ttl

    def discover_pages(self, config: RoutingConfig) -> tuple[GalleryPage, ...]:
        discovered: list[GalleryPage] = []
        seen: set[str] = set()

        def _add(candidates: Iterable[GalleryPage]) -> int:
            added = 0
            for page in candidates:
                if page.slug in seen:
                    continue
                seen.add(page.slug)
                discovered.append(page)
                added += 1
            return added

        sources: tuple[tuple[str, Callable[[], list[GalleryPage]]], ...] = (
            ("content_scan", self._from_content_scan),
            ("configured", lambda: self._from_configured_slugs(config)),
            ("legacy_path", lambda: self._from_legacy_paths(config)),
            ("configured_page_id", lambda: self._from_configured_page_id(config)),
        )
        for name, source in sources:
            try:
                added = _add(source())
            except Exception as exc:
                logger.error("Page discovery source {} failed: {}", name, exc)
                continue
            logger.debug("Page discovery source {} added {} slugs", name, added)

        logger.info("Discovered {} gallery pages: {}", len(discovered), [p.slug for p in discovered])
        return tuple(discovered)

    def invalidate_content_scan(self) -> None:
        if self.cache is not None:
            self.cache.delete(CONTENT_SCAN_CACHE_KEY)

    def _scan_marker_pages(self) -> list[PageRecord]:
        if self.cache is not None:
            cached = self.cache.get(CONTENT_SCAN_CACHE_KEY)
            if isinstance(cached, list):
                return [PageRecord(**row) for row in cached if isinstance(row, dict)]

        records = [page for page in self.pages.find_pages_with_marker(self.marker) if page.published]
        if self.cache is not None:
            self.cache.set(
                CONTENT_SCAN_CACHE_KEY,
                [asdict(page) for page in records],
                self.content_scan_ttl,
            )
        return records

    def _from_content_scan(self) -> list[GalleryPage]:
        result = []
        for page in self._scan_marker_pages():
            slug = validate_gallery_slug(page.slug)
            if not slug:
                continue
            result.append(GalleryPage(slug=slug, internal_id=page.id, published=True, source=PageSource.CONTENT_SCAN))
        return result

    @staticmethod
    def _from_configured_slugs(config: RoutingConfig) -> list[GalleryPage]:
        return [
            GalleryPage(slug=slug, internal_id=None, published=False, source=PageSource.CONFIGURED)
            for slug in (validate_gallery_slug(s) for s in config.gallery_slugs)
            if slug
        ]

    def _from_legacy_paths(self, config: RoutingConfig) -> list[GalleryPage]:
        if config.gallery_slugs:
            return []
        result = []
        for path in config.stored_page_paths:
            page = self.pages.find_page_by_path(path.strip().strip("/"))
            if page is None:
                logger.debug("Stored page path {} no longer resolves", path)
                continue
            slug = validate_gallery_slug(page.slug)
            if slug:
                result.append(
                    GalleryPage(slug=slug, internal_id=page.id, published=page.published, source=PageSource.LEGACY_PATH)
                )
        return result

    def _from_configured_page_id(self, config: RoutingConfig) -> list[GalleryPage]:
        if config.gallery_page_id <= 0:
            return []
        page = self.pages.get_page(config.gallery_page_id)
        if page is None:
            logger.warning("Configured gallery page id {} does not exist", config.gallery_page_id)
            return []
        slug = validate_gallery_slug(page.slug)
        if not slug:
            return []
        return [
            GalleryPage(slug=slug, internal_id=page.id, published=page.published, source=PageSource.CONFIGURED_PAGE_ID)
        ]
