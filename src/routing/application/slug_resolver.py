from typing import Any

from src.config.logger_config import logger
from src.routing.application.ports import CacheStorePort, TaxonomyProviderPort
from src.routing.domain.cache_keys import build_procedure_ids_key, build_procedure_lookup_key
from src.routing.domain.errors import ConfigurationMissing, TaxonomyUnavailable
from src.routing.domain.models import CredentialScope, ProcedureNode
from src.routing.domain.rules import slugify
from src.routing.domain.taxonomy import find_procedure

RESOLUTION_TTL_SECONDS = 3600
# Cached value meaning "looked up, not in the taxonomy".
NOT_FOUND_SENTINEL = 0


def _as_id_tuple(raw: Any) -> tuple[int, ...]:
    if not isinstance(raw, (list, tuple)):
        return ()
    try:
        ids = tuple(int(value) for value in raw)
    except (TypeError, ValueError):
        return ()
    return ids if ids and all(value > 0 for value in ids) else ()


class SlugResolver:
    def __init__(
        self,
        taxonomy: TaxonomyProviderPort,
        cache: CacheStorePort,
        ttl: int = RESOLUTION_TTL_SECONDS,
    ) -> None:
        self.taxonomy = taxonomy
        self.cache = cache
        self.ttl = ttl

    def resolve(self, slug: str, credential_scope: CredentialScope) -> int | None:
        ids = self._resolve_ids(slug, credential_scope)
        return ids[0] if ids else None

    def resolve_procedure_ids(self, slug: str, credential_scope: CredentialScope) -> tuple[int, ...]:
        """All ids of the matched procedure type; case listings filter on the full set."""
        return self._resolve_ids(slug, credential_scope) or ()

    def _resolve_ids(self, slug: str, credential_scope: CredentialScope) -> tuple[int, ...] | None:
        normalized = slugify(slug)
        if not normalized:
            return None
        try:
            credential_scope.require()
        except ConfigurationMissing as exc:
            logger.debug("Skipping lookup of '{}': {}", normalized, exc)
            return None

        key = build_procedure_lookup_key(normalized, credential_scope)
        ids_key = build_procedure_ids_key(normalized, credential_scope)
        cached = self.cache.get(key)
        if cached is not None:
            try:
                value = int(cached)
            except (TypeError, ValueError):
                value = None
            if value == NOT_FOUND_SENTINEL:
                return None
            if value is not None and value > 0:
                ids = _as_id_tuple(self.cache.get(ids_key))
                if ids and ids[0] == value:
                    return ids
                logger.debug("Id list for '{}' missing from cache, refreshing", normalized)
            else:
                logger.warning("Discarding corrupt resolution cache entry {}: {!r}", key, cached)

        try:
            procedure = self._lookup(normalized, credential_scope)
        except TaxonomyUnavailable as exc:
            logger.warning("Taxonomy unavailable while resolving '{}': {}", normalized, exc)
            procedure = None

        if procedure is None:
            self.cache.set(key, NOT_FOUND_SENTINEL, self.ttl)
            self.cache.delete(ids_key)
            return None

        self.cache.set(key, procedure.canonical_id, self.ttl)
        self.cache.set(ids_key, list(procedure.numeric_ids), self.ttl)
        return procedure.numeric_ids

    def _lookup(self, normalized: str, credential_scope: CredentialScope) -> ProcedureNode | None:
        snapshot = self.taxonomy.get_taxonomy(credential_scope)
        if snapshot is None:
            raise TaxonomyUnavailable("provider returned no snapshot")
        return find_procedure(snapshot, normalized)
