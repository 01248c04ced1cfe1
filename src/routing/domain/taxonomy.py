from typing import Any

from src.config.logger_config import logger
from src.routing.domain.errors import TaxonomyUnavailable
from src.routing.domain.models import ProcedureNode, TaxonomyNode, TaxonomySnapshot
from src.routing.domain.rules import slugify


def _coerce_ids(procedure: dict[str, Any]) -> tuple[int, ...]:
    raw_ids = procedure.get("ids")
    if not isinstance(raw_ids, list) or not raw_ids:
        single = procedure.get("id")
        raw_ids = [single] if single not in (None, "", 0) else []

    ids: list[int] = []
    for raw in raw_ids:
        try:
            value = int(raw)
        except (TypeError, ValueError):
            continue
        if value > 0 and value not in ids:
            ids.append(value)
    return tuple(ids)


def parse_procedure(procedure: Any) -> ProcedureNode | None:
    if not isinstance(procedure, dict):
        return None
    ids = _coerce_ids(procedure)
    if not ids:
        # An empty id list is unresolvable; never fall back to id 0.
        return None
    name = str(procedure.get("name") or "").strip()
    slug = str(procedure.get("slugName") or procedure.get("slug") or "").strip().lower()
    try:
        case_count = max(0, int(procedure.get("totalCase") or 0))
    except (TypeError, ValueError):
        case_count = 0
    return ProcedureNode(
        name=name,
        slug=slug,
        numeric_ids=ids,
        case_count=case_count,
        contains_sensitive_content=bool(procedure.get("nudity", False)),
    )


def parse_taxonomy_payload(payload: Any) -> TaxonomySnapshot:
    """Build a snapshot from the sidebar response: {"data": [{"name", "procedures": [...]}]}."""
    if not isinstance(payload, dict):
        raise TaxonomyUnavailable(f"Sidebar payload is {type(payload).__name__}, expected object")
    categories = payload.get("data")
    if not isinstance(categories, list):
        raise TaxonomyUnavailable("Sidebar payload has no 'data' list")

    nodes: list[TaxonomyNode] = []
    skipped = 0
    for category in categories:
        if not isinstance(category, dict):
            continue
        procedures: list[ProcedureNode] = []
        for raw in category.get("procedures") or []:
            node = parse_procedure(raw)
            if node is None:
                skipped += 1
                continue
            procedures.append(node)
        nodes.append(
            TaxonomyNode(
                category_name=str(category.get("name") or "").strip(),
                procedures=tuple(procedures),
            )
        )

    if skipped:
        logger.debug("Skipped {} procedures without usable ids", skipped)
    return TaxonomySnapshot(categories=tuple(nodes))


def find_procedure(snapshot: TaxonomySnapshot, slug: str) -> ProcedureNode | None:
    """Exact slug pass over the whole snapshot first, then the name-derived pass."""
    target = slugify(slug)
    if not target:
        return None

    for procedure in snapshot.iter_procedures():
        if procedure.slug and procedure.slug == target:
            return procedure

    for procedure in snapshot.iter_procedures():
        if procedure.name and slugify(procedure.name) == target:
            return procedure

    return None
