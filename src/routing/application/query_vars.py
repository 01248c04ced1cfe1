from typing import Iterable

from src.routing.domain.rules import QUERY_VARS


def registered_vars() -> frozenset[str]:
    return frozenset(QUERY_VARS)


def register_query_vars(existing: Iterable[str] | None = None) -> list[str]:
    """Merge the gallery query vars into the host's public list.

    The host does not persist its query-var list, so this runs on every
    bootstrap pass. Existing order is kept and nothing is duplicated.
    """
    merged: list[str] = []
    for name in [*(existing or ()), *QUERY_VARS]:
        if name and name not in merged:
            merged.append(name)
    return merged
