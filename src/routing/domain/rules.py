import re
import unicodedata
from typing import Pattern

from src.routing.domain.models import CaseTarget, RewriteRule, RulePriority

GALLERY_MARKER = "[brag_book_gallery"
FAVORITES_SEGMENT = "myfavorites"
MAX_SLUG_LENGTH = 200

QUERY_VARS: tuple[str, ...] = (
    "procedure_title",
    "case_suffix",
    "favorites_section",
    "filter_category",
    "filter_procedure",
    "favorites_page",
)

_SEPARATORS: Pattern[str] = re.compile(r"[\s./]+")
_DISALLOWED: Pattern[str] = re.compile(r"[^a-z0-9_\-]")
_DASH_RUNS: Pattern[str] = re.compile(r"-{2,}")
_VALID_GALLERY_SLUG: Pattern[str] = re.compile(r"^[a-z0-9\-]+$")
_MATCH_REF: Pattern[str] = re.compile(r"\$matches\[(\d+)\]")
_NUMERIC_CASE_ID: Pattern[str] = re.compile(r"^\d+$")


def slugify(value: str | None) -> str:
    """Lower-case, ASCII-folded, dash-separated slug. Returns "" for blank input."""
    if not value:
        return ""
    folded = unicodedata.normalize("NFKD", str(value)).encode("ascii", "ignore").decode("ascii")
    out = _SEPARATORS.sub("-", folded.strip().lower())
    out = _DISALLOWED.sub("", out)
    out = _DASH_RUNS.sub("-", out)
    return out.strip("-")


def validate_gallery_slug(value: str | None) -> str:
    slug = slugify(value)
    if not slug or len(slug) > MAX_SLUG_LENGTH:
        return ""
    if not _VALID_GALLERY_SLUG.match(slug):
        return ""
    return slug


def page_id_base(page_id: int) -> str:
    return f"index.php?page_id={int(page_id)}"


def pagename_base(slug: str) -> str:
    return f"index.php?pagename={slug}"


# Patterns are built from validated slugs only ([a-z0-9-]), so no escaping is needed.
def build_page_rules(slug: str, base_query: str) -> list[RewriteRule]:
    rules = [
        RewriteRule(
            pattern=f"^{slug}/{FAVORITES_SEGMENT}/?$",
            target_template=f"{base_query}&favorites_page=1",
            priority=RulePriority.FAVORITES,
            page_slug=slug,
        ),
        RewriteRule(
            pattern=case_detail_pattern(slug),
            target_template=f"{base_query}&procedure_title=$matches[1]&case_suffix=$matches[2]",
            priority=RulePriority.CASE_DETAIL,
            page_slug=slug,
        ),
        RewriteRule(
            pattern=f"^{slug}/([^/]+)/?$",
            target_template=f"{base_query}&filter_procedure=$matches[1]",
            priority=RulePriority.PROCEDURE_FILTER,
            page_slug=slug,
        ),
    ]
    return sorted(rules, key=lambda rule: rule.priority)


def case_detail_pattern(slug: str) -> str:
    return f"^{slug}/([^/]+)/([a-zA-Z0-9\\-_\\.]+)/?$"


def expand_target(target_template: str, match: re.Match[str]) -> dict[str, str]:
    """Split the template's query string into vars, then fill `$matches[n]` per value.

    Captures are substituted after the split, so a segment holding `&` or `=`
    stays inside its own var.
    """
    groups = match.groups()

    def _group(ref: re.Match[str]) -> str:
        index = int(ref.group(1))
        if 1 <= index <= len(groups) and groups[index - 1] is not None:
            return groups[index - 1]
        return ""

    _, _, query = target_template.partition("?")
    query_vars: dict[str, str] = {}
    for pair in query.split("&"):
        if not pair:
            continue
        name, _, value = pair.partition("=")
        query_vars[name] = _MATCH_REF.sub(_group, value)
    return query_vars


def parse_case_identifier(identifier: str | None) -> CaseTarget | None:
    value = (identifier or "").strip().strip("/")
    if not value:
        return None
    if _NUMERIC_CASE_ID.match(value):
        return CaseTarget(case_id=int(value), seo_suffix=None)
    return CaseTarget(case_id=None, seo_suffix=value)
