# =============================================================================
# core/stql.py  —  STQL Query Construction
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns the structured filter parameters of the getComponents tool into a
#   topology query expression (STQL), and optionally widens that expression
#   to include graph neighbors.
#
# TWO SMALL STATE MACHINES:
#   1. FilterSpec is a tagged union:
#        RawQuery   — the caller wrote STQL themselves; used VERBATIM
#        FilterSet  — named equality filters, AND-joined in a fixed order
#      filter_spec_from_params() picks exactly one.  A raw query never
#      merges with named filters.
#
#   2. Neighbor expansion wraps whatever base expression (1) produced:
#        <base> OR withNeighborsOf(components = (<base>), levels = "..",
#                                  direction = "..")
#      The base set is always part of the result, never neighbors alone.
#
# QUOTING:
#   Named filter values become STQL string literals through quote().
#   Backslashes and double quotes are escaped; wildcard characters (*)
#   pass through so "redis*" still matches by pattern.
# =============================================================================

from dataclasses import dataclass

from core.errors import InvalidArgumentError
from core.models import Direction

MIN_NEIGHBOR_LEVELS = 1
MAX_NEIGHBOR_LEVELS = 14
ALL_LEVELS = "all"

DEFAULT_NEIGHBOR_LEVELS = "1"
DEFAULT_NEIGHBOR_DIRECTION = Direction.BOTH


# -----------------------------------------------------------------------------
# FilterSpec — RawQuery | FilterSet
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class RawQuery:
    """A caller-supplied STQL expression, used as-is."""

    expression: str


@dataclass(frozen=True)
class FilterSet:
    """Named equality filters.  Empty fields are omitted from the query."""

    name: str = ""
    type: str = ""
    layer: str = ""
    domain: str = ""
    healthstate: str = ""

    # (STQL field, attribute) in clause order
    FIELDS = (
        ("name", "name"),
        ("type", "type"),
        ("layer", "layer"),
        ("domain", "domain"),
        ("healthstate", "healthstate"),
    )


FilterSpec = RawQuery | FilterSet


def filter_spec_from_params(
    query: str | None = None,
    name_pattern: str | None = None,
    type: str | None = None,
    layer: str | None = None,
    domain: str | None = None,
    healthstate: str | None = None,
) -> FilterSpec:
    """Pick the FilterSpec variant for a set of tool parameters.

    A non-empty ``query`` wins outright; every named filter is then ignored.
    """
    if query:
        return RawQuery(query)
    return FilterSet(
        name=name_pattern or "",
        type=type or "",
        layer=layer or "",
        domain=domain or "",
        healthstate=healthstate or "",
    )


def quote(value: str) -> str:
    """Render ``value`` as a double-quoted STQL string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_query(spec: FilterSpec) -> str:
    """Build the base STQL expression for ``spec``.

    Returns an empty string for a FilterSet with no non-empty field; the
    caller decides whether that is an error.
    """
    if isinstance(spec, RawQuery):
        return spec.expression

    clauses = []
    for stql_field, attr in FilterSet.FIELDS:
        value = getattr(spec, attr)
        if value:
            clauses.append(f"{stql_field} = {quote(value)}")
    return " AND ".join(clauses)


# -----------------------------------------------------------------------------
# Neighbor expansion
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class NeighborSpec:
    enabled: bool = False
    levels: str = DEFAULT_NEIGHBOR_LEVELS
    direction: Direction = DEFAULT_NEIGHBOR_DIRECTION


def parse_levels(levels: int | str | None) -> str:
    """Normalize a levels parameter to "1".."14" or "all"."""
    if levels is None or levels == "":
        return DEFAULT_NEIGHBOR_LEVELS

    text = str(levels).strip().lower()
    if text == ALL_LEVELS:
        return ALL_LEVELS
    try:
        number = int(text)
    except ValueError:
        raise InvalidArgumentError(
            f"invalid with_neighbors_levels '{levels}'. "
            f"Allowed values: {MIN_NEIGHBOR_LEVELS}-{MAX_NEIGHBOR_LEVELS} or 'all'"
        ) from None
    if not MIN_NEIGHBOR_LEVELS <= number <= MAX_NEIGHBOR_LEVELS:
        raise InvalidArgumentError(
            f"invalid with_neighbors_levels '{levels}'. "
            f"Allowed values: {MIN_NEIGHBOR_LEVELS}-{MAX_NEIGHBOR_LEVELS} or 'all'"
        )
    return str(number)


def parse_direction(direction: Direction | str | None) -> Direction:
    if not direction:
        return DEFAULT_NEIGHBOR_DIRECTION
    try:
        return Direction(direction)
    except ValueError:
        raise InvalidArgumentError(
            f"invalid with_neighbors_direction '{direction}'. "
            f"Allowed values: up, down, both"
        ) from None


def neighbor_spec_from_params(
    with_neighbors: bool | None = False,
    levels: int | str | None = None,
    direction: str | None = None,
) -> NeighborSpec:
    """Levels and direction are only validated when expansion is enabled."""
    if not with_neighbors:
        return NeighborSpec()
    return NeighborSpec(
        enabled=True,
        levels=parse_levels(levels),
        direction=parse_direction(direction),
    )


def with_neighbors(base: str, levels: str, direction: Direction | str) -> str:
    """Widen ``base`` to also match its neighbors within ``levels`` hops."""
    if not base:
        raise InvalidArgumentError("with_neighbors requires at least one filter")
    direction = parse_direction(direction)
    return (
        f"{base} OR withNeighborsOf(components = ({base}), "
        f'levels = "{levels}", direction = "{direction.value}")'
    )


def compose_query(spec: FilterSpec, neighbors: NeighborSpec | None = None) -> str:
    """Build the final STQL query: base filters, then optional expansion.

    Raises:
        InvalidArgumentError: no filter at all, or neighbors requested
            without a base expression.
    """
    base = build_query(spec)
    if neighbors is not None and neighbors.enabled:
        return with_neighbors(base, neighbors.levels, neighbors.direction)
    if not base:
        raise InvalidArgumentError(
            "no filter provided: pass 'query' or at least one of "
            "name_pattern, type, layer, domain, healthstate"
        )
    return base
