# =============================================================================
# core/topology.py  —  Topology Components
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   1. simplify_component(s): raw snapshot component → Entity
#   2. render_components:     Entity list → bounded Markdown table
#   3. get_components:        the whole getComponents flow
#                             (filters → STQL → backend → simplify → render)
#   4. query_topology:        raw STQL pass-through, JSON out
#
# A raw snapshot component carries dozens of fields (sync metadata, state
# history, properties).  The Entity keeps six.
# =============================================================================

import json
from dataclasses import asdict
from datetime import datetime
from typing import Iterable

from core.backend import Backend
from core.bounded import bound
from core.errors import InvalidArgumentError
from core.markdown import table
from core.models import Entity
from core.stql import FilterSpec, NeighborSpec, compose_query

MAX_IDENTIFIERS_SHOWN = 2


# -----------------------------------------------------------------------------
# Result Simplifier
# -----------------------------------------------------------------------------
def _type_alias(raw: dict) -> str:
    if raw.get("typeName"):
        return raw["typeName"]
    component_type = raw.get("type")
    if isinstance(component_type, dict):
        return component_type.get("name", "")
    if component_type is None:
        return ""
    return str(component_type)


def _tags(raw: dict) -> tuple[str, ...]:
    # Older snapshots call them "labels" and wrap each in {"name": ...}
    tags = raw.get("tags")
    if tags is None:
        tags = raw.get("labels") or []
    return tuple(tag["name"] if isinstance(tag, dict) else str(tag) for tag in tags)


def _relation_ids(raw: dict) -> tuple[int, ...]:
    ids = []
    for relation in raw.get("outgoingRelations") or []:
        if isinstance(relation, dict):
            relation = relation.get("id")
        if relation is not None:
            ids.append(int(relation))
    return tuple(ids)


def simplify_component(raw: dict) -> Entity:
    return Entity(
        id=int(raw.get("id") or 0),
        name=raw.get("name", ""),
        type=_type_alias(raw),
        identifiers=tuple(raw.get("identifiers") or ()),
        tags=_tags(raw),
        outgoing_relations=_relation_ids(raw),
    )


def simplify_components(raw_components: Iterable[dict]) -> list[Entity]:
    """Normalize every component, keeping backend order."""
    return [simplify_component(raw) for raw in raw_components]


# -----------------------------------------------------------------------------
# Rendering
# -----------------------------------------------------------------------------
def _identifiers_cell(identifiers: tuple[str, ...]) -> str:
    shown = bound(identifiers, MAX_IDENTIFIERS_SHOWN)
    if not shown.total:
        return "-"
    parts = list(shown.shown)
    if shown.truncated:
        parts.append(shown.continuation())
    return ", ".join(parts)


def render_components(query: str, entities: list[Entity]) -> str:
    if not entities:
        return f"no components found for query: {query}"

    rows = [
        (entity.id, entity.name, entity.type or "-", _identifiers_cell(entity.identifiers))
        for entity in entities
    ]
    return (
        f"Found {len(entities)} component(s) for query: {query}\n\n"
        + table(("ID", "Name", "Type", "Identifiers"), rows)
    )


# -----------------------------------------------------------------------------
# Flows
# -----------------------------------------------------------------------------
def get_components(
    backend: Backend,
    spec: FilterSpec,
    neighbors: NeighborSpec | None = None,
) -> str:
    """Search components and render them as a Markdown table.

    Raises:
        InvalidArgumentError: no usable filter (nothing is sent to the backend).
        BackendError: the topology query failed.
    """
    query = compose_query(spec, neighbors)
    entities = simplify_components(backend.execute_topology_query(query))
    return render_components(query, entities)


def query_topology(backend: Backend, query: str, at: datetime | None = None) -> str:
    """Run a raw STQL query and return the simplified components as JSON."""
    if not query:
        raise InvalidArgumentError("query is required")
    entities = simplify_components(backend.execute_topology_query(query, at))
    return json.dumps([asdict(entity) for entity in entities])
