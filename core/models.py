# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the *shape* of every record that leaves the
# backend client and flows into a renderer.  They carry almost no behavior.
#
# All of them are frozen: once a backend payload has been normalized into
# one of these, nothing downstream may change it.
#
# DESIGN PRINCIPLE — "No Phantom Fields":
#   If a field exists in a model, the agent *will* reason about it.
#   Raw backend payloads carry dozens of fields per record; only the ones
#   that end up in a rendered table live here.
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


# -----------------------------------------------------------------------------
# Enumerations
# -----------------------------------------------------------------------------
class HealthState(str, Enum):
    """Severity classification of a topology element or monitor."""

    CRITICAL = "CRITICAL"
    DEVIATING = "DEVIATING"
    UNKNOWN = "UNKNOWN"
    CLEAR = "CLEAR"


# The states a monitor listing can be filtered by (CLEAR is not one of them).
MONITOR_STATES = (HealthState.CRITICAL, HealthState.DEVIATING, HealthState.UNKNOWN)


class Direction(str, Enum):
    """Traversal direction for neighbor expansion."""

    UP = "up"
    DOWN = "down"
    BOTH = "both"


# -----------------------------------------------------------------------------
# Entity — one normalized topology component
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Entity:
    """A topology component, reduced to what fits in a table row."""

    id: int
    name: str
    type: str                          # Type alias, e.g. "pod", "service"
    identifiers: tuple[str, ...] = ()  # URNs, e.g. "urn:kubernetes:/..."
    tags: tuple[str, ...] = ()         # "key:value" strings
    outgoing_relations: tuple[int, ...] = ()

    def tag_value(self, key: str) -> str | None:
        """Return the value of the first tag whose key is ``key``."""
        for tag in self.tags:
            tag_key, value = split_tag(tag)
            if tag_key == key:
                return value
        return None


def split_tag(tag: str) -> tuple[str, str]:
    """Split a ``key:value`` tag at the FIRST colon.

    Values may themselves contain colons (URLs, ports), so only the first
    occurrence separates.  A tag without a colon is all key, empty value.
    """
    key, _, value = tag.partition(":")
    return key, value


# -----------------------------------------------------------------------------
# Monitors
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class MonitorSummary:
    """A monitor definition joined with its runtime counters."""

    id: int
    name: str
    description: str = ""
    critical_count: int = 0
    deviating_count: int = 0
    unknown_count: int = 0
    clear_count: int = 0

    def count_for(self, state: HealthState) -> int:
        return {
            HealthState.CRITICAL: self.critical_count,
            HealthState.DEVIATING: self.deviating_count,
            HealthState.UNKNOWN: self.unknown_count,
            HealthState.CLEAR: self.clear_count,
        }[state]


@dataclass(frozen=True)
class CheckState:
    """One entity currently contributing to a monitor's counters."""

    name: str
    topology_element_id: int
    topology_element_id_type: str = "id"   # "id" or "identifier"


@dataclass(frozen=True)
class AffectedEntityRef:
    """Display reference to an entity affected by a monitor."""

    name: str
    element_id: int
    is_identifier: bool = False

    @classmethod
    def from_check_state(cls, check_state: CheckState) -> "AffectedEntityRef":
        return cls(
            name=check_state.name,
            element_id=check_state.topology_element_id,
            is_identifier=check_state.topology_element_id_type == "identifier",
        )

    @property
    def ref(self) -> str:
        prefix = "URN" if self.is_identifier else "ID"
        return f"{prefix}:{self.element_id}"

    def __str__(self) -> str:
        return f"{self.name} ({self.ref})"


@dataclass(frozen=True)
class MonitorRow:
    """One rendered row of the monitor table."""

    monitor_name: str
    description: str
    affected_count: int
    affected_component: str


# -----------------------------------------------------------------------------
# Metrics
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Sample:
    timestamp: float                   # Unix seconds
    value: float


@dataclass(frozen=True)
class MetricSeries:
    """A single time series: its label set plus ordered samples."""

    labels: Mapping[str, str] = field(default_factory=dict)
    samples: tuple[Sample, ...] = ()
