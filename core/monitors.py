# =============================================================================
# core/monitors.py  —  Monitor / Check-State Join
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Lists monitors that currently have entities in a given health state,
#   with the first few affected entities of each.
#
# THE PIPELINE (each stage is a plain function, testable on its own):
#
#   backend.get_monitors_overview()
#        │
#        ▼
#   qualifying_monitors()   keep monitors whose counter for the state is > 0
#        │
#        ▼
#   fetch_affected()        one check-state lookup per monitor (page 1, size 10);
#        │                  a failed lookup yields None instead of raising
#        ▼
#   monitor_rows()          up to 5 entity rows + one "... and k more" row,
#        │                  or a single "-" row when details are missing
#        ▼
#   render_monitors()       Markdown table + "Found N monitor(s)" summary
#
# FAN-OUT:
#   One secondary backend call per qualifying monitor.  Latency is linear in
#   the number of monitors in the requested state.
# =============================================================================

import logging
from typing import Iterable, Iterator

from core.backend import Backend
from core.bounded import bound
from core.errors import BackendError, InvalidArgumentError
from core.markdown import table
from core.models import (
    MONITOR_STATES,
    AffectedEntityRef,
    CheckState,
    HealthState,
    MonitorRow,
    MonitorSummary,
)

logger = logging.getLogger(__name__)

DEFAULT_STATE = HealthState.CRITICAL
CHECK_STATE_PAGE_SIZE = 10
MAX_AFFECTED_SHOWN = 5
MAX_DESCRIPTION_LENGTH = 50
PLACEHOLDER = "-"


def parse_state(state: str | None) -> HealthState:
    """Validate a monitor state filter; empty means CRITICAL."""
    if not state:
        return DEFAULT_STATE
    allowed = ", ".join(s.value for s in MONITOR_STATES)
    try:
        parsed = HealthState(state)
    except ValueError:
        raise InvalidArgumentError(
            f"invalid state '{state}'. Allowed values: {allowed}"
        ) from None
    if parsed not in MONITOR_STATES:
        raise InvalidArgumentError(f"invalid state '{state}'. Allowed values: {allowed}")
    return parsed


# -----------------------------------------------------------------------------
# Pipeline stages
# -----------------------------------------------------------------------------
def qualifying_monitors(
    monitors: Iterable[MonitorSummary], state: HealthState
) -> Iterator[MonitorSummary]:
    for monitor in monitors:
        if monitor.count_for(state) > 0:
            yield monitor


def fetch_affected(
    backend: Backend, monitor: MonitorSummary, state: HealthState
) -> list[CheckState] | None:
    """First page of check states for ``monitor``, or None if the lookup failed."""
    try:
        return backend.get_monitor_check_states(monitor.id, state, CHECK_STATE_PAGE_SIZE, 0)
    except BackendError as e:
        logger.warning("Check-state lookup for monitor %r failed: %s", monitor.name, e)
        return None


def monitor_rows(
    monitor: MonitorSummary, state: HealthState, check_states: list[CheckState] | None
) -> list[MonitorRow]:
    count = monitor.count_for(state)
    if not check_states:
        return [MonitorRow(monitor.name, monitor.description, count, PLACEHOLDER)]

    affected = bound(check_states, MAX_AFFECTED_SHOWN)
    rows = [
        MonitorRow(
            monitor.name,
            monitor.description,
            count,
            str(AffectedEntityRef.from_check_state(check_state)),
        )
        for check_state in affected.shown
    ]
    if affected.truncated:
        rows.append(MonitorRow(monitor.name, PLACEHOLDER, count, affected.continuation()))
    return rows


def join_monitor_rows(backend: Backend, state: HealthState) -> Iterator[MonitorRow]:
    """Stream the monitor table rows for ``state``.

    Raises:
        BackendError: the monitors overview itself could not be fetched.
    """
    for monitor in qualifying_monitors(backend.get_monitors_overview(), state):
        yield from monitor_rows(monitor, state, fetch_affected(backend, monitor, state))


# -----------------------------------------------------------------------------
# Rendering
# -----------------------------------------------------------------------------
def _description_cell(description: str) -> str:
    if not description:
        return PLACEHOLDER
    if len(description) > MAX_DESCRIPTION_LENGTH:
        return description[: MAX_DESCRIPTION_LENGTH - 3] + "..."
    return description


def render_monitors(rows: list[MonitorRow], state: HealthState) -> str:
    if not rows:
        return f"No monitors in {state.value} state found."

    monitor_count = len({row.monitor_name for row in rows})
    return (
        f"Found {monitor_count} monitor(s) in {state.value} state:\n\n"
        + table(
            ("Monitor Name", "Description", "Affected Count", "Affected Component"),
            (
                (row.monitor_name, _description_cell(row.description),
                 row.affected_count, row.affected_component)
                for row in rows
            ),
        )
    )


def get_monitors(backend: Backend, state: str | None = None) -> str:
    """List monitors in ``state`` (default CRITICAL) with affected entities."""
    health_state = parse_state(state)
    rows = list(join_monitor_rows(backend, health_state))
    return render_monitors(rows, health_state)
