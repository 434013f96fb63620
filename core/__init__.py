# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains ALL query construction and result normalization for
# the SUSE Observability tool server, plus the HTTP client that talks to the
# backend.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP or Google ADK.  Every flow takes
#   a Backend (core/backend.py) as its first argument and returns text, so
#   it can be driven by an in-memory fake.
#
#   stql.py      filters → STQL, neighbor expansion
#   topology.py  raw components → Entity → table
#   monitors.py  monitors ⋈ check states → table
#   metrics.py   metric search, range queries → table
#   traces.py    trace pass-through
# =============================================================================
