# =============================================================================
# core/errors.py  —  Error taxonomy
# =============================================================================
#
#   ObservabilityError
#     ├── InvalidArgumentError   bad tool parameters; no backend call made
#     ├── BackendError           a backend round-trip failed
#     └── ConfigurationError     missing / malformed environment settings
#
# Degraded joins (a failed secondary lookup) are NOT errors: they are
# absorbed by the joiner and rendered as a "-" placeholder.
# =============================================================================


class ObservabilityError(Exception):
    """Base class for every error raised by this package."""


class InvalidArgumentError(ObservabilityError):
    """A tool was called with missing or malformed parameters."""


class BackendError(ObservabilityError):
    """A call to the observability backend failed.

    ``context`` names what was being attempted (the query, the monitor id,
    the metric name) so the message is actionable on its own.
    """

    def __init__(self, operation: str, context: str, detail: str):
        self.operation = operation
        self.context = context
        self.detail = detail
        super().__init__(f"{operation} failed for {context}: {detail}")


class ConfigurationError(ObservabilityError):
    """Required configuration is missing or invalid."""
