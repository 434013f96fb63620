# =============================================================================
# core/bounded.py  —  Bounded lists with a continuation marker
# =============================================================================
#
# Every list that reaches the agent is capped.  Three places cap lists:
#   - affected entities per monitor   (5)
#   - metric names given label lookups (50)
#   - identifiers per component row    (2)
#
# All three go through this helper.  The total is always the true length
# of the input; only the rendered part is cut.
# =============================================================================

from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Bounded(Generic[T]):
    """The visible head of a list plus the size of what was cut."""

    shown: tuple[T, ...]
    total: int

    @property
    def remaining(self) -> int:
        return self.total - len(self.shown)

    @property
    def truncated(self) -> bool:
        return self.remaining > 0

    def continuation(self) -> str | None:
        """The ``... and k more`` marker, or None when nothing was cut."""
        if not self.truncated:
            return None
        return f"... and {self.remaining} more"


def bound(items: Sequence[T], cap: int) -> Bounded[T]:
    """Keep the first ``cap`` items of ``items``, remembering the full count."""
    if cap < 0:
        raise ValueError(f"cap must be non-negative, got {cap}")
    return Bounded(shown=tuple(items[:cap]), total=len(items))
