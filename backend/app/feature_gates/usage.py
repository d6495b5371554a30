"""Numeric usage limit comparisons for count-based features."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..plans import UNLIMITED


def is_within_limit(limit: int, current_count: int) -> bool:
    """Return whether one more item may be created under ``limit``.

    ``-1`` is unlimited. Any other limit admits creation while the live count is
    strictly below it, so a limit of ``0`` never admits anything.
    """

    if limit == UNLIMITED:
        return True
    return max(current_count, 0) < limit


@dataclass(frozen=True)
class UsageEvaluation:
    """Represents the outcome of a count-based limit check."""

    limit: int
    current_count: int
    allowed: bool

    @property
    def unlimited(self) -> bool:
        return self.limit == UNLIMITED

    @property
    def remaining(self) -> Optional[int]:
        """Items that may still be created, or ``None`` when unlimited."""

        if self.unlimited:
            return None
        return max(self.limit - max(self.current_count, 0), 0)


def evaluate_usage(*, limit: int, current_count: int) -> UsageEvaluation:
    """Compare a live count against a tier limit."""

    return UsageEvaluation(
        limit=limit,
        current_count=current_count,
        allowed=is_within_limit(limit, current_count),
    )
