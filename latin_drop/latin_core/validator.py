"""
Grid Validator
==============

Decides whether a completely filled grid satisfies the Latin-square property.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from latin_drop.latin_core.logger import get_logger

LOGGER = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of a grid validation."""
    valid: bool
    reason: str = ""                      # Empty when valid
    line: Optional[str] = None            # e.g. "row 2" or "col 0"

    def __bool__(self) -> bool:
        return self.valid


def _check_line(values: np.ndarray, size: int) -> Optional[str]:
    """Return a failure reason for one row or column, or None if it passes."""
    if np.any((values < 1) | (values > size)):
        return "value out of range"
    if np.unique(values).size != size:
        return "repeated value"
    return None


class GridValidator:
    """
    Checks every row and every column of a filled grid.

    A line passes when all of its N values lie in ``[1, N]`` and are pairwise
    distinct. Partial grids are not meaningful here; an empty cell (0) is
    simply an out-of-range value.
    """

    def validate(self, grid: Sequence[Sequence[int]]) -> ValidationResult:
        """
        Validate a filled grid.

        Args:
            grid: Square (N, N) grid of integers.

        Returns:
            ValidationResult; ``valid`` is True iff every row and column is a
            permutation of ``1..N``.
        """
        cells = np.asarray(grid)
        if cells.ndim != 2 or cells.shape[0] != cells.shape[1]:
            raise ValueError(f"Grid must be square, got shape {cells.shape}")
        size = cells.shape[0]

        for r in range(size):
            reason = _check_line(cells[r, :], size)
            if reason is not None:
                LOGGER.debug("Row %d rejected: %s", r, reason)
                return ValidationResult(valid=False, reason=reason, line=f"row {r}")

        for c in range(size):
            reason = _check_line(cells[:, c], size)
            if reason is not None:
                LOGGER.debug("Column %d rejected: %s", c, reason)
                return ValidationResult(valid=False, reason=reason, line=f"col {c}")

        return ValidationResult(valid=True)


def is_latin_square(grid: Sequence[Sequence[int]]) -> bool:
    """Convenience wrapper around :class:`GridValidator`."""
    return GridValidator().validate(grid).valid
