"""
Stack-based scanline flood fill over 2D numpy fields.

Both template segmentation (marking the exterior from the corners) and the
bucket tool grow regions with this routine. It never recurses: an explicit
stack of seed points is processed one horizontal span at a time, so regions
with millions of connected pixels are safe.
"""

from typing import List, Optional, Tuple

import numpy as np

from WS_Libs.errors import CancelToken

# Cancellation is polled every this many popped spans
CANCEL_CHECK_INTERVAL = 4096


def scanline_fill(
    field: np.ndarray,
    seed_x: int,
    seed_y: int,
    target_value: int,
    fill_value: int,
    cancel_token: Optional[CancelToken] = None,
) -> int:
    """
    Overwrite the 4-connected region of ``target_value`` around a seed.

    The field is modified in place. Only cells equal to ``target_value``
    are ever written; growth stops at any other value and at the field
    boundary.

    Args:
        field: 2D array of shape (height, width)
        seed_x: Seed column
        seed_y: Seed row
        target_value: Value the region consists of
        fill_value: Value written over the region (must differ from target)
        cancel_token: Optional token polled while filling

    Returns:
        Number of cells rewritten (0 if the seed is out of bounds or not a target cell)
    """
    if field.ndim != 2:
        raise ValueError(f"field must be 2D, got shape {field.shape}")

    height, width = field.shape
    if not (0 <= seed_x < width and 0 <= seed_y < height):
        return 0
    if target_value == fill_value or field[seed_y, seed_x] != target_value:
        return 0

    filled = 0
    pops = 0
    stack: List[Tuple[int, int]] = [(seed_x, seed_y)]

    while stack:
        x, y = stack.pop()
        row = field[y]
        if row[x] != target_value:
            continue

        pops += 1
        if cancel_token is not None and pops % CANCEL_CHECK_INTERVAL == 0:
            cancel_token.raise_if_cancelled("flood fill")

        left = _span_start(row, x, target_value)
        right = _span_end(row, x, target_value)
        row[left:right + 1] = fill_value
        filled += right - left + 1

        if y > 0:
            _push_runs(field[y - 1], left, right, target_value, y - 1, stack)
        if y < height - 1:
            _push_runs(field[y + 1], left, right, target_value, y + 1, stack)

    return filled


def _span_start(row: np.ndarray, x: int, target_value: int) -> int:
    blockers = np.flatnonzero(row[:x] != target_value)
    return int(blockers[-1]) + 1 if blockers.size else 0


def _span_end(row: np.ndarray, x: int, target_value: int) -> int:
    blockers = np.flatnonzero(row[x + 1:] != target_value)
    return x + int(blockers[0]) if blockers.size else row.shape[0] - 1


def _push_runs(
    row: np.ndarray,
    left: int,
    right: int,
    target_value: int,
    y: int,
    stack: List[Tuple[int, int]],
) -> None:
    # One seed per contiguous run of target cells under the span
    matches = row[left:right + 1] == target_value
    if not matches.any():
        return
    run_starts = matches & ~np.concatenate(([False], matches[:-1]))
    for offset in np.flatnonzero(run_starts):
        stack.append((left + int(offset), y))
