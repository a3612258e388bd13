"""Dividing a periodic simulation box among writer processes."""

from __future__ import annotations

import logging
import math
from typing import Sequence

logger = logging.getLogger(__name__)

Bounds = list[float]


class BalanceScriptError(ValueError):
    """Raised when a load-balance script returns a line that cannot be used."""


def _ceil_cbrt(value: int) -> int:
    root = round(abs(value) ** (1.0 / 3.0))
    while root**3 < value:
        root += 1
    while root > 0 and (root - 1) ** 3 >= value:
        root -= 1
    return root


def _ceil_sqrt(value: int) -> int:
    root = math.isqrt(value)
    return root if root * root == value else root + 1


def factor_3(n: int) -> list[int]:
    """Split ``n`` into three factors whose product is ``n``.

    Divisors are searched downwards from the cube root, so the factors come
    out as close to equal as this greedy search allows.
    """
    if n == 0:
        raise ValueError("cannot factor zero")
    remaining = n
    factors: list[int] = []
    candidate = _ceil_cbrt(abs(n))
    while candidate > 0 and len(factors) < 2:
        if remaining % candidate == 0:
            remaining //= candidate
            factors.append(candidate)
            candidate = _ceil_sqrt(abs(remaining)) + 1
        candidate -= 1
    factors.append(remaining)
    return factors


def divide_projection(data: Sequence[int], pieces: int, box_size: float) -> list[float]:
    """Lower edges of ``pieces`` slabs holding roughly equal particle counts.

    ``data`` is a histogram of particle counts along one axis of the box.
    When the histogram cannot supply enough divisions the remaining ones are
    spread evenly over the rest of the box, with a warning.
    """
    if pieces <= 0:
        raise ValueError("pieces must be positive")
    size = len(data)
    if size == 0:
        raise ValueError("projection histogram is empty")
    per_piece = (sum(data) + pieces - 1) // pieces
    places = [0.0]
    cumulative = 0
    for index, count in enumerate(data):
        if len(places) >= pieces:
            break
        cumulative += count
        target = len(places) * per_piece
        if cumulative > target:
            before = cumulative - count
            fraction = (target - before) / (cumulative - before) if cumulative > before else 0.0
            places.append(box_size * ((index + fraction) / size))
    if len(places) < pieces:
        logger.warning("Projection failed; reverting to equal volume divisions.")
        while len(places) < pieces:
            n = len(places)
            places.append(places[-1] + (box_size - places[-1]) / (pieces - n + 1))
    return places


def sort_chunks(chunks: Sequence[int]) -> list[int]:
    """The three per-axis chunk counts in ascending order."""
    if len(chunks) != 3:
        raise ValueError("exactly three chunk counts are required")
    return sorted(chunks)


def populate_bounds(
    pos: int,
    old_bounds: Sequence[float] | None,
    new_min: float,
    new_max: float,
    box_size: float,
) -> Bounds:
    """Bounds that keep axes before ``pos``, set axis ``pos`` and span the rest.

    Bounds are laid out as ``(min_x, min_y, min_z, max_x, max_y, max_z)``.
    """
    if not 0 <= pos < 3:
        raise ValueError("axis must be 0, 1 or 2")
    if pos > 0 and (old_bounds is None or len(old_bounds) != 6):
        raise ValueError("previous bounds are required for axes after the first")
    bounds: Bounds = []
    for i in range(6):
        axis = i % 3
        if axis < pos:
            bounds.append(float(old_bounds[i]))
        elif axis == pos:
            bounds.append(float(new_min if i < 3 else new_max))
        else:
            bounds.append(0.0 if i < 3 else float(box_size))
    return bounds


def volume_balance_bounds(
    chunks: Sequence[int], num_writers: int, box_size: float
) -> list[Bounds]:
    """Bounds for each writer when the box is cut into equal-volume cells."""
    if len(chunks) != 3 or any(c <= 0 for c in chunks):
        raise ValueError("three positive chunk counts are required")
    if num_writers < 0:
        raise ValueError("num_writers must not be negative")
    chunk_size = [box_size / c for c in chunks]
    result = []
    for n in range(num_writers):
        idx = (
            n % chunks[0],
            (n // chunks[0]) % chunks[1],
            n // (chunks[0] * chunks[1]),
        )
        lows = [idx[i] * chunk_size[i] for i in range(3)]
        highs = [
            float(box_size) if idx[i] + 1 == chunks[i] else lows[i] + chunk_size[i]
            for i in range(3)
        ]
        result.append(lows + highs)
    return result


def parse_balance_script_line(
    line: str, expected_id: int, expected_port: int, box_size: float
) -> Bounds:
    """Read ``ID address port min_x min_y min_z max_x max_y max_z`` from a script.

    The ID and port must match those sent to the script and every bound must
    lie within the box.
    """
    fields = line.split()
    expected = (
        f"Expected: {expected_id} <address> {expected_port} "
        "min_x min_y min_z max_x max_y max_z"
    )
    try:
        if len(fields) < 9:
            raise ValueError("too few fields")
        writer_id = int(fields[0])
        port = int(fields[2])
        bounds = [float(value) for value in fields[3:9]]
    except ValueError as exc:
        raise BalanceScriptError(
            f"Received invalid format from load balance script! "
            f"Offending line: {line.rstrip()} {expected}"
        ) from exc
    if writer_id != expected_id or port != expected_port:
        raise BalanceScriptError(
            f"Received invalid format from load balance script! "
            f"Offending line: {line.rstrip()} {expected}"
        )
    if any(value < 0 or value > box_size for value in bounds):
        raise BalanceScriptError(
            f"Received invalid format from load balance script! "
            f"Offending line: {line.rstrip()} "
            f"Bounds must be within the range 0 to {box_size:f}"
        )
    return bounds