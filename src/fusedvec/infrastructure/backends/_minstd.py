"""
Counter-based access to the minimal-standard LCG (``minstd_rand``).

The generator is ``x[k+1] = 48271 * x[k] mod (2**31 - 1)``. Rather than
stepping one stream sequentially, every output element jumps directly to its
own position of the sequence with a modular power, ``x[n] = 48271**n * x[0]``.
Parallel elements therefore never share a draw, and the result for a given
``(seed, position)`` is identical on every backend.

The functions are written against an array module ``xp`` (NumPy or CuPy) so
that host and device produce the same numbers.
"""

from __future__ import annotations

import math
from typing import Any

MINSTD_A = 48271
MINSTD_M = 2147483647

# draws consumed per generated element
UNIFORM_DRAWS = 1
NORMAL_DRAWS = 2


def seed_state(seed: int) -> int:
    """Initial state for ``seed``; a zero state is replaced by 1."""
    x0 = int(seed) % MINSTD_M
    return x0 if x0 != 0 else 1


def _pow_mod(xp: Any, steps: Any, max_steps: int) -> Any:
    """Elementwise ``MINSTD_A ** steps mod MINSTD_M`` by square-and-multiply."""
    result = xp.ones(steps.shape, dtype=xp.uint64)
    base = MINSTD_A
    for bit in range(max(int(max_steps).bit_length(), 1)):
        take = ((steps >> bit) & 1).astype(bool)
        result = xp.where(take, (result * base) % MINSTD_M, result)
        base = (base * base) % MINSTD_M
    return result


def draws(xp: Any, seed: int, position: int, count: int, stride: int = 1, lane: int = 0) -> Any:
    """
    Raw generator outputs for ``count`` elements.

    Element ``i`` receives draw number ``position + i * stride + lane`` of the
    stream, counting from zero (the first value produced after seeding).

    Returns
    -------
    array of uint64
        Values in ``[1, MINSTD_M - 1]``.
    """
    idx = xp.arange(count, dtype=xp.uint64)
    offset = int(position) + int(lane) + 1
    steps = idx * stride + offset
    max_steps = (int(count) - 1) * int(stride) + offset
    return (_pow_mod(xp, steps, max_steps) * seed_state(seed)) % MINSTD_M


def uniform(xp: Any, seed: int, position: int, count: int, stride: int = 1, lane: int = 0) -> Any:
    """Float64 samples in ``[0, 1)`` derived from `draws`."""
    x = draws(xp, seed, position, count, stride, lane)
    return (x.astype(xp.float64) - 1.0) / float(MINSTD_M - 1)


def standard_normal(xp: Any, seed: int, position: int, count: int) -> Any:
    """
    Float64 standard normal samples by the Box-Muller transform.

    Each element consumes two consecutive draws starting at
    ``position + 2 * i``.
    """
    u1 = uniform(xp, seed, position, count, NORMAL_DRAWS, 0)
    u2 = uniform(xp, seed, position, count, NORMAL_DRAWS, 1)
    radius = xp.sqrt(-2.0 * xp.log1p(-u1))
    return radius * xp.cos((2.0 * math.pi) * u2)
