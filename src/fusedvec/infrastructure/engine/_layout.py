"""
Column-major layout helpers.

A matrix with ``row`` rows and ``col`` columns is stored column by column:
element ``(i, j)`` lives at flat index ``j * row + i``. Row and column
indices may be negative and then count from the end.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np


def resolve_index(index: int, dim: int) -> int:
    """Map a possibly negative index onto ``[0, dim)`` as ``index + dim``."""
    index = int(index)
    return index + int(dim) if index < 0 else index


def to_index(i: int, j: int, row: int) -> int:
    """Flat index of element ``(i, j)``."""
    return int(j) * int(row) + int(i)


def to_coord(index: int, row: int) -> Tuple[int, int]:
    """``(i, j)`` coordinates of a flat index."""
    j, i = divmod(int(index), int(row))
    return i, j


def flatten_column_major(matrix) -> np.ndarray:
    """Flatten a 2-D array into column-major storage order."""
    m = np.asarray(matrix)
    if m.ndim != 2:
        raise ValueError(f"flatten_column_major expects a 2-D array, got ndim={m.ndim}")
    return m.reshape(-1, order="F")


def deflatten_column_major(flat, row: int) -> np.ndarray:
    """Inverse of `flatten_column_major` for a matrix with ``row`` rows."""
    v = np.asarray(flat).reshape(-1)
    row = int(row)
    if row <= 0 or v.shape[0] % row != 0:
        raise ValueError(f"cannot view {v.shape[0]} elements as a matrix with {row} rows")
    return v.reshape((row, v.shape[0] // row), order="F")
