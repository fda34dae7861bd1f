"""
Launch-shape helpers for one-dimensional and tiled kernels.

`kernel_dim_1d` implements the occupancy rule used by every 1-D launch in the
CUDA backend: one thread per work item, spilling into 1024-thread blocks when a
single block is not enough, otherwise a single block rounded up to a whole
number of warps. `transpose_grid` sizes the 16x16 tiled transpose.
"""

from __future__ import annotations

from typing import Tuple

MAX_THREADS_PER_BLOCK = 1024
WARP_SIZE = 32
TILE_DIM = 16


def _ceil_div(n: int, d: int) -> int:
    return -(-n // d)


def kernel_dim_1d(threads: int) -> Tuple[int, int]:
    """
    Compute a ``(grid, block)`` shape for ``threads`` work items.

    Parameters
    ----------
    threads : int
        Number of threads needed. Must be positive.

    Returns
    -------
    Tuple[int, int]
        Number of blocks and threads per block.

    Raises
    ------
    ValueError
        If ``threads`` is not positive.
    """
    threads = int(threads)
    if threads <= 0:
        raise ValueError(f"kernel_dim_1d requires threads > 0, got {threads}")

    if threads > MAX_THREADS_PER_BLOCK:
        return _ceil_div(threads, MAX_THREADS_PER_BLOCK), MAX_THREADS_PER_BLOCK
    return 1, _ceil_div(threads, WARP_SIZE) * WARP_SIZE


def transpose_grid(row: int, col: int) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    """
    Grid and block shape of the tiled transpose of a ``row x col`` matrix.

    The grid's x axis walks the rows and its y axis the columns of the
    column-major source, one ``TILE_DIM x TILE_DIM`` tile per block.
    """
    grid = (
        max(_ceil_div(int(row), TILE_DIM), 1),
        max(_ceil_div(int(col), TILE_DIM), 1),
    )
    return grid, (TILE_DIM, TILE_DIM)
