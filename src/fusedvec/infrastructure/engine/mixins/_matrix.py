"""
Row and column utilities over column-major matrices.

No matrix type exists: a matrix is a `DeviceArray` plus its ``row`` and
``col`` counts. Negative row or column indices count from the end.
"""

from __future__ import annotations

from typing import Optional

from ..._device_array import DeviceArray
from .._layout import resolve_index
from ._base import EngineCore


class MatrixMixin(EngineCore):
    """Fill whole rows or columns, and transpose."""

    def fill_column(
        self, matrix: DeviceArray, row: int, col: int, col_index: int, value: float
    ) -> DeviceArray:
        """Set every element of one column; a contiguous fill, no dedicated kernel."""
        self._check(matrix)
        j = resolve_index(col_index, col)
        self._backend.fill(matrix.column(row, j), value)
        return matrix

    def fill_row(
        self, matrix: DeviceArray, row: int, col: int, row_index: int, value: float
    ) -> DeviceArray:
        """Set element ``row_index`` of every column."""
        self._check(matrix)
        i = resolve_index(row_index, row)
        self._backend.fill_row(matrix, int(row), int(col), i, value)
        return matrix

    def transpose(
        self,
        matrix: DeviceArray,
        row: int,
        col: int,
        out: Optional[DeviceArray] = None,
    ) -> DeviceArray:
        """
        Transpose a ``row x col`` column-major matrix.

        Parameters
        ----------
        matrix : DeviceArray
            Source with at least ``row * col`` elements.
        row, col : int
            Source dimensions.
        out : Optional[DeviceArray]
            Destination, laid out as ``col x row``. A new array is allocated
            when omitted. Passing ``matrix`` itself stages the result through a
            temporary and copies it back.

        Returns
        -------
        DeviceArray
            The destination array.
        """
        self._check(matrix, out)
        row = int(row)
        col = int(col)
        n = row * col

        if out is None:
            out = self._allocator.allocate(matrix.dtype, n)
            self._backend.transpose(matrix, out, row, col)
            return out

        if out.ptr != matrix.ptr:
            self._backend.transpose(matrix, out, row, col)
            return out

        scratch = self._allocator.allocate(matrix.dtype, n)
        try:
            self._backend.transpose(matrix, scratch, row, col)
            self._backend.copy(scratch, out.offset(0, n))
        finally:
            self._allocator.free(scratch)
        return out
