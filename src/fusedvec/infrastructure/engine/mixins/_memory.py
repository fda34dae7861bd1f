"""
Memory facade of the vector engine.

Allocation, release and host transfers are delegated to the allocator; the
single-element accessors are delegated to the backend.
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np

from ..._device_array import ALLOC_DTYPES, DeviceArray
from ._base import EngineCore


class MemoryMixin(EngineCore):
    """Allocate, free, upload, download and address arrays."""

    def allocate(self, count: int, dtype: Any = np.float32, zero_fill: bool = False) -> DeviceArray:
        """
        Allocate ``count`` elements on the engine's device.

        Raises
        ------
        DeviceOutOfMemoryError
            If the allocator cannot satisfy the request.
        """
        return self._allocator.allocate(dtype, count, zero_fill)

    def free(self, arr: DeviceArray) -> None:
        self._check(arr, floating=False)
        self._allocator.free(arr)

    def from_numpy(self, host: Any, dtype: Any = None) -> DeviceArray:
        """
        Upload a host array (flattened in C order).

        Parameters
        ----------
        host : array_like
            Source values.
        dtype : Any, optional
            Element type of the new array. Defaults to the source dtype when
            it is float32, float64 or int32, otherwise float64.
        """
        src = np.asarray(host)
        if dtype is None and src.dtype not in ALLOC_DTYPES:
            dtype = np.float64
        if dtype is not None:
            src = src.astype(dtype, copy=False)
        return self._allocator.copy_host_to_device(src)

    def to_numpy(self, arr: DeviceArray, out: Optional[np.ndarray] = None, offset: int = 0) -> np.ndarray:
        """Download ``arr`` into a new array, or into ``out`` at flat ``offset``."""
        self._check(arr, floating=False)
        return self._allocator.copy_device_to_host(arr, out=out, offset=offset)

    def offset(self, arr: DeviceArray, index: int, count: Optional[int] = None) -> DeviceArray:
        """View of ``arr`` starting ``index`` elements in."""
        return arr.offset(index, count)

    # ----------------------------
    # single elements
    # ----------------------------

    def get_single(self, arr: DeviceArray, index: int) -> Any:
        self._check(arr, floating=False)
        return self._backend.get_item(arr, index)

    def set_single(self, arr: DeviceArray, index: int, value: float) -> None:
        self._check(arr, floating=False)
        self._backend.set_item(arr, index, value)

    def incr_single(self, arr: DeviceArray, index: int, delta: float) -> None:
        """Add ``delta`` to one element (gradient-check perturbation)."""
        self._check(arr)
        current = self._backend.get_item(arr, index)
        self._backend.set_item(arr, index, arr.dtype.type(current + delta))
