"""
Host arena allocator.

Backs the CPU device. Each allocation is a NumPy buffer kept alive in an
arena keyed by its address, so that the engine can hand out plain
`DeviceArray` views (address + count) exactly as it does for CUDA memory.
"""

from __future__ import annotations

from typing import Dict, Optional

import numpy as np

from ...domain._errors import DeviceOutOfMemoryError
from ...domain.device._device import Device
from .._device_array import DeviceArray, host_view, normalize_dtype


class HostAllocator:
    """
    Owning allocator for host-resident arrays.

    Notes
    -----
    - Buffers stay alive until `free` is called or the allocator is dropped.
    - ``MemoryError`` from NumPy is reported as `DeviceOutOfMemoryError`.
    """

    def __init__(self) -> None:
        self.device = Device("cpu")
        self._arena: Dict[int, np.ndarray] = {}

    def __len__(self) -> int:
        return len(self._arena)

    def allocate(self, dtype, count: int, zero_fill: bool = False) -> DeviceArray:
        """
        Allocate ``count`` elements of ``dtype``.

        Raises
        ------
        TypeError
            If ``dtype`` is not float32, float64 or int32.
        ValueError
            If ``count`` is not positive.
        DeviceOutOfMemoryError
            If the host cannot provide the buffer.
        """
        dt = normalize_dtype(dtype, allow_int=True)
        count = int(count)
        if count <= 0:
            raise ValueError(f"allocate requires count > 0, got {count}")

        try:
            buf = np.zeros(count, dtype=dt) if zero_fill else np.empty(count, dtype=dt)
        except MemoryError as e:
            raise DeviceOutOfMemoryError(count * dt.itemsize, str(self.device), str(e)) from e

        ptr = int(buf.ctypes.data)
        self._arena[ptr] = buf
        return DeviceArray(ptr=ptr, count=count, dtype=dt, device=self.device)

    def free(self, arr: DeviceArray) -> None:
        """
        Release an allocation made by this allocator.

        Raises
        ------
        ValueError
            If ``arr`` does not start an allocation owned by this allocator.
        """
        if self._arena.pop(int(arr.ptr), None) is None:
            raise ValueError(f"free: address 0x{int(arr.ptr):x} is not owned by this allocator")

    def copy_host_to_device(self, host) -> DeviceArray:
        """Allocate an array and fill it with the flattened contents of ``host``."""
        src = np.ascontiguousarray(host).reshape(-1)
        arr = self.allocate(src.dtype, src.shape[0])
        host_view(arr)[...] = src
        return arr

    def copy_device_to_host(
        self, arr: DeviceArray, out: Optional[np.ndarray] = None, offset: int = 0
    ) -> np.ndarray:
        """
        Copy an array back into a NumPy buffer.

        Parameters
        ----------
        arr : DeviceArray
            Source array.
        out : Optional[np.ndarray]
            Destination; a new 1-D array is returned when omitted.
        offset : int, optional
            Flat element offset into ``out`` where the copy starts.
        """
        src = host_view(arr)
        if out is None:
            return src.copy()
        out.flat[int(offset) : int(offset) + arr.count] = src
        return out
