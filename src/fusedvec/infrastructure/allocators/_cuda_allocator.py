"""
CUDA device allocator over the ctypes runtime bindings.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ...domain.device._device import Device
from .._device_array import DeviceArray, normalize_dtype
from ..native_cuda.python.cuda_runtime_ctypes import CudaRuntime, get_cuda_runtime


class CudaAllocator:
    """
    Owning allocator for CUDA device memory.

    Parameters
    ----------
    device : Device
        CUDA device the allocations are made on.
    runtime : Optional[CudaRuntime]
        Runtime bindings; the process-wide instance is used when omitted.
    cudart_path : Optional[str]
        Explicit runtime library path, used only when ``runtime`` is omitted.
    """

    def __init__(
        self,
        device: Device,
        runtime: Optional[CudaRuntime] = None,
        cudart_path: Optional[str] = None,
    ) -> None:
        if not device.is_cuda():
            raise ValueError(f"CudaAllocator requires a cuda device; got {device}")
        self.device = device
        self.runtime = runtime if runtime is not None else get_cuda_runtime(cudart_path)
        self._live = set()

    def __len__(self) -> int:
        return len(self._live)

    def allocate(self, dtype, count: int, zero_fill: bool = False) -> DeviceArray:
        """
        Allocate ``count`` elements of ``dtype`` on the device.

        Raises
        ------
        TypeError
            If ``dtype`` is not float32, float64 or int32.
        ValueError
            If ``count`` is not positive.
        DeviceOutOfMemoryError
            If the device has no room left.
        """
        dt = normalize_dtype(dtype, allow_int=True)
        count = int(count)
        if count <= 0:
            raise ValueError(f"allocate requires count > 0, got {count}")

        nbytes = count * dt.itemsize
        self.runtime.set_device(self.device.ordinal)
        ptr = self.runtime.malloc(nbytes, str(self.device))
        if zero_fill:
            self.runtime.memset(ptr, 0, nbytes)
        self._live.add(ptr)
        return DeviceArray(ptr=ptr, count=count, dtype=dt, device=self.device)

    def free(self, arr: DeviceArray) -> None:
        """
        Release an allocation made by this allocator.

        Raises
        ------
        ValueError
            If ``arr`` does not start an allocation owned by this allocator.
        """
        ptr = int(arr.ptr)
        if ptr not in self._live:
            raise ValueError(f"free: address 0x{ptr:x} is not owned by this allocator")
        self.runtime.set_device(self.device.ordinal)
        self.runtime.free(ptr)
        self._live.discard(ptr)

    def copy_host_to_device(self, host) -> DeviceArray:
        """Allocate an array and upload the flattened contents of ``host``."""
        src = np.ascontiguousarray(host).reshape(-1)
        arr = self.allocate(src.dtype, src.shape[0])
        self.runtime.memcpy_htod(arr.ptr, src)
        return arr

    def copy_device_to_host(
        self, arr: DeviceArray, out: Optional[np.ndarray] = None, offset: int = 0
    ) -> np.ndarray:
        """
        Download an array into a NumPy buffer.

        ``out`` and ``offset`` behave as in `HostAllocator.copy_device_to_host`.
        """
        staging = np.empty(arr.count, dtype=arr.dtype)
        self.runtime.set_device(self.device.ordinal)
        self.runtime.memcpy_dtoh(staging, arr.ptr)
        if out is None:
            return staging
        out.flat[int(offset) : int(offset) + arr.count] = staging
        return out
