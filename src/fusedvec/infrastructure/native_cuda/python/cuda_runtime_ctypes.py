"""
ctypes bindings for the subset of the CUDA runtime API used by FusedVec.

Device pointers are plain Python ``int`` values. Every call checks the
returned ``cudaError_t`` and raises `CudaRuntimeError` with the runtime's own
error string on failure; allocation failures surface as
`DeviceOutOfMemoryError` instead.

Exports bound
-------------
- cudaSetDevice / cudaGetDeviceCount / cudaDeviceSynchronize
- cudaMalloc / cudaFree / cudaMemset
- cudaMemcpy (host->device, device->host, device->device)
- cudaGetErrorString / cudaGetLastError

`CudaRuntime` binds argtypes/restype lazily and idempotently, and a cached
singleton per library path is available through `get_cuda_runtime`.
"""

from __future__ import annotations

import ctypes
from ctypes import c_char_p, c_int, c_size_t, c_void_p
from functools import lru_cache
from typing import Optional

import numpy as np

from ....domain._errors import CudaRuntimeError, DeviceOutOfMemoryError
from ._native_loader import load_cudart

DevPtr = int

CUDA_SUCCESS = 0
CUDA_ERROR_MEMORY_ALLOCATION = 2

# cudaMemcpyKind
MEMCPY_HOST_TO_DEVICE = 1
MEMCPY_DEVICE_TO_HOST = 2
MEMCPY_DEVICE_TO_DEVICE = 3


class CudaRuntime:
    """
    Thin binding layer around a loaded CUDA runtime library.

    Parameters
    ----------
    lib : ctypes.CDLL
        Loaded ``libcudart`` handle.
    """

    def __init__(self, lib: ctypes.CDLL) -> None:
        self.lib = lib
        self._bound = False

    # ----------------------------
    # binders
    # ----------------------------

    def _bind(self) -> None:
        if self._bound:
            return

        lib = self.lib
        lib.cudaSetDevice.argtypes = [c_int]
        lib.cudaSetDevice.restype = c_int

        lib.cudaGetDeviceCount.argtypes = [ctypes.POINTER(c_int)]
        lib.cudaGetDeviceCount.restype = c_int

        lib.cudaDeviceSynchronize.argtypes = []
        lib.cudaDeviceSynchronize.restype = c_int

        lib.cudaMalloc.argtypes = [ctypes.POINTER(c_void_p), c_size_t]
        lib.cudaMalloc.restype = c_int

        lib.cudaFree.argtypes = [c_void_p]
        lib.cudaFree.restype = c_int

        lib.cudaMemset.argtypes = [c_void_p, c_int, c_size_t]
        lib.cudaMemset.restype = c_int

        lib.cudaMemcpy.argtypes = [c_void_p, c_void_p, c_size_t, c_int]
        lib.cudaMemcpy.restype = c_int

        lib.cudaGetErrorString.argtypes = [c_int]
        lib.cudaGetErrorString.restype = c_char_p

        lib.cudaGetLastError.argtypes = []
        lib.cudaGetLastError.restype = c_int

        self._bound = True

    def error_string(self, status: int) -> str:
        self._bind()
        raw = self.lib.cudaGetErrorString(int(status))
        return raw.decode("utf-8", "replace") if raw else ""

    def _check(self, symbol: str, status: int) -> None:
        st = int(status)
        if st != CUDA_SUCCESS:
            raise CudaRuntimeError(symbol, st, self.error_string(st))

    # ----------------------------
    # device management
    # ----------------------------

    def set_device(self, ordinal: int) -> None:
        self._bind()
        self._check("cudaSetDevice", self.lib.cudaSetDevice(int(ordinal)))

    def device_count(self) -> int:
        self._bind()
        n = c_int(0)
        self._check("cudaGetDeviceCount", self.lib.cudaGetDeviceCount(ctypes.byref(n)))
        return int(n.value)

    def synchronize(self) -> None:
        self._bind()
        self._check("cudaDeviceSynchronize", self.lib.cudaDeviceSynchronize())

    def check_last_error(self) -> None:
        """Raise if a previous asynchronous launch recorded an error."""
        self._bind()
        self._check("cudaGetLastError", self.lib.cudaGetLastError())

    # ----------------------------
    # memory
    # ----------------------------

    def malloc(self, nbytes: int, device: str = "cuda") -> DevPtr:
        """
        Allocate ``nbytes`` of device memory.

        Raises
        ------
        DeviceOutOfMemoryError
            If the runtime reports ``cudaErrorMemoryAllocation``.
        CudaRuntimeError
            For any other non-zero status.
        """
        self._bind()
        ptr = c_void_p()
        st = int(self.lib.cudaMalloc(ctypes.byref(ptr), c_size_t(int(nbytes))))
        if st == CUDA_ERROR_MEMORY_ALLOCATION:
            # reset the last-error state left by the failed allocation
            self.lib.cudaGetLastError()
            raise DeviceOutOfMemoryError(nbytes, device, self.error_string(st))
        self._check("cudaMalloc", st)
        return int(ptr.value or 0)

    def free(self, ptr: DevPtr) -> None:
        self._bind()
        self._check("cudaFree", self.lib.cudaFree(c_void_p(int(ptr))))

    def memset(self, ptr: DevPtr, value: int, nbytes: int) -> None:
        self._bind()
        self._check(
            "cudaMemset",
            self.lib.cudaMemset(c_void_p(int(ptr)), int(value), c_size_t(int(nbytes))),
        )

    def memcpy_htod(self, dst_dev: DevPtr, src_host: np.ndarray) -> None:
        if not isinstance(src_host, np.ndarray):
            raise TypeError("src_host must be a numpy.ndarray")
        if not src_host.flags["C_CONTIGUOUS"]:
            raise ValueError("src_host must be C-contiguous")
        self._memcpy(
            "cudaMemcpy(HostToDevice)",
            int(dst_dev),
            int(src_host.ctypes.data),
            int(src_host.nbytes),
            MEMCPY_HOST_TO_DEVICE,
        )

    def memcpy_dtoh(self, dst_host: np.ndarray, src_dev: DevPtr) -> None:
        if not isinstance(dst_host, np.ndarray):
            raise TypeError("dst_host must be a numpy.ndarray")
        if not dst_host.flags["C_CONTIGUOUS"]:
            raise ValueError("dst_host must be C-contiguous")
        self._memcpy(
            "cudaMemcpy(DeviceToHost)",
            int(dst_host.ctypes.data),
            int(src_dev),
            int(dst_host.nbytes),
            MEMCPY_DEVICE_TO_HOST,
        )

    def memcpy_dtod(self, dst_dev: DevPtr, src_dev: DevPtr, nbytes: int) -> None:
        self._memcpy(
            "cudaMemcpy(DeviceToDevice)",
            int(dst_dev),
            int(src_dev),
            int(nbytes),
            MEMCPY_DEVICE_TO_DEVICE,
        )

    def _memcpy(self, symbol: str, dst: int, src: int, nbytes: int, kind: int) -> None:
        if nbytes <= 0:
            return
        self._bind()
        self._check(
            symbol,
            self.lib.cudaMemcpy(c_void_p(dst), c_void_p(src), c_size_t(nbytes), int(kind)),
        )


@lru_cache(maxsize=None)
def get_cuda_runtime(path: Optional[str] = None) -> CudaRuntime:
    """Cached `CudaRuntime` over `load_cudart(path)`."""
    return CudaRuntime(load_cudart(path))
