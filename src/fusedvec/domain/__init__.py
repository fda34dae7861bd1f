"""
Domain layer: device descriptors, error types and the structural contracts
implemented by execution backends and allocators.

Nothing in this package imports NumPy or CuPy.
"""

from ._contracts import DeviceAllocator, DeviceArrayLike, ExecutionBackend, FunctorLike
from ._errors import (
    CudaRuntimeError,
    DeviceMismatchError,
    DeviceNotSupportedError,
    DeviceOutOfMemoryError,
)
from .device import Device, DeviceType

__all__ = [
    Device.__name__,
    DeviceType.__name__,
    DeviceArrayLike.__name__,
    DeviceAllocator.__name__,
    ExecutionBackend.__name__,
    FunctorLike.__name__,
    CudaRuntimeError.__name__,
    DeviceMismatchError.__name__,
    DeviceNotSupportedError.__name__,
    DeviceOutOfMemoryError.__name__,
]
