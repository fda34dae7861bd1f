"""
Shared state of the vector engine mixins.

`EngineCore` owns the injected execution backend and allocator and the
per-engine random stream. Every mixin in this package reaches memory only
through ``self._backend`` and ``self._allocator``.
"""

from __future__ import annotations

from typing import Optional

from ....domain._contracts import DeviceAllocator, ExecutionBackend
from ....domain._errors import DeviceMismatchError
from ....domain.device._device import Device
from ..._config import EngineConfig
from ..._device_array import DeviceArray, normalize_dtype


class EngineCore:
    """
    Backend, allocator and configuration holder.

    Parameters
    ----------
    backend : ExecutionBackend
        Traverses arrays.
    allocator : DeviceAllocator
        Creates and releases arrays on the backend's device.
    config : Optional[EngineConfig]
        Engine settings; defaults bound to the backend's device.

    Raises
    ------
    DeviceMismatchError
        If the backend and the allocator serve different devices.
    """

    def __init__(
        self,
        backend: ExecutionBackend,
        allocator: DeviceAllocator,
        config: Optional[EngineConfig] = None,
    ) -> None:
        if backend.device != allocator.device:
            raise DeviceMismatchError(str(backend.device), str(allocator.device))
        self._backend = backend
        self._allocator = allocator
        self.config = config if config is not None else EngineConfig(device=str(backend.device))
        self._seed = int(self.config.seed)
        self._position = 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}(device={self.device}, backend={self._backend!r})"

    @property
    def device(self) -> Device:
        return self._backend.device

    @property
    def backend(self) -> ExecutionBackend:
        return self._backend

    @property
    def allocator(self) -> DeviceAllocator:
        return self._allocator

    def _check(self, *arrays: Optional[DeviceArray], floating: bool = True) -> None:
        """
        Validate the arrays of one call.

        Only the device and element type are checked; lengths and indices are
        the caller's responsibility.

        Raises
        ------
        DeviceMismatchError
            If an array lives on another device than this engine.
        TypeError
            If ``floating`` and an array is not float32/float64.
        """
        for arr in arrays:
            if arr is None:
                continue
            if arr.device != self.device:
                raise DeviceMismatchError(str(arr.device), str(self.device))
            if floating:
                normalize_dtype(arr.dtype)

    def synchronize(self) -> None:
        """Block until all issued work on this engine's device completed."""
        self._backend.synchronize()
