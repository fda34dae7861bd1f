"""
Registry of execution backends keyed by device type.

Each registered factory receives the concrete `Device` and the engine's
`EngineConfig` and returns the ``(backend, allocator)`` pair that serves that
device. Factories are registered with the `register_backend` decorator; the
CUDA factory imports CuPy and the runtime bindings only when it is called,
so the host path works on machines without either.
"""

from __future__ import annotations

from typing import Callable, Dict, Tuple

from ...domain._contracts import DeviceAllocator, ExecutionBackend
from ...domain._errors import DeviceNotSupportedError
from ...domain.device._device import Device, DeviceType
from .._config import EngineConfig

BackendFactory = Callable[[Device, EngineConfig], Tuple[ExecutionBackend, DeviceAllocator]]

_FACTORIES: Dict[DeviceType, BackendFactory] = {}


def register_backend(device_type: DeviceType) -> Callable[[BackendFactory], BackendFactory]:
    """
    Decorator registering a backend factory for ``device_type``.

    A later registration for the same device type replaces the earlier one.
    """

    def decorator(factory: BackendFactory) -> BackendFactory:
        _FACTORIES[device_type] = factory
        return factory

    return decorator


def registered_device_types() -> Tuple[DeviceType, ...]:
    return tuple(_FACTORIES)


def resolve_backend(
    device: Device, config: EngineConfig
) -> Tuple[ExecutionBackend, DeviceAllocator]:
    """
    Build the backend and allocator serving ``device``.

    Raises
    ------
    DeviceNotSupportedError
        If no factory is registered for the device type, or the factory's
        third-party stack is not installed.
    """
    factory = _FACTORIES.get(device.type)
    if factory is None:
        raise DeviceNotSupportedError("create_engine", str(device))
    return factory(device, config)


@register_backend(DeviceType.CPU)
def _host_factory(device: Device, config: EngineConfig):
    from ..allocators._host_allocator import HostAllocator
    from ._host_backend import HostBackend

    return HostBackend(reduce_chunk=config.reduce_chunk), HostAllocator()


@register_backend(DeviceType.CUDA)
def _cuda_factory(device: Device, config: EngineConfig):
    try:
        from ..allocators._cuda_allocator import CudaAllocator
        from ._cuda_backend import CudaBackend
    except ImportError as e:
        raise DeviceNotSupportedError("create_engine", f"{device} ({e})") from e

    allocator = CudaAllocator(device, cudart_path=config.cudart_path)
    return CudaBackend(device, debug=config.debug), allocator
