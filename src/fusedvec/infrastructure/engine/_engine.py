"""
The vector engine and its factory.

`VectorEngine` is the composition of the operation mixins over one injected
execution backend and allocator. `create_engine` resolves both from the
backend registry for a device string or `Device`.
"""

from __future__ import annotations

from typing import Optional, Union

from ...domain.device._device import Device
from .._config import EngineConfig
from ..backends._registry import resolve_backend
from .mixins import (
    CompositeMixin,
    MatrixMixin,
    MemoryMixin,
    RandomMixin,
    ReductionMixin,
    TransformMixin,
)


class VectorEngine(
    CompositeMixin,
    MatrixMixin,
    RandomMixin,
    ReductionMixin,
    TransformMixin,
    MemoryMixin,
):
    """
    Device-resident numeric vector engine.

    Operations take non-owning `DeviceArray` views and traverse them through
    the injected backend. Lengths and indices are not validated; arrays from
    another device raise `DeviceMismatchError`, non-float arrays raise
    ``TypeError``.

    Examples
    --------
    ::

        eng = create_engine("cpu")
        x = eng.from_numpy([1.0, 2.0, 3.0])
        eng.exp(x, b=-3.0)      # in place: exp(x - 3)
        eng.softmax(x)
        probs = eng.to_numpy(x)
    """


def create_engine(
    device: Union[str, Device, None] = None,
    config: Optional[EngineConfig] = None,
) -> VectorEngine:
    """
    Build a `VectorEngine` for ``device``.

    Parameters
    ----------
    device : Union[str, Device, None]
        Target device. Defaults to ``config.device``, and the configuration
        itself defaults to `EngineConfig.from_env`.
    config : Optional[EngineConfig]
        Engine settings.

    Returns
    -------
    VectorEngine
        Engine bound to the device's registered backend and allocator.

    Raises
    ------
    DeviceNotSupportedError
        If the device has no usable backend.
    ValueError
        If ``device`` is not a valid device string.
    """
    cfg = config if config is not None else EngineConfig.from_env()
    dev = Device.parse(device if device is not None else cfg.device)
    if str(dev) != cfg.device:
        cfg = cfg.with_overrides(device=str(dev))
    backend, allocator = resolve_backend(dev, cfg)
    return VectorEngine(backend, allocator, cfg)
