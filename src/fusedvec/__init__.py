"""
FusedVec: a device-resident numeric vector engine.

Elementwise transforms with an embedded affine pre-transform and post-scale
(``m * f(a * x + b)``), fused reductions, sorting, numerically stable softmax
kernels and column-major matrix utilities, over flat arrays held in host
memory (NumPy backend) or CUDA device memory (CuPy backend).
"""

from .domain import (
    CudaRuntimeError,
    Device,
    DeviceMismatchError,
    DeviceNotSupportedError,
    DeviceOutOfMemoryError,
    DeviceType,
)
from .infrastructure._config import EngineConfig
from .infrastructure._device_array import DeviceArray
from .infrastructure.backends._launch import kernel_dim_1d, transpose_grid
from .infrastructure.engine import (
    VectorEngine,
    create_engine,
    deflatten_column_major,
    flatten_column_major,
    resolve_index,
    to_coord,
    to_index,
)
from .infrastructure.functors import AffineFunctor, make_functor

__version__ = "0.1.0"

__all__ = [
    AffineFunctor.__name__,
    CudaRuntimeError.__name__,
    Device.__name__,
    DeviceArray.__name__,
    DeviceMismatchError.__name__,
    DeviceNotSupportedError.__name__,
    DeviceOutOfMemoryError.__name__,
    DeviceType.__name__,
    EngineConfig.__name__,
    VectorEngine.__name__,
    create_engine.__name__,
    deflatten_column_major.__name__,
    flatten_column_major.__name__,
    kernel_dim_1d.__name__,
    make_functor.__name__,
    resolve_index.__name__,
    to_coord.__name__,
    to_index.__name__,
    transpose_grid.__name__,
]
