"""
Execution backends (NumPy host backend, CuPy CUDA backend) and launch helpers.
"""

from ._host_backend import HostBackend
from ._launch import kernel_dim_1d, transpose_grid
from ._registry import register_backend, resolve_backend

__all__ = [
    HostBackend.__name__,
    kernel_dim_1d.__name__,
    register_backend.__name__,
    resolve_backend.__name__,
    transpose_grid.__name__,
]
