"""
ctypes access to the CUDA runtime library.
"""

from ._native_loader import load_cudart
from .cuda_runtime_ctypes import CudaRuntime, get_cuda_runtime

__all__ = [CudaRuntime.__name__, get_cuda_runtime.__name__, load_cudart.__name__]
