"""
Owning allocators: host arena and CUDA device memory.
"""

from ._host_allocator import HostAllocator

__all__ = [HostAllocator.__name__]
