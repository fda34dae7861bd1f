"""
Non-owning device array views.

A `DeviceArray` is nothing more than an address, an element count, an element
type and the device the address belongs to. It never frees memory and is
cheap to copy; ownership stays with the allocator that produced it (or with
whoever handed the address in). Pointer arithmetic is expressed through
`DeviceArray.offset`, which yields another view into the same allocation.

Two views denote "the same array" for in-place purposes when they compare
equal: same address, count, dtype and device.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from ..domain.device._device import Device

FLOAT_DTYPES = (np.dtype(np.float32), np.dtype(np.float64))
ALLOC_DTYPES = FLOAT_DTYPES + (np.dtype(np.int32),)


def normalize_dtype(dtype: Any, *, allow_int: bool = False) -> np.dtype:
    """
    Normalize and validate an element type.

    Parameters
    ----------
    dtype : Any
        Anything accepted by ``np.dtype`` (``np.float32``, "float64", ...).
    allow_int : bool, optional
        Whether int32 is acceptable (allocation and label paths only).

    Returns
    -------
    np.dtype
        Canonical NumPy dtype.

    Raises
    ------
    TypeError
        If the dtype is not float32/float64 (or int32 when allowed).
    """
    dt = np.dtype(dtype)
    allowed = ALLOC_DTYPES if allow_int else FLOAT_DTYPES
    if dt not in allowed:
        names = "/".join(str(d) for d in allowed)
        raise TypeError(f"dtype must be one of {names}; got {dt}")
    return dt


@dataclass(frozen=True)
class DeviceArray:
    """
    Flat view over ``count`` contiguous elements starting at ``ptr``.

    Attributes
    ----------
    ptr : int
        Address of element 0 (host address for the CPU device, CUDA device
        pointer for CUDA devices).
    count : int
        Number of elements in the view.
    dtype : np.dtype
        Element type.
    device : Device
        Device the address belongs to.
    """

    ptr: int
    count: int
    dtype: np.dtype
    device: Device

    def __post_init__(self) -> None:
        object.__setattr__(self, "ptr", int(self.ptr))
        object.__setattr__(self, "count", int(self.count))
        object.__setattr__(self, "dtype", np.dtype(self.dtype))

    @property
    def itemsize(self) -> int:
        return int(self.dtype.itemsize)

    @property
    def nbytes(self) -> int:
        return self.count * self.itemsize

    def __len__(self) -> int:
        return self.count

    def offset(self, index: int, count: Optional[int] = None) -> "DeviceArray":
        """
        Return a view starting ``index`` elements after this one.

        Parameters
        ----------
        index : int
            Element offset from ``ptr``. Not bounds checked.
        count : Optional[int]
            Length of the new view. Defaults to the remainder of this view.

        Returns
        -------
        DeviceArray
            View sharing this view's allocation.
        """
        index = int(index)
        n = self.count - index if count is None else int(count)
        return DeviceArray(
            ptr=self.ptr + index * self.itemsize,
            count=n,
            dtype=self.dtype,
            device=self.device,
        )

    def column(self, row: int, col_index: int) -> "DeviceArray":
        """View of column ``col_index`` of a column-major matrix with ``row`` rows."""
        return self.offset(int(row) * int(col_index), int(row))


def host_view(arr: DeviceArray) -> np.ndarray:
    """
    Wrap a host-resident `DeviceArray` as a writable 1-D NumPy array.

    The returned array aliases the memory at ``arr.ptr``; it does not own it
    and must not outlive the allocation.

    Raises
    ------
    ValueError
        If ``arr`` does not live in host memory.
    """
    if not arr.device.is_cpu():
        raise ValueError(f"host_view requires a cpu array; got device {arr.device}")
    if arr.count == 0:
        return np.empty(0, dtype=arr.dtype)
    ctype = np.ctypeslib.as_ctypes_type(arr.dtype)
    buf = (ctype * arr.count).from_address(arr.ptr)
    return np.ctypeslib.as_array(buf)
