"""
Structural contracts between the vector engine and its collaborators.

The engine never touches memory itself. Everything that traverses an array
goes through an injected `ExecutionBackend`, and everything that creates or
destroys an array goes through a `DeviceAllocator`. Both are described here as
`typing.Protocol` types so that the engine, the host (NumPy) backend and the
CUDA (CuPy) backend can be developed and tested independently, and so that a
new execution backend only has to satisfy the shape of these interfaces.

Design notes
------------
- The domain layer stays free of NumPy and CuPy imports; element types are
  typed as ``Any`` and are interpreted by the infrastructure layer.
- `DeviceArrayLike` is a non-owning view (address + element count).
- `FunctorLike` is the call-scoped affine-fused elementary function.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from .device._device import Device


@runtime_checkable
class DeviceArrayLike(Protocol):
    """
    Non-owning view over a contiguous run of elements in device memory.

    Attributes
    ----------
    ptr : int
        Base address of element 0.
    count : int
        Number of elements addressed by the view.
    dtype : Any
        Backend dtype descriptor (``numpy.dtype`` in this package).
    device : Device
        Device the memory lives on.
    """

    ptr: int
    count: int
    dtype: Any
    device: Device


@runtime_checkable
class FunctorLike(Protocol):
    """
    Affine-fused elementary function ``m * f(a * x + b [, p])``.
    """

    name: str
    a: float
    b: float
    m: float
    p: Optional[float]

    def __call__(self, x: Any, out: Any = None) -> Any: ...


@runtime_checkable
class ExecutionBackend(Protocol):
    """
    Capability interface of a parallel execution backend.

    Every method traverses at most the arrays it is given and treats them as
    flat ``[0, count)`` ranges. No bounds or length checking is performed.
    """

    device: Device

    def map(
        self, functor: FunctorLike, src: DeviceArrayLike, dst: DeviceArrayLike
    ) -> None:
        """Write ``functor(src[i])`` into ``dst[i]``; ``dst`` may equal ``src``."""
        ...

    def scaled_product(
        self,
        a: DeviceArrayLike,
        b: DeviceArrayLike,
        dst: DeviceArrayLike,
        scale: float,
    ) -> None:
        """Write ``scale * a[i] * b[i]`` into ``dst[i]``."""
        ...

    def reduce(self, kind: str, src: DeviceArrayLike) -> Any:
        """Reduce with ``kind`` in {"sum", "product", "min", "max", "argmax"}."""
        ...

    def map_reduce_sum(self, functor: FunctorLike, src: DeviceArrayLike) -> Any:
        """Sum of ``functor(src[i])`` without materializing the mapped array."""
        ...

    def sort(self, arr: DeviceArrayLike, descending: bool) -> None: ...

    def fill(self, dst: DeviceArrayLike, value: float) -> None: ...

    def copy(self, src: DeviceArrayLike, dst: DeviceArrayLike) -> None: ...

    def swap(self, a: DeviceArrayLike, b: DeviceArrayLike) -> None: ...

    def get_item(self, arr: DeviceArrayLike, index: int) -> Any: ...

    def set_item(self, arr: DeviceArrayLike, index: int, value: float) -> None: ...

    def fill_row(
        self, matrix: DeviceArrayLike, row: int, col: int, row_index: int, value: float
    ) -> None:
        """Set element ``row_index`` of each of the ``col`` columns."""
        ...

    def transpose(
        self, src: DeviceArrayLike, dst: DeviceArrayLike, row: int, col: int
    ) -> None:
        """Transpose a column-major ``row x col`` matrix into ``dst``."""
        ...

    def fill_uniform(
        self, dst: DeviceArrayLike, low: float, high: float, seed: int, position: int
    ) -> int:
        """Fill from the ``seed`` stream at ``position``; return draws consumed."""
        ...

    def fill_normal(
        self, dst: DeviceArrayLike, mean: float, stddev: float, seed: int, position: int
    ) -> int:
        """Normal counterpart of `fill_uniform`; return draws consumed."""
        ...

    def synchronize(self) -> None: ...


@runtime_checkable
class DeviceAllocator(Protocol):
    """
    Owning collaborator for device memory.

    The engine receives already-allocated views from here and hands them back
    for release. Allocation failure must raise ``DeviceOutOfMemoryError``.
    """

    device: Device

    def allocate(self, dtype: Any, count: int, zero_fill: bool = False) -> Any: ...

    def free(self, arr: DeviceArrayLike) -> None: ...

    def copy_host_to_device(self, host: Any) -> Any: ...

    def copy_device_to_host(
        self, arr: DeviceArrayLike, out: Any = None, offset: int = 0
    ) -> Any: ...
