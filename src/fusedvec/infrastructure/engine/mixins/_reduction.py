"""
Reductions and order statistics.

Sums and products are accumulated in double precision and returned in the
array's element type. The fused map-reduce never materializes the mapped
array.
"""

from __future__ import annotations

from typing import Any

from ..._device_array import DeviceArray
from ...functors._functor import AffineFunctor, make_functor
from ._base import EngineCore


class ReductionMixin(EngineCore):
    """Sum, product, extremes, fused map-reduce and sort."""

    def sum(self, array: DeviceArray) -> Any:
        self._check(array)
        return self._backend.reduce("sum", array)

    def product(self, array: DeviceArray) -> Any:
        self._check(array)
        return self._backend.reduce("product", array)

    def min(self, array: DeviceArray) -> Any:
        """Smallest element. ``array`` must not be empty."""
        self._check(array)
        return self._backend.reduce("min", array)

    def max(self, array: DeviceArray) -> Any:
        """Largest element. ``array`` must not be empty."""
        self._check(array)
        return self._backend.reduce("max", array)

    def argmax(self, array: DeviceArray) -> int:
        """Index of the first largest element."""
        self._check(array)
        return int(self._backend.reduce("argmax", array))

    def map_reduce_sum(self, functor: AffineFunctor, array: DeviceArray) -> Any:
        """
        Sum of ``functor(array[i])`` in one fused pass.

        Parameters
        ----------
        functor : AffineFunctor
            Elementwise map applied before summation.
        array : DeviceArray
            Input values; left unchanged.

        Returns
        -------
        numpy scalar
            Sum in the array's element type.
        """
        self._check(array)
        if functor.is_identity:
            return self._backend.reduce("sum", array)
        return self._backend.map_reduce_sum(functor, array)

    def log_sum(self, array: DeviceArray, a: float = 1.0, b: float = 0.0) -> Any:
        """Sum of ``log(a * x + b)``."""
        return self.map_reduce_sum(make_functor("log", a, b), array)

    def square_sum(self, array: DeviceArray, a: float = 1.0, b: float = 0.0) -> Any:
        """Sum of ``(a * x + b) ** 2``."""
        return self.map_reduce_sum(make_functor("square", a, b), array)

    def abs_sum(self, array: DeviceArray, a: float = 1.0, b: float = 0.0) -> Any:
        """Sum of ``|a * x + b|``."""
        return self.map_reduce_sum(make_functor("abs", a, b), array)

    def sort(self, array: DeviceArray, direction: int = 1) -> DeviceArray:
        """
        Sort in place, ascending when ``direction > 0`` and descending otherwise.

        The sort is not stable.
        """
        self._check(array)
        self._backend.sort(array, descending=not direction > 0)
        return array
