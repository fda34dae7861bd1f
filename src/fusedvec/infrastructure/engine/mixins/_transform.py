"""
Elementwise transform dispatcher.

`TransformMixin.transform` applies one affine-fused functor across an array
in a single pass, in place or into ``out`` (which may be longer than the
input; only its leading elements are written). Every registered elementary
function has a method (``engine.exp(x, a=..., ...)``, ``engine.pow(x, p, ...)``):
the common ones are declared on the class, the rest are generated with the
same signature, so callers never build functors by hand.

The identity fast path is part of the contract: an identity map onto the same
array does no work at all, and onto another array it is a plain copy.
"""

from __future__ import annotations

from typing import Optional

from ..._device_array import DeviceArray
from ...functors._elementary import BINARY_FUNCTION_NAMES, UNARY_FUNCTION_NAMES
from ...functors._functor import AffineFunctor, linear_functor, make_functor
from ._base import EngineCore


def _leading(
    out: Optional[DeviceArray], count: int, default: DeviceArray
) -> DeviceArray:
    return default if out is None else out.offset(0, count)


class TransformMixin(EngineCore):
    """Elementwise maps and trivial full-array primitives."""

    def transform(
        self, functor: AffineFunctor, array: DeviceArray, out: Optional[DeviceArray] = None
    ) -> DeviceArray:
        """
        Write ``functor(array[i])`` into ``out[i]`` (``array[i]`` when omitted).

        ``out`` must hold at least ``array.count`` elements. Distinct but
        overlapping arrays are undefined behavior.

        Returns
        -------
        DeviceArray
            The destination, narrowed to the first ``array.count`` elements.
        """
        self._check(array, out)
        dst = _leading(out, array.count, array)
        if functor.is_identity:
            self._backend.copy(array, dst)
            return dst
        self._backend.map(functor, array, dst)
        return dst

    def apply(
        self,
        name: str,
        array: DeviceArray,
        out: Optional[DeviceArray] = None,
        a: float = 1.0,
        b: float = 0.0,
        m: float = 1.0,
        p: Optional[float] = None,
    ) -> DeviceArray:
        """`transform` with a functor built from a function name."""
        return self.transform(make_functor(name, a, b, m, p), array, out)

    def linear(
        self,
        array: DeviceArray,
        out: Optional[DeviceArray] = None,
        a: float = 1.0,
        b: float = 0.0,
    ) -> DeviceArray:
        """
        Pure affine map ``a * x + b``.

        With ``a == 1`` and ``b == 0`` this performs no traversal when ``out``
        is ``array`` (or omitted) and a plain copy otherwise.
        """
        return self.transform(linear_functor(a, b), array, out)

    def dot_multiply(
        self,
        a: DeviceArray,
        b: DeviceArray,
        out: Optional[DeviceArray] = None,
        scale: float = 1.0,
    ) -> DeviceArray:
        """Elementwise ``scale * a * b``; overwrites ``b`` when ``out`` is omitted."""
        self._check(a, b, out)
        dst = _leading(out, b.count, b)
        self._backend.scaled_product(a, b, dst, float(scale))
        return dst

    def fill(self, array: DeviceArray, value: float) -> DeviceArray:
        self._check(array)
        self._backend.fill(array, value)
        return array

    def copy(self, src: DeviceArray, dst: DeviceArray) -> DeviceArray:
        self._check(src, dst, floating=False)
        dst = dst.offset(0, src.count)
        self._backend.copy(src, dst)
        return dst

    def swap(self, a: DeviceArray, b: DeviceArray) -> None:
        """Exchange the contents of two equal-length arrays."""
        self._check(a, b, floating=False)
        self._backend.swap(a, b)

    # ----------------------------
    # common elementary functions
    # ----------------------------

    def exp(
        self,
        array: DeviceArray,
        out: Optional[DeviceArray] = None,
        a: float = 1.0,
        b: float = 0.0,
        m: float = 1.0,
    ) -> DeviceArray:
        """Elementwise ``m * exp(a * x + b)``."""
        return self.transform(make_functor("exp", a, b, m), array, out)

    def log(
        self,
        array: DeviceArray,
        out: Optional[DeviceArray] = None,
        a: float = 1.0,
        b: float = 0.0,
        m: float = 1.0,
    ) -> DeviceArray:
        """Elementwise ``m * log(a * x + b)``."""
        return self.transform(make_functor("log", a, b, m), array, out)

    def sqrt(
        self,
        array: DeviceArray,
        out: Optional[DeviceArray] = None,
        a: float = 1.0,
        b: float = 0.0,
        m: float = 1.0,
    ) -> DeviceArray:
        return self.transform(make_functor("sqrt", a, b, m), array, out)

    def tanh(
        self,
        array: DeviceArray,
        out: Optional[DeviceArray] = None,
        a: float = 1.0,
        b: float = 0.0,
        m: float = 1.0,
    ) -> DeviceArray:
        return self.transform(make_functor("tanh", a, b, m), array, out)

    def sigmoid(
        self,
        array: DeviceArray,
        out: Optional[DeviceArray] = None,
        a: float = 1.0,
        b: float = 0.0,
        m: float = 1.0,
    ) -> DeviceArray:
        """Elementwise ``m / (1 + exp(-(a * x + b)))``."""
        return self.transform(make_functor("sigmoid", a, b, m), array, out)

    def square(
        self,
        array: DeviceArray,
        out: Optional[DeviceArray] = None,
        a: float = 1.0,
        b: float = 0.0,
        m: float = 1.0,
    ) -> DeviceArray:
        return self.transform(make_functor("square", a, b, m), array, out)

    def abs(
        self,
        array: DeviceArray,
        out: Optional[DeviceArray] = None,
        a: float = 1.0,
        b: float = 0.0,
        m: float = 1.0,
    ) -> DeviceArray:
        return self.transform(make_functor("abs", a, b, m), array, out)

    def rectified_linear(
        self,
        array: DeviceArray,
        out: Optional[DeviceArray] = None,
        a: float = 1.0,
        b: float = 0.0,
        m: float = 1.0,
    ) -> DeviceArray:
        """Elementwise ``m * max(a * x + b, 0)``."""
        return self.transform(make_functor("rectified_linear", a, b, m), array, out)

    def pow(
        self,
        array: DeviceArray,
        p: float,
        out: Optional[DeviceArray] = None,
        a: float = 1.0,
        b: float = 0.0,
        m: float = 1.0,
    ) -> DeviceArray:
        """Elementwise ``m * (a * x + b) ** p``."""
        return self.transform(make_functor("pow", a, b, m, p), array, out)

    def fmod(
        self,
        array: DeviceArray,
        p: float,
        out: Optional[DeviceArray] = None,
        a: float = 1.0,
        b: float = 0.0,
        m: float = 1.0,
    ) -> DeviceArray:
        """Elementwise ``m * fmod(a * x + b, p)``."""
        return self.transform(make_functor("fmod", a, b, m, p), array, out)


def _unary_method(name: str):
    def method(
        self: TransformMixin,
        array: DeviceArray,
        out: Optional[DeviceArray] = None,
        a: float = 1.0,
        b: float = 0.0,
        m: float = 1.0,
    ) -> DeviceArray:
        return self.transform(make_functor(name, a, b, m), array, out)

    method.__name__ = name
    method.__qualname__ = f"{TransformMixin.__name__}.{name}"
    method.__doc__ = f"Elementwise ``m * {name}(a * x + b)``."
    return method


def _binary_method(name: str):
    def method(
        self: TransformMixin,
        array: DeviceArray,
        p: float,
        out: Optional[DeviceArray] = None,
        a: float = 1.0,
        b: float = 0.0,
        m: float = 1.0,
    ) -> DeviceArray:
        return self.transform(make_functor(name, a, b, m, p), array, out)

    method.__name__ = name
    method.__qualname__ = f"{TransformMixin.__name__}.{name}"
    method.__doc__ = f"Elementwise ``m * {name}(a * x + b, p)``."
    return method


# the remaining registered functions get generated methods of the same shape
for _name in UNARY_FUNCTION_NAMES:
    if _name not in TransformMixin.__dict__:
        setattr(TransformMixin, _name, _unary_method(_name))
for _name in BINARY_FUNCTION_NAMES:
    if _name not in TransformMixin.__dict__:
        setattr(TransformMixin, _name, _binary_method(_name))
del _name
