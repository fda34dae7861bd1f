"""
Affine-fused functors: ``y = m * f(a * x + b)`` (or ``m * f(a * x + b, p)``).

A functor captures one elementary function and its scalars and is used for a
single traversal. It can be evaluated

- on the host, by calling it on a NumPy array or scalar, and
- on the device, by rendering it into a CUDA C expression that the CUDA
  backend compiles into an elementwise or reduction kernel.

Identity parameters are specialized away in both renderings. The pre-transform
has four shapes (``x``, ``x + b``, ``a * x``, ``a * x + b``) and the post-scale
two (``f``, ``m * f``); the device kernels are cached per shape, not per value,
so one compiled kernel serves every affine configuration of that shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

import numpy as np

from .._device_array import FLOAT_DTYPES
from ._elementary import ElementaryFunction, get_elementary

PRE_IDENTITY = "identity"
PRE_SHIFT = "shift"
PRE_SCALE = "scale"
PRE_AFFINE = "affine"


@dataclass(frozen=True)
class AffineFunctor:
    """
    Immutable elementary function with captured affine parameters.

    Attributes
    ----------
    name : str
        Registered elementary function name.
    a : float
        Pre-scale applied to the input.
    b : float
        Pre-shift applied after the pre-scale.
    m : float
        Post-scale applied to the function value.
    p : Optional[float]
        Extra parameter of two-argument functions (exponent, modulus, ...).
    """

    name: str
    a: float = 1.0
    b: float = 0.0
    m: float = 1.0
    p: Optional[float] = None

    def __post_init__(self) -> None:
        fn = get_elementary(self.name)
        if fn.arity == 2 and self.p is None:
            raise ValueError(f"{self.name} requires the extra parameter p")
        if fn.arity == 1 and self.p is not None:
            raise ValueError(f"{self.name} does not take an extra parameter")
        object.__setattr__(self, "a", float(self.a))
        object.__setattr__(self, "b", float(self.b))
        object.__setattr__(self, "m", float(self.m))
        if self.p is not None:
            object.__setattr__(self, "p", float(self.p))

    # ----------------------------
    # specialization
    # ----------------------------

    @property
    def elementary(self) -> ElementaryFunction:
        return get_elementary(self.name)

    @property
    def pre_kind(self) -> str:
        """Which pre-transform shape is needed for the captured ``a`` and ``b``."""
        if self.a == 1.0:
            return PRE_IDENTITY if self.b == 0.0 else PRE_SHIFT
        return PRE_SCALE if self.b == 0.0 else PRE_AFFINE

    @property
    def scaled(self) -> bool:
        """True when the post-scale ``m`` is not the identity."""
        return self.m != 1.0

    @property
    def is_identity(self) -> bool:
        """True for the pure identity map ``x -> x``."""
        return self.name == "identity" and self.pre_kind == PRE_IDENTITY and not self.scaled

    @property
    def shape_key(self) -> Tuple[str, str, bool]:
        """Cache key of the compiled device kernel for this functor."""
        return (self.name, self.pre_kind, self.scaled)

    # ----------------------------
    # host evaluation
    # ----------------------------

    def __call__(self, x: Any, out: Any = None) -> Any:
        """
        Evaluate ``m * f(a * x + b)`` on the host.

        Parameters
        ----------
        x : array_like or scalar
            Input values.
        out : Optional[np.ndarray]
            Destination buffer. May be ``x`` itself for in-place evaluation.

        Returns
        -------
        np.ndarray or numpy scalar
            ``out`` when given, otherwise a new array (or scalar for scalar
            input). Integer inputs are evaluated in float64.
        """
        v = np.asarray(x)
        scalar = False
        if out is None:
            dt = v.dtype if v.dtype in FLOAT_DTYPES else np.dtype(np.float64)
            out = np.empty(v.shape, dtype=dt)
            scalar = v.ndim == 0

        kind = self.pre_kind
        if kind == PRE_IDENTITY:
            if out is not v:
                np.copyto(out, v)
        elif kind == PRE_SHIFT:
            np.add(v, self.b, out=out)
        elif kind == PRE_SCALE:
            np.multiply(v, self.a, out=out)
        else:
            np.multiply(v, self.a, out=out)
            np.add(out, self.b, out=out)

        fn = self.elementary
        if fn.arity == 2:
            fn.host(out, self.p, out)
        else:
            fn.host(out, out)

        if self.scaled:
            np.multiply(out, self.m, out=out)

        return out[()] if scalar else out

    # ----------------------------
    # device rendering
    # ----------------------------

    def cuda_params(self) -> Tuple[str, ...]:
        """Names of the scalar kernel parameters this functor's expression uses."""
        names = []
        kind = self.pre_kind
        if kind in (PRE_SCALE, PRE_AFFINE):
            names.append("sa")
        if kind in (PRE_SHIFT, PRE_AFFINE):
            names.append("sb")
        if self.scaled:
            names.append("sm")
        if self.p is not None:
            names.append("sp")
        return tuple(names)

    def cuda_values(self) -> Tuple[float, ...]:
        """Scalar values matching `cuda_params`, in the same order."""
        lookup = {"sa": self.a, "sb": self.b, "sm": self.m, "sp": self.p}
        return tuple(lookup[n] for n in self.cuda_params())

    def cuda_expression(self, var: str = "x") -> str:
        """
        Render the functor as a CUDA C expression over variable ``var``.

        Scalars are referenced by the names returned from `cuda_params`.
        """
        kind = self.pre_kind
        if kind == PRE_IDENTITY:
            inner = var
        elif kind == PRE_SHIFT:
            inner = f"{var} + sb"
        elif kind == PRE_SCALE:
            inner = f"sa * {var}"
        else:
            inner = f"sa * {var} + sb"

        fn = self.elementary
        if not fn.device:
            call = f"({inner})"
        elif fn.arity == 2:
            call = f"{fn.device}({inner}, sp)"
        else:
            call = f"{fn.device}({inner})"

        return f"sm * {call}" if self.scaled else call


def make_functor(
    name: str,
    a: float = 1.0,
    b: float = 0.0,
    m: float = 1.0,
    p: Optional[float] = None,
) -> AffineFunctor:
    """Build an `AffineFunctor`; identity parameters are the defaults."""
    return AffineFunctor(name=name, a=a, b=b, m=m, p=p)


def linear_functor(a: float = 1.0, b: float = 0.0) -> AffineFunctor:
    """Pure affine map ``a * x + b`` with no elementary function."""
    return AffineFunctor(name="identity", a=a, b=b)
