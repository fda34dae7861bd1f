"""
Registry of elementary functions supported by the affine-fused functors.

Each entry carries two renderings of the same scalar function:

- a host implementation operating on NumPy arrays. It has the signature
  ``host(v, out)`` (or ``host(v, p, out)`` for two-argument functions), must
  write its result into ``out`` and must tolerate ``out is v``;
- a device rendering: the name of a CUDA C function callable on ``float`` and
  ``double``. Standard math names are used as-is; the non-standard ones are
  templates defined in `CUDA_PREAMBLE`.

The set is closed: functors can only be built for registered names.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Tuple

import numpy as np

from .._config import INFINITY_THRESHOLD


@dataclass(frozen=True)
class ElementaryFunction:
    """
    One elementary function.

    Attributes
    ----------
    name : str
        Registry key.
    arity : int
        1 for ``f(x)``, 2 for ``f(x, p)``.
    host : Callable
        NumPy implementation writing into its ``out`` argument.
    device : str
        CUDA C callable name; empty for the identity.
    """

    name: str
    arity: int
    host: Callable
    device: str


# ---------------------------------------------------------------------
# Host implementations that are not a single ufunc
# ---------------------------------------------------------------------


def _identity(v, out):
    if out is not v:
        np.copyto(out, v)
    return out


def _sigmoid(v, out):
    np.negative(v, out=out)
    np.exp(out, out=out)
    np.add(out, 1, out=out)
    return np.reciprocal(out, out=out)


def _sigmoid_deriv(v, out):
    # expects sigmoid outputs: y * (1 - y)
    return np.multiply(v, np.subtract(1, v), out=out)


def _cube(v, out):
    return np.multiply(v, np.multiply(v, v), out=out)


def _cauchy(v, out):
    np.subtract(v, 0.5, out=out)
    np.multiply(out, np.pi, out=out)
    return np.tan(out, out=out)


def _laplacian(v, out):
    centered = np.subtract(v, 0.5)
    sign = np.sign(centered)
    np.abs(centered, out=centered)
    np.multiply(centered, -2, out=centered)
    np.add(centered, 1, out=centered)
    np.log(centered, out=out)
    return np.multiply(out, np.negative(sign), out=out)


def _folded(v):
    t = np.abs(v)
    np.fmod(t, 2, out=t)
    np.subtract(t, 1, out=t)
    return np.abs(t, out=t)


def _triangular_wave(v, out):
    t = _folded(v)
    np.multiply(t, 2, out=out)
    return np.subtract(out, 1, out=out)


def _triangular_wave_positive(v, out):
    np.copyto(out, _folded(v))
    return out


def _rectified_linear(v, out):
    return np.maximum(v, 0, out=out)


def _rectified_linear_deriv(v, out):
    np.copyto(out, np.greater(v, 0))
    return out


def _infinity_guard(v, p, out):
    mask = np.abs(v) > INFINITY_THRESHOLD
    if out is not v:
        np.copyto(out, v)
    out[mask] = p
    return out


def _ufunc(fn: Callable) -> Callable:
    def host(v, out):
        return fn(v, out=out)

    host.__name__ = getattr(fn, "__name__", "ufunc")
    return host


def _ufunc2(fn: Callable) -> Callable:
    def host(v, p, out):
        return fn(v, p, out=out)

    host.__name__ = getattr(fn, "__name__", "ufunc2")
    return host


# ---------------------------------------------------------------------
# Device templates for the non-standard functions
# ---------------------------------------------------------------------

CUDA_PREAMBLE = r"""
#define FV_PI 3.14159265358979323846
#define FV_INF_THRESHOLD %(threshold)r

template <typename T> __device__ __forceinline__ T fv_sigmoid(T x)
{ return T(1) / (T(1) + exp(-x)); }

template <typename T> __device__ __forceinline__ T fv_sigmoid_deriv(T x)
{ return x * (T(1) - x); }

template <typename T> __device__ __forceinline__ T fv_square(T x)
{ return x * x; }

template <typename T> __device__ __forceinline__ T fv_cube(T x)
{ return x * x * x; }

template <typename T> __device__ __forceinline__ T fv_reciprocal(T x)
{ return T(1) / x; }

template <typename T> __device__ __forceinline__ T fv_cauchy(T x)
{ return tan(T(FV_PI) * (x - T(0.5))); }

template <typename T> __device__ __forceinline__ T fv_signum(T x)
{ return T((T(0) < x) - (x < T(0))); }

template <typename T> __device__ __forceinline__ T fv_laplacian(T x)
{
    T c = x - T(0.5);
    return -fv_signum(c) * log(T(1) - T(2) * fabs(c));
}

template <typename T> __device__ __forceinline__ T fv_triangular_wave(T x)
{ return T(2) * fabs(fmod(fabs(x), T(2)) - T(1)) - T(1); }

template <typename T> __device__ __forceinline__ T fv_triangular_wave_positive(T x)
{ return fabs(fmod(fabs(x), T(2)) - T(1)); }

template <typename T> __device__ __forceinline__ T fv_rectified_linear(T x)
{ return x > T(0) ? x : T(0); }

template <typename T> __device__ __forceinline__ T fv_rectified_linear_deriv(T x)
{ return x > T(0) ? T(1) : T(0); }

template <typename T> __device__ __forceinline__ T fv_infinity_guard(T x, T p)
{ return fabs(x) > T(FV_INF_THRESHOLD) ? p : x; }
""" % {
    "threshold": float(INFINITY_THRESHOLD)
}


_TABLE: Tuple[ElementaryFunction, ...] = (
    ElementaryFunction("identity", 1, _identity, ""),
    # exp and logs
    ElementaryFunction("exp", 1, _ufunc(np.exp), "exp"),
    ElementaryFunction("log", 1, _ufunc(np.log), "log"),
    ElementaryFunction("log10", 1, _ufunc(np.log10), "log10"),
    ElementaryFunction("sqrt", 1, _ufunc(np.sqrt), "sqrt"),
    # trigs
    ElementaryFunction("cos", 1, _ufunc(np.cos), "cos"),
    ElementaryFunction("sin", 1, _ufunc(np.sin), "sin"),
    ElementaryFunction("tan", 1, _ufunc(np.tan), "tan"),
    ElementaryFunction("acos", 1, _ufunc(np.arccos), "acos"),
    ElementaryFunction("asin", 1, _ufunc(np.arcsin), "asin"),
    ElementaryFunction("atan", 1, _ufunc(np.arctan), "atan"),
    ElementaryFunction("cosh", 1, _ufunc(np.cosh), "cosh"),
    ElementaryFunction("sinh", 1, _ufunc(np.sinh), "sinh"),
    ElementaryFunction("tanh", 1, _ufunc(np.tanh), "tanh"),
    # rounding / magnitude
    ElementaryFunction("abs", 1, _ufunc(np.abs), "fabs"),
    ElementaryFunction("floor", 1, _ufunc(np.floor), "floor"),
    ElementaryFunction("ceil", 1, _ufunc(np.ceil), "ceil"),
    # non-standard
    ElementaryFunction("sigmoid", 1, _sigmoid, "fv_sigmoid"),
    ElementaryFunction("sigmoid_deriv", 1, _sigmoid_deriv, "fv_sigmoid_deriv"),
    ElementaryFunction("square", 1, _ufunc(np.square), "fv_square"),
    ElementaryFunction("cube", 1, _cube, "fv_cube"),
    ElementaryFunction("reciprocal", 1, _ufunc(np.reciprocal), "fv_reciprocal"),
    ElementaryFunction("cauchy", 1, _cauchy, "fv_cauchy"),
    ElementaryFunction("laplacian", 1, _laplacian, "fv_laplacian"),
    ElementaryFunction("signum", 1, _ufunc(np.sign), "fv_signum"),
    ElementaryFunction("triangular_wave", 1, _triangular_wave, "fv_triangular_wave"),
    ElementaryFunction(
        "triangular_wave_positive",
        1,
        _triangular_wave_positive,
        "fv_triangular_wave_positive",
    ),
    ElementaryFunction("rectified_linear", 1, _rectified_linear, "fv_rectified_linear"),
    ElementaryFunction(
        "rectified_linear_deriv",
        1,
        _rectified_linear_deriv,
        "fv_rectified_linear_deriv",
    ),
    # two-argument
    ElementaryFunction("pow", 2, _ufunc2(np.power), "pow"),
    ElementaryFunction("fmod", 2, _ufunc2(np.fmod), "fmod"),
    ElementaryFunction("infinity_guard", 2, _infinity_guard, "fv_infinity_guard"),
)

ELEMENTARY_FUNCTIONS: Dict[str, ElementaryFunction] = {f.name: f for f in _TABLE}

UNARY_FUNCTION_NAMES: Tuple[str, ...] = tuple(
    f.name for f in _TABLE if f.arity == 1 and f.name != "identity"
)
BINARY_FUNCTION_NAMES: Tuple[str, ...] = ("pow", "fmod")


def get_elementary(name: str) -> ElementaryFunction:
    """
    Look up an elementary function by name.

    Raises
    ------
    KeyError
        If ``name`` is not registered.
    """
    try:
        return ELEMENTARY_FUNCTIONS[name]
    except KeyError:
        raise KeyError(f"Unknown elementary function: {name!r}") from None
