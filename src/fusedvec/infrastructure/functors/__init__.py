"""
Affine-fused elementary functors.

A functor evaluates ``m * f(a * x + b)`` (``m * f(a * x + b, p)`` for the
two-argument functions) on the host through NumPy, and renders the same
expression as CUDA C for the device backend.
"""

from ._elementary import (
    BINARY_FUNCTION_NAMES,
    CUDA_PREAMBLE,
    ELEMENTARY_FUNCTIONS,
    UNARY_FUNCTION_NAMES,
    ElementaryFunction,
    get_elementary,
)
from ._functor import AffineFunctor, linear_functor, make_functor

__all__ = [
    AffineFunctor.__name__,
    ElementaryFunction.__name__,
    get_elementary.__name__,
    linear_functor.__name__,
    make_functor.__name__,
    "BINARY_FUNCTION_NAMES",
    "CUDA_PREAMBLE",
    "ELEMENTARY_FUNCTIONS",
    "UNARY_FUNCTION_NAMES",
]
