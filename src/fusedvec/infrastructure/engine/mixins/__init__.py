"""
Vector engine mixins.

Each mixin contributes one group of operations on top of `EngineCore`:

- ``MemoryMixin``     allocation, host transfers, single elements
- ``TransformMixin``  elementwise dispatcher and per-function methods
- ``ReductionMixin``  sums, extremes, fused map-reduce, sort
- ``MatrixMixin``     column-major row/column fills and transpose
- ``RandomMixin``     per-index random streams
- ``CompositeMixin``  softmax family and infinity guard
"""

from ._base import EngineCore
from ._composite import CompositeMixin
from ._matrix import MatrixMixin
from ._memory import MemoryMixin
from ._random import RandomMixin
from ._reduction import ReductionMixin
from ._transform import TransformMixin

__all__ = [
    EngineCore.__name__,
    CompositeMixin.__name__,
    MatrixMixin.__name__,
    MemoryMixin.__name__,
    RandomMixin.__name__,
    ReductionMixin.__name__,
    TransformMixin.__name__,
]
