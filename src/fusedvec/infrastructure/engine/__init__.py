"""
Vector engine: operation mixins, layout helpers and the engine factory.
"""

from ._engine import VectorEngine, create_engine
from ._layout import (
    deflatten_column_major,
    flatten_column_major,
    resolve_index,
    to_coord,
    to_index,
)

__all__ = [
    VectorEngine.__name__,
    create_engine.__name__,
    deflatten_column_major.__name__,
    flatten_column_major.__name__,
    resolve_index.__name__,
    to_coord.__name__,
    to_index.__name__,
]
