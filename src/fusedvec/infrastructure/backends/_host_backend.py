"""
NumPy execution backend for host-resident arrays.

Every `DeviceArray` handed to this backend is wrapped as a NumPy view over its
address (`host_view`) and traversed with vectorized NumPy calls, so the engine
runs unchanged on machines without an accelerator. The fused map-reduce walks
its input in fixed-size blocks through one scratch buffer, so the mapped array
is never materialized in full.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from ...domain.device._device import Device
from .._config import DEFAULT_REDUCE_CHUNK
from .._device_array import DeviceArray, host_view
from ..functors._functor import AffineFunctor
from . import _minstd


def _views(src: DeviceArray, dst: DeviceArray):
    s = host_view(src)
    d = s if dst == src else host_view(dst)
    return s, d


class HostBackend:
    """
    Execution backend over host memory.

    Parameters
    ----------
    reduce_chunk : int, optional
        Block size of the fused map-reduce.
    """

    def __init__(self, reduce_chunk: int = DEFAULT_REDUCE_CHUNK) -> None:
        self.device = Device("cpu")
        self.reduce_chunk = max(int(reduce_chunk), 1)

    def __repr__(self) -> str:
        return f"HostBackend(reduce_chunk={self.reduce_chunk})"

    # ----------------------------
    # elementwise
    # ----------------------------

    def map(self, functor: AffineFunctor, src: DeviceArray, dst: DeviceArray) -> None:
        s, d = _views(src, dst)
        functor(s, out=d)

    def scaled_product(
        self, a: DeviceArray, b: DeviceArray, dst: DeviceArray, scale: float
    ) -> None:
        av = host_view(a)
        bv = host_view(b)
        d = bv if dst == b else (av if dst == a else host_view(dst))
        np.multiply(av, bv, out=d)
        if scale != 1.0:
            np.multiply(d, scale, out=d)

    def fill(self, dst: DeviceArray, value: float) -> None:
        host_view(dst).fill(value)

    def copy(self, src: DeviceArray, dst: DeviceArray) -> None:
        if src == dst:
            return
        np.copyto(host_view(dst), host_view(src))

    def swap(self, a: DeviceArray, b: DeviceArray) -> None:
        av = host_view(a)
        bv = host_view(b)
        tmp = av.copy()
        av[...] = bv
        bv[...] = tmp

    def get_item(self, arr: DeviceArray, index: int) -> Any:
        return host_view(arr)[int(index)]

    def set_item(self, arr: DeviceArray, index: int, value: float) -> None:
        host_view(arr)[int(index)] = value

    # ----------------------------
    # reductions
    # ----------------------------

    def reduce(self, kind: str, src: DeviceArray) -> Any:
        v = host_view(src)
        if kind == "sum":
            return v.dtype.type(np.sum(v, dtype=np.float64))
        if kind == "product":
            return v.dtype.type(np.prod(v, dtype=np.float64))
        if kind == "min":
            return v.min()
        if kind == "max":
            return v.max()
        if kind == "argmax":
            return int(v.argmax())
        raise ValueError(f"Unknown reduction kind: {kind!r}")

    def map_reduce_sum(self, functor: AffineFunctor, src: DeviceArray) -> Any:
        v = host_view(src)
        n = v.shape[0]
        scratch = np.empty(min(n, self.reduce_chunk), dtype=v.dtype)
        total = 0.0
        for start in range(0, n, self.reduce_chunk):
            part = v[start : start + self.reduce_chunk]
            out = scratch[: part.shape[0]]
            functor(part, out=out)
            total += float(np.sum(out, dtype=np.float64))
        return v.dtype.type(total)

    def sort(self, arr: DeviceArray, descending: bool) -> None:
        v = host_view(arr)
        if descending:
            v[::-1].sort()
        else:
            v.sort()

    # ----------------------------
    # matrix utilities
    # ----------------------------

    def fill_row(
        self, matrix: DeviceArray, row: int, col: int, row_index: int, value: float
    ) -> None:
        v = host_view(matrix)
        v[row_index : row * col : row] = value

    def transpose(self, src: DeviceArray, dst: DeviceArray, row: int, col: int) -> None:
        n = row * col
        s = host_view(src)[:n]
        d = host_view(dst)[:n]
        d.reshape(row, col)[...] = s.reshape(col, row).T

    # ----------------------------
    # random fills
    # ----------------------------

    def fill_uniform(
        self, dst: DeviceArray, low: float, high: float, seed: int, position: int
    ) -> int:
        d = host_view(dst)
        u = _minstd.uniform(np, seed, position, dst.count)
        d[...] = low + (high - low) * u
        return dst.count * _minstd.UNIFORM_DRAWS

    def fill_normal(
        self, dst: DeviceArray, mean: float, stddev: float, seed: int, position: int
    ) -> int:
        d = host_view(dst)
        z = _minstd.standard_normal(np, seed, position, dst.count)
        d[...] = mean + stddev * z
        return dst.count * _minstd.NORMAL_DRAWS

    def synchronize(self) -> None:
        return None
