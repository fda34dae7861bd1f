"""
CuPy execution backend for CUDA-resident arrays.

Device arrays are wrapped as CuPy arrays over unowned memory, so the engine's
allocations (made through the ctypes runtime bindings) are traversed in place
without copies.

Kernels
-------
- Elementwise maps and fused map-reduce sums are generated from the functor's
  CUDA C expression (`AffineFunctor.cuda_expression`) and compiled once per
  ``(function, pre-transform shape, post-scale)`` combination; the scalar
  values are kernel arguments, so changing ``a``, ``b``, ``m`` or ``p`` never
  recompiles.
- ``fill_row`` and the tiled ``transpose`` are raw kernels launched with the
  shapes from `kernel_dim_1d` and `transpose_grid`.
- Plain reductions and the sort use CuPy's built-ins.

Debugging
---------
With ``debug=True`` every launch is followed by a device synchronize, so that
asynchronous faults surface at the call that caused them.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

import cupy as cp
import numpy as np

from ...domain.device._device import Device
from .._device_array import DeviceArray
from ..functors._elementary import CUDA_PREAMBLE
from ..functors._functor import AffineFunctor
from . import _minstd
from ._launch import TILE_DIM, kernel_dim_1d, transpose_grid

_CTYPES = {np.dtype(np.float32): "float", np.dtype(np.float64): "double"}

_FILL_ROW_SRC = r"""
extern "C" __global__ void %(name)s(
    %(ctype)s* data, long long row, long long col, long long row_index, %(ctype)s value)
{
    long long j = (long long)blockIdx.x * blockDim.x + threadIdx.x;
    if (j < col) {
        data[row * j + row_index] = value;
    }
}
"""

_TRANSPOSE_SRC = r"""
#define FV_TILE %(tile)d

extern "C" __global__ void %(name)s(
    const %(ctype)s* src, %(ctype)s* dst, long long width, long long height)
{
    __shared__ %(ctype)s tile[FV_TILE][FV_TILE + 1];

    long long x = (long long)blockIdx.x * FV_TILE + threadIdx.x;
    long long y = (long long)blockIdx.y * FV_TILE + threadIdx.y;
    if (x < width && y < height) {
        tile[threadIdx.y][threadIdx.x] = src[y * width + x];
    }
    __syncthreads();

    x = (long long)blockIdx.y * FV_TILE + threadIdx.x;
    y = (long long)blockIdx.x * FV_TILE + threadIdx.y;
    if (x < height && y < width) {
        dst[y * height + x] = tile[threadIdx.x][threadIdx.y];
    }
}
"""

_SCALED_PRODUCT = cp.ElementwiseKernel(
    "T u, T v, T s",
    "T y",
    "y = s * u * v",
    "fv_scaled_product",
)


def _in_params(functor: AffineFunctor) -> str:
    return ", ".join(["T x"] + [f"T {n}" for n in functor.cuda_params()])


class CudaBackend:
    """
    Execution backend over CUDA device memory.

    Parameters
    ----------
    device : Device
        CUDA device the arrays live on.
    debug : bool, optional
        Synchronize after every launch.
    """

    def __init__(self, device: Device, debug: bool = False) -> None:
        if not device.is_cuda():
            raise ValueError(f"CudaBackend requires a cuda device; got {device}")
        self.device = device
        self.debug = bool(debug)
        self._map_kernels: Dict[Tuple[str, str, bool], Any] = {}
        self._sum_kernels: Dict[Tuple[str, str, bool], Any] = {}
        self._raw_kernels: Dict[Tuple[str, np.dtype], Any] = {}

    def __repr__(self) -> str:
        return f"CudaBackend(device={self.device}, debug={self.debug})"

    # ----------------------------
    # helpers
    # ----------------------------

    def _ctx(self):
        return cp.cuda.Device(self.device.ordinal)

    def _view(self, arr: DeviceArray):
        mem = cp.cuda.UnownedMemory(arr.ptr, arr.nbytes, arr, self.device.ordinal)
        return cp.ndarray((arr.count,), dtype=arr.dtype, memptr=cp.cuda.MemoryPointer(mem, 0))

    def _views(self, src: DeviceArray, dst: DeviceArray):
        s = self._view(src)
        return s, (s if dst == src else self._view(dst))

    def _after_launch(self) -> None:
        if self.debug:
            self.synchronize()

    def _map_kernel(self, functor: AffineFunctor):
        key = functor.shape_key
        kern = self._map_kernels.get(key)
        if kern is None:
            kern = cp.ElementwiseKernel(
                _in_params(functor),
                "T y",
                f"y = (T)({functor.cuda_expression('x')})",
                "fv_map_%s_%s_%d" % (functor.name, functor.pre_kind, int(functor.scaled)),
                preamble=CUDA_PREAMBLE,
            )
            self._map_kernels[key] = kern
        return kern

    def _sum_kernel(self, functor: AffineFunctor):
        key = functor.shape_key
        kern = self._sum_kernels.get(key)
        if kern is None:
            kern = cp.ReductionKernel(
                _in_params(functor),
                "float64 y",
                f"(double)({functor.cuda_expression('x')})",
                "a + b",
                "y = a",
                "0",
                "fv_sum_%s_%s_%d" % (functor.name, functor.pre_kind, int(functor.scaled)),
                reduce_type="double",
                preamble=CUDA_PREAMBLE,
            )
            self._sum_kernels[key] = kern
        return kern

    def _raw_kernel(self, kind: str, dtype: np.dtype):
        key = (kind, dtype)
        kern = self._raw_kernels.get(key)
        if kern is None:
            ctype = _CTYPES[dtype]
            name = f"fv_{kind}_{ctype}"
            if kind == "fill_row":
                src = _FILL_ROW_SRC % {"name": name, "ctype": ctype}
            else:
                src = _TRANSPOSE_SRC % {"name": name, "ctype": ctype, "tile": TILE_DIM}
            kern = cp.RawKernel(src, name)
            self._raw_kernels[key] = kern
        return kern

    # ----------------------------
    # elementwise
    # ----------------------------

    def map(self, functor: AffineFunctor, src: DeviceArray, dst: DeviceArray) -> None:
        with self._ctx():
            s, d = self._views(src, dst)
            self._map_kernel(functor)(s, *functor.cuda_values(), d)
            self._after_launch()

    def scaled_product(
        self, a: DeviceArray, b: DeviceArray, dst: DeviceArray, scale: float
    ) -> None:
        with self._ctx():
            av = self._view(a)
            bv = self._view(b)
            d = bv if dst == b else (av if dst == a else self._view(dst))
            _SCALED_PRODUCT(av, bv, scale, d)
            self._after_launch()

    def fill(self, dst: DeviceArray, value: float) -> None:
        with self._ctx():
            self._view(dst).fill(value)
            self._after_launch()

    def copy(self, src: DeviceArray, dst: DeviceArray) -> None:
        if src == dst:
            return
        with self._ctx():
            self._view(dst)[...] = self._view(src)
            self._after_launch()

    def swap(self, a: DeviceArray, b: DeviceArray) -> None:
        with self._ctx():
            av = self._view(a)
            bv = self._view(b)
            tmp = av.copy()
            av[...] = bv
            bv[...] = tmp
            self._after_launch()

    def get_item(self, arr: DeviceArray, index: int) -> Any:
        with self._ctx():
            return self._view(arr)[int(index)].get()[()]

    def set_item(self, arr: DeviceArray, index: int, value: float) -> None:
        with self._ctx():
            self._view(arr)[int(index)] = value
            self._after_launch()

    # ----------------------------
    # reductions
    # ----------------------------

    def reduce(self, kind: str, src: DeviceArray) -> Any:
        with self._ctx():
            v = self._view(src)
            if kind == "sum":
                return src.dtype.type(float(cp.sum(v, dtype=cp.float64)))
            if kind == "product":
                return src.dtype.type(float(cp.prod(v, dtype=cp.float64)))
            if kind == "min":
                return v.min().get()[()]
            if kind == "max":
                return v.max().get()[()]
            if kind == "argmax":
                return int(v.argmax())
        raise ValueError(f"Unknown reduction kind: {kind!r}")

    def map_reduce_sum(self, functor: AffineFunctor, src: DeviceArray) -> Any:
        with self._ctx():
            v = self._view(src)
            total = self._sum_kernel(functor)(v, *functor.cuda_values())
            return src.dtype.type(float(total))

    def sort(self, arr: DeviceArray, descending: bool) -> None:
        with self._ctx():
            v = self._view(arr)
            v.sort()
            if descending:
                v[...] = v[::-1].copy()
            self._after_launch()

    # ----------------------------
    # matrix utilities
    # ----------------------------

    def fill_row(
        self, matrix: DeviceArray, row: int, col: int, row_index: int, value: float
    ) -> None:
        grid, block = kernel_dim_1d(col)
        with self._ctx():
            kern = self._raw_kernel("fill_row", matrix.dtype)
            kern(
                (grid,),
                (block,),
                (
                    self._view(matrix),
                    np.int64(row),
                    np.int64(col),
                    np.int64(row_index),
                    matrix.dtype.type(value),
                ),
            )
            self._after_launch()

    def transpose(self, src: DeviceArray, dst: DeviceArray, row: int, col: int) -> None:
        grid, block = transpose_grid(row, col)
        with self._ctx():
            kern = self._raw_kernel("transpose", src.dtype)
            kern(
                grid,
                block,
                (self._view(src), self._view(dst), np.int64(row), np.int64(col)),
            )
            self._after_launch()

    # ----------------------------
    # random fills
    # ----------------------------

    def fill_uniform(
        self, dst: DeviceArray, low: float, high: float, seed: int, position: int
    ) -> int:
        with self._ctx():
            u = _minstd.uniform(cp, seed, position, dst.count)
            self._view(dst)[...] = low + (high - low) * u
            self._after_launch()
        return dst.count * _minstd.UNIFORM_DRAWS

    def fill_normal(
        self, dst: DeviceArray, mean: float, stddev: float, seed: int, position: int
    ) -> int:
        with self._ctx():
            z = _minstd.standard_normal(cp, seed, position, dst.count)
            self._view(dst)[...] = mean + stddev * z
            self._after_launch()
        return dst.count * _minstd.NORMAL_DRAWS

    def synchronize(self) -> None:
        with self._ctx() as dev:
            dev.synchronize()
