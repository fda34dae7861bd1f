"""
Composite machine-learning kernels.

Everything here is built from the transform and reduction vocabulary of the
other mixins and never touches memory directly. The softmax family keeps the
max-subtraction trick: ``exp`` is always evaluated at ``x - max(x)`` through
the fused functor's pre-shift, so no intermediate shifted copy is made.

Batched variants treat a column-major matrix as one sample per column. With
``has_bias`` the last row of each column is a bias slot: it is excluded from
the softmax and zeroed in the output.
"""

from __future__ import annotations

import math
from typing import Any, List, Optional, Sequence, Union

import numpy as np

from ..._device_array import DeviceArray
from ...functors._functor import make_functor
from ._base import EngineCore

Labels = Union[Sequence[int], DeviceArray]


class CompositeMixin(EngineCore):
    """Softmax family, infinity guard and their column-wise batch forms."""

    # ----------------------------
    # single vector
    # ----------------------------

    def softmax(self, array: DeviceArray, out: Optional[DeviceArray] = None) -> DeviceArray:
        """
        Numerically stable softmax, in place or into ``out``.

        Computes ``exp(x - max(x))`` with the fused exp functor, sums it and
        rescales by the reciprocal of the sum. A longer ``out`` is written and
        returned only over its first ``array.count`` elements.
        """
        mx = self.max(array)
        dst = self.transform(make_functor("exp", b=-float(mx)), array, out)
        s = self.sum(dst)
        return self.linear(dst, a=1.0 / float(s))

    def softmax_minus_indicator(
        self, array: DeviceArray, label: int, out: Optional[DeviceArray] = None
    ) -> DeviceArray:
        """
        ``softmax(array) - onehot(label)``: the cross-entropy gradient with
        respect to the logits. ``0 <= label < count`` is not checked.
        """
        dst = self.softmax(array, out)
        self.incr_single(dst, label, -1.0)
        return dst

    def softmax_log_prob_at_label(
        self, array: DeviceArray, label: int, out: Optional[DeviceArray] = None
    ) -> Any:
        """
        ``log(softmax(array)[label])`` without computing the softmax vector.

        Parameters
        ----------
        array : DeviceArray
            Logits; left unchanged.
        label : int
            Index of the target class.
        out : Optional[DeviceArray]
            Single-element buffer that also receives the result.

        Returns
        -------
        numpy scalar
            The log-probability, in the array's element type.
        """
        mx = float(self.max(array))
        exp_sum = float(self.map_reduce_sum(make_functor("exp", b=-mx), array))
        x = float(self.get_single(array, label))
        log_prob = array.dtype.type((x - mx) - math.log(exp_sum))
        if out is not None:
            self.set_single(out, 0, log_prob)
        return log_prob

    def correct_infinity(
        self,
        array: DeviceArray,
        replacement: float = 0.0,
        out: Optional[DeviceArray] = None,
    ) -> DeviceArray:
        """Replace elements whose magnitude exceeds 1e5 by ``replacement``; NaN is kept."""
        return self.transform(make_functor("infinity_guard", p=replacement), array, out)

    # ----------------------------
    # column-wise batches
    # ----------------------------

    def _labels(self, labels: Labels, col: int) -> List[int]:
        if isinstance(labels, DeviceArray):
            host = self.to_numpy(labels.offset(0, col))
        else:
            host = np.asarray(labels).reshape(-1)[:col]
        return [int(v) for v in host]

    def _sample(self, matrix: DeviceArray, row: int, j: int, has_bias: bool) -> DeviceArray:
        rows_used = row - 1 if has_bias else row
        return matrix.column(row, j).offset(0, rows_used)

    def batch_softmax(
        self,
        matrix: DeviceArray,
        row: int,
        col: int,
        out: Optional[DeviceArray] = None,
        has_bias: bool = False,
    ) -> DeviceArray:
        """Softmax of every column of a ``row x col`` column-major matrix."""
        dst = matrix if out is None else out
        for j in range(int(col)):
            self.softmax(
                self._sample(matrix, row, j, has_bias),
                self._sample(dst, row, j, has_bias),
            )
            if has_bias:
                self.set_single(dst.column(row, j), row - 1, 0.0)
        return dst

    def batch_softmax_minus_indicator(
        self,
        matrix: DeviceArray,
        row: int,
        col: int,
        labels: Labels,
        out: Optional[DeviceArray] = None,
        has_bias: bool = False,
    ) -> DeviceArray:
        """Column-wise `softmax_minus_indicator` with one label per column."""
        dst = matrix if out is None else out
        for j, label in enumerate(self._labels(labels, col)):
            self.softmax_minus_indicator(
                self._sample(matrix, row, j, has_bias),
                label,
                self._sample(dst, row, j, has_bias),
            )
            if has_bias:
                self.set_single(dst.column(row, j), row - 1, 0.0)
        return dst

    def batch_softmax_at_label(
        self,
        matrix: DeviceArray,
        row: int,
        col: int,
        labels: Labels,
        out_log_probs: Optional[DeviceArray] = None,
        has_bias: bool = False,
    ) -> float:
        """
        Column-wise `softmax_log_prob_at_label`.

        Returns
        -------
        float
            Sum of the per-column log-probabilities (the batch log-likelihood).
            Each term is also written to ``out_log_probs[j]`` when given.
        """
        total = 0.0
        for j, label in enumerate(self._labels(labels, col)):
            slot = None if out_log_probs is None else out_log_probs.offset(j, 1)
            total += float(
                self.softmax_log_prob_at_label(self._sample(matrix, row, j, has_bias), label, slot)
            )
        return total

    def best_label(
        self, matrix: DeviceArray, row: int, col: int, has_bias: bool = False
    ) -> List[int]:
        """Arg-max row of every column."""
        return [self.argmax(self._sample(matrix, row, j, has_bias)) for j in range(int(col))]
