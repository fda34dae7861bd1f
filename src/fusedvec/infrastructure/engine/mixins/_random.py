"""
Random fills.

Every element draws from its own position of one minimal-standard stream, so
the fill is embarrassingly parallel and reproducible for a given seed. The
engine remembers how far the stream has been consumed; successive fills
continue it, and `reset_seed` rewinds it.
"""

from __future__ import annotations

from typing import Optional

from ..._device_array import DeviceArray
from ...functors._functor import make_functor
from ._base import EngineCore


class RandomMixin(EngineCore):
    """Uniform, normal, log-normal, Laplace and Cauchy fills."""

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def stream_position(self) -> int:
        """Number of draws consumed since the last reseed."""
        return self._position

    def reset_seed(self, seed: Optional[int] = None) -> None:
        """Restart the stream, from ``seed`` or from the configured seed."""
        self._seed = int(self.config.seed if seed is None else seed)
        self._position = 0

    def fill_random_uniform(
        self, array: DeviceArray, low: float = 0.0, high: float = 1.0
    ) -> DeviceArray:
        """Fill with samples from ``[low, high)``."""
        self._check(array)
        self._position += self._backend.fill_uniform(
            array, float(low), float(high), self._seed, self._position
        )
        return array

    def fill_random_normal(
        self, array: DeviceArray, mean: float = 0.0, stddev: float = 1.0
    ) -> DeviceArray:
        """Fill with independent normal samples."""
        self._check(array)
        self._position += self._backend.fill_normal(
            array, float(mean), float(stddev), self._seed, self._position
        )
        return array

    def fill_random_lognormal(
        self, array: DeviceArray, mean: float = 0.0, stddev: float = 1.0
    ) -> DeviceArray:
        """``exp`` of a normal fill with the given log-space mean and deviation."""
        self.fill_random_normal(array, mean, stddev)
        self._backend.map(make_functor("exp"), array, array)
        return array

    def fill_random_laplacian(
        self, array: DeviceArray, loc: float = 0.0, scale: float = 1.0
    ) -> DeviceArray:
        """Laplace samples by the inverse CDF of a uniform fill."""
        self.fill_random_uniform(array)
        self._backend.map(make_functor("laplacian", m=scale), array, array)
        if loc != 0.0:
            self._backend.map(make_functor("identity", b=loc), array, array)
        return array

    def fill_random_cauchy(
        self, array: DeviceArray, loc: float = 0.0, scale: float = 1.0
    ) -> DeviceArray:
        """Cauchy samples by the inverse CDF of a uniform fill."""
        self.fill_random_uniform(array)
        self._backend.map(make_functor("cauchy", m=scale), array, array)
        if loc != 0.0:
            self._backend.map(make_functor("identity", b=loc), array, array)
        return array
