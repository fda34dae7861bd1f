"""
Engine configuration.

`EngineConfig` gathers the few knobs the engine has. It can be built directly
or from environment variables:

- ``FUSEDVEC_DEVICE``        default device ("cpu", "cuda", "cuda:<n>")
- ``FUSEDVEC_SEED``          seed of the per-index random streams
- ``FUSEDVEC_REDUCE_CHUNK``  host map-reduce block size (elements)
- ``FUSEDVEC_DEBUG``         synchronize and check status after each launch
- ``FUSEDVEC_CUDART``        explicit path of the CUDA runtime library

Malformed numeric values do not abort start-up: the default is used and a
``RuntimeWarning`` is emitted.
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass, replace
from typing import Mapping, Optional

DEFAULT_SEED = 1
DEFAULT_REDUCE_CHUNK = 1 << 16

# |x| above this is treated as an overflowed value by correct_infinity
INFINITY_THRESHOLD = 1e5

_FALSE_STRINGS = ("0", "", "false", "False", "FALSE", "off", "no")


def _env_flag(env: Mapping[str, str], key: str) -> bool:
    return env.get(key, "0") not in _FALSE_STRINGS


def _env_int(env: Mapping[str, str], key: str, default: int, minimum: int) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        warnings.warn(
            f"{key}={raw!r} is not an integer; using {default}",
            RuntimeWarning,
            stacklevel=3,
        )
        return default
    if value < minimum:
        warnings.warn(
            f"{key}={value} is below {minimum}; using {default}",
            RuntimeWarning,
            stacklevel=3,
        )
        return default
    return value


@dataclass(frozen=True)
class EngineConfig:
    """
    Immutable engine settings.

    Attributes
    ----------
    device : str
        Device the engine binds to when none is given explicitly.
    seed : int
        Seed of the minimal-standard random streams.
    reduce_chunk : int
        Block size used by the host backend to fuse map and reduce without
        materializing the mapped array.
    debug : bool
        If True, CUDA launches are followed by a synchronize + status check.
    cudart_path : Optional[str]
        Explicit CUDA runtime library path; searched for when None.
    """

    device: str = "cpu"
    seed: int = DEFAULT_SEED
    reduce_chunk: int = DEFAULT_REDUCE_CHUNK
    debug: bool = False
    cudart_path: Optional[str] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """
        Build a configuration from environment variables.

        Parameters
        ----------
        env : Optional[Mapping[str, str]]
            Mapping to read from. Defaults to ``os.environ``.

        Returns
        -------
        EngineConfig
            Configuration with defaults for unset variables.
        """
        env = os.environ if env is None else env
        return cls(
            device=env.get("FUSEDVEC_DEVICE", "") or "cpu",
            seed=_env_int(env, "FUSEDVEC_SEED", DEFAULT_SEED, 0),
            reduce_chunk=_env_int(
                env, "FUSEDVEC_REDUCE_CHUNK", DEFAULT_REDUCE_CHUNK, 1
            ),
            debug=_env_flag(env, "FUSEDVEC_DEBUG"),
            cudart_path=env.get("FUSEDVEC_CUDART") or None,
        )

    def with_overrides(self, **changes) -> "EngineConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)
