"""
Cached loader for the CUDA runtime library (``libcudart`` / ``cudart64_*.dll``).

The engine talks to the runtime only for memory management (malloc, free,
memset, memcpy, synchronize); kernels are compiled and launched by CuPy.

Search order
------------
1. An explicit path (``EngineConfig.cudart_path`` or ``FUSEDVEC_CUDART``).
2. ``<CUDA_PATH>/lib64`` and ``<CUDA_PATH>/bin`` when ``CUDA_PATH`` is set.
3. ``ctypes.util.find_library("cudart")``.
4. Well-known sonames / DLL names, resolved by the platform loader.

Windows note: the directories from step 2 are also registered through
``os.add_dll_directory`` so that the runtime's own dependencies resolve; a
``WinError 206`` (path too long) falls back to prepending onto ``PATH``.
"""

from __future__ import annotations

import ctypes
import ctypes.util
import glob
import os
import sys
from functools import lru_cache
from typing import List, Optional

_SONAMES = ("libcudart.so", "libcudart.so.12", "libcudart.so.11.0")
_DLL_PATTERNS = ("cudart64_*.dll",)


def _add_dll_dir_or_path(dir_path: str) -> None:
    """Make ``dir_path`` visible to the Windows DLL loader for this process."""
    if not dir_path or not os.path.isdir(dir_path):
        return
    if not hasattr(os, "add_dll_directory"):
        return
    try:
        os.add_dll_directory(dir_path)
    except OSError as e:
        # WinError 206: The filename or extension is too long
        if getattr(e, "winerror", None) != 206:
            raise
        cur = os.environ.get("PATH", "")
        parts = cur.split(os.pathsep) if cur else []
        if dir_path not in parts:
            os.environ["PATH"] = dir_path + os.pathsep + cur if cur else dir_path


def _candidates(explicit: Optional[str]) -> List[str]:
    out: List[str] = []
    if explicit:
        out.append(explicit)

    env_path = os.environ.get("FUSEDVEC_CUDART", "")
    if env_path and env_path not in out:
        out.append(env_path)

    cuda_path = os.environ.get("CUDA_PATH", "")
    if cuda_path:
        for sub in ("lib64", "bin"):
            d = os.path.join(cuda_path, sub)
            if sys.platform == "win32":
                _add_dll_dir_or_path(d)
                for pat in _DLL_PATTERNS:
                    out.extend(sorted(glob.glob(os.path.join(d, pat)), reverse=True))
            else:
                out.extend(os.path.join(d, name) for name in _SONAMES)

    found = ctypes.util.find_library("cudart")
    if found:
        out.append(found)

    if sys.platform == "win32":
        out.extend(("cudart64_12.dll", "cudart64_110.dll"))
    else:
        out.extend(_SONAMES)
    return out


@lru_cache(maxsize=None)
def load_cudart(path: Optional[str] = None) -> ctypes.CDLL:
    """
    Load and cache the CUDA runtime library.

    Parameters
    ----------
    path : Optional[str]
        Explicit library path tried before any search location.

    Returns
    -------
    ctypes.CDLL
        Loaded runtime handle, shared by every caller in the process.

    Raises
    ------
    FileNotFoundError
        If no candidate could be loaded. The message lists what was tried.
    """
    tried: List[str] = []
    for cand in _candidates(path):
        if cand in tried:
            continue
        tried.append(cand)
        if os.path.isabs(cand) and not os.path.exists(cand):
            continue
        try:
            return ctypes.CDLL(cand)
        except OSError:
            continue

    raise FileNotFoundError(
        "CUDA runtime library not found. Tried: " + ", ".join(tried)
    )
