"""
Device abstraction utilities.

This module defines lightweight descriptors for the execution targets the
vector engine can run on:

- `DeviceType`: enumeration of supported device categories
- `Device`: a concrete descriptor parsed from strings such as "cpu",
  "cuda" or "cuda:1"

The descriptors carry no backend resources. Backends and allocators are
looked up from a `Device` by the backend registry.
"""

from __future__ import annotations

from enum import Enum
import re
from typing import Optional, Union


class DeviceType(Enum):
    """
    Enumeration of supported device categories.

    Attributes
    ----------
    CPU : DeviceType
        Host memory, executed by the NumPy backend.
    CUDA : DeviceType
        NVIDIA CUDA-enabled GPU memory, executed by the CuPy backend.
    """

    CPU = "cpu"
    CUDA = "cuda"


class Device:
    """
    Concrete computation device descriptor.

    Parameters
    ----------
    device : str
        Device identifier string. Must be one of:
        - "cpu"
        - "cuda" (shorthand for "cuda:0")
        - "cuda:<index>", where <index> is a non-negative integer

    Raises
    ------
    ValueError
        If the provided device string does not match the supported formats.
    """

    __slots__ = ("type", "index")

    _CUDA_PATTERN = re.compile(r"^cuda(?::(\d+))?$")

    def __init__(self, device: str):
        spec = str(device).strip().lower()
        if spec == "cpu":
            self.type = DeviceType.CPU
            self.index: Optional[int] = None
            return

        m = self._CUDA_PATTERN.match(spec)
        if not m:
            raise ValueError(
                f"Invalid device '{device}'. Expected 'cpu', 'cuda' or 'cuda:<index>'"
            )
        self.type = DeviceType.CUDA
        self.index = int(m.group(1)) if m.group(1) is not None else 0

    @classmethod
    def parse(cls, device: Union[str, "Device", None]) -> "Device":
        """
        Normalize a user-facing device argument.

        Parameters
        ----------
        device : Union[str, Device, None]
            A device string, an existing descriptor (returned unchanged), or
            None for the host device.

        Returns
        -------
        Device
            Parsed device descriptor.
        """
        if device is None:
            return cls("cpu")
        if isinstance(device, Device):
            return device
        return cls(device)

    @property
    def ordinal(self) -> int:
        """CUDA device ordinal, or 0 for the host device."""
        return 0 if self.index is None else int(self.index)

    def __str__(self) -> str:
        return "cpu" if self.type is DeviceType.CPU else f"cuda:{self.index}"

    def __repr__(self) -> str:
        return f"Device('{self}')"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Device):
            return NotImplemented
        return (self.type, self.index) == (other.type, other.index)

    def __hash__(self) -> int:
        return hash((self.type, self.index))

    def is_cpu(self) -> bool:
        """Return True if this descriptor denotes host memory."""
        return self.type is DeviceType.CPU

    def is_cuda(self) -> bool:
        """Return True if this descriptor denotes a CUDA device."""
        return self.type is DeviceType.CUDA
