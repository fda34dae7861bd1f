"""
Device- and execution-related exceptions for FusedVec.

The vector engine deliberately reports very few conditions: out-of-range
indices, mismatched lengths and empty reductions are undefined behavior and
are never checked on the hot path. What remains are the failures a caller can
actually react to:

- running out of device (or host arena) memory during allocation,
- asking for a device that has no registered execution backend,
- mixing arrays that live on different devices in one call,
- a non-zero status coming back from the CUDA runtime.
"""

from typing import Optional


class DeviceOutOfMemoryError(MemoryError):
    """
    Raised when the allocation collaborator cannot satisfy a request.

    This is the only recoverable error in the engine's contract. It is raised
    instead of returning a null or dangling handle.

    Attributes
    ----------
    nbytes : int
        Size of the failed request in bytes.
    device : str
        String form of the device the allocation targeted.
    """

    def __init__(self, nbytes: int, device: str, detail: Optional[str] = None) -> None:
        """
        Initialize the DeviceOutOfMemoryError.

        Parameters
        ----------
        nbytes : int
            Number of bytes that could not be allocated.
        device : str
            Device identifier (e.g., "cpu", "cuda:0").
        detail : Optional[str]
            Backend-specific message appended to the error text.
        """
        msg = f"Out of device memory on '{device}' allocating {int(nbytes)} bytes"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)
        self.nbytes = int(nbytes)
        self.device = device


class DeviceNotSupportedError(RuntimeError):
    """
    Raised when an engine is requested for a device that has no registered
    execution backend.

    Attributes
    ----------
    op : str
        The operation that was attempted (e.g., "create_engine").
    device : str
        String representation of the requested device.
    """

    def __init__(self, op: str, device: str) -> None:
        super().__init__(f"{op} is not implemented for device '{device}'.")
        self.op = op
        self.device = device


class DeviceMismatchError(RuntimeError):
    """
    Raised when arrays residing on different devices meet in one operation,
    or when an array is handed to an engine bound to another device.
    """

    def __init__(self, device_a: str, device_b: str) -> None:
        super().__init__(f"Device mismatch: '{device_a}' vs '{device_b}'.")
        self.device_a = device_a
        self.device_b = device_b


class CudaRuntimeError(RuntimeError):
    """
    Raised when a CUDA runtime entry point returns a non-zero status.

    Attributes
    ----------
    symbol : str
        Name of the runtime function that failed (e.g., "cudaMemcpy").
    status : int
        Raw ``cudaError_t`` value.
    """

    def __init__(self, symbol: str, status: int, message: str = "") -> None:
        text = f"{symbol} failed with status={int(status)}"
        if message:
            text += f": {message}"
        super().__init__(text)
        self.symbol = symbol
        self.status = int(status)
