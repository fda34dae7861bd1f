import unittest

from fusedvec.domain import (
    CudaRuntimeError,
    DeviceAllocator,
    DeviceMismatchError,
    DeviceNotSupportedError,
    DeviceOutOfMemoryError,
    ExecutionBackend,
)
from fusedvec.infrastructure.allocators._host_allocator import HostAllocator
from fusedvec.infrastructure.backends._host_backend import HostBackend


class TestErrors(unittest.TestCase):
    def test_out_of_memory_is_memory_error(self) -> None:
        e = DeviceOutOfMemoryError(1024, "cuda:0", "out of memory")
        self.assertIsInstance(e, MemoryError)
        self.assertEqual(e.nbytes, 1024)
        self.assertEqual(e.device, "cuda:0")
        self.assertIn("1024", str(e))
        self.assertIn("out of memory", str(e))

    def test_not_supported(self) -> None:
        e = DeviceNotSupportedError("create_engine", "tpu")
        self.assertIsInstance(e, RuntimeError)
        self.assertEqual(e.op, "create_engine")
        self.assertIn("tpu", str(e))

    def test_mismatch(self) -> None:
        e = DeviceMismatchError("cpu", "cuda:0")
        self.assertEqual((e.device_a, e.device_b), ("cpu", "cuda:0"))

    def test_cuda_runtime_error_message(self) -> None:
        e = CudaRuntimeError("cudaMemcpy", 1, "invalid argument")
        self.assertEqual(e.status, 1)
        self.assertEqual(e.symbol, "cudaMemcpy")
        self.assertEqual(str(e), "cudaMemcpy failed with status=1: invalid argument")


class TestContracts(unittest.TestCase):
    def test_host_implementations_satisfy_protocols(self) -> None:
        self.assertIsInstance(HostBackend(), ExecutionBackend)
        self.assertIsInstance(HostAllocator(), DeviceAllocator)


if __name__ == "__main__":
    unittest.main()
