import unittest

import numpy as np

from fusedvec import Device, DeviceMismatchError, EngineConfig, VectorEngine, create_engine
from fusedvec.infrastructure.allocators._host_allocator import HostAllocator
from fusedvec.infrastructure.backends._host_backend import HostBackend


class _ForeignAllocator(HostAllocator):
    def __init__(self) -> None:
        super().__init__()
        self.device = Device("cuda:1")


class TestEngineMemory(unittest.TestCase):
    def setUp(self) -> None:
        self.eng = create_engine("cpu", EngineConfig())

    def test_from_numpy_dtypes(self) -> None:
        self.assertEqual(self.eng.from_numpy(np.ones(2, np.float32)).dtype, np.float32)
        self.assertEqual(self.eng.from_numpy([1, 2]).dtype, np.float64)
        self.assertEqual(self.eng.from_numpy(np.ones(2, np.int32)).dtype, np.int32)
        self.assertEqual(self.eng.from_numpy([1.5], dtype=np.float32).dtype, np.float32)

    def test_to_numpy_with_offset(self) -> None:
        x = self.eng.from_numpy([5.0, 6.0])
        out = np.zeros(4)
        self.eng.to_numpy(x, out=out, offset=1)
        np.testing.assert_array_equal(out, [0.0, 5.0, 6.0, 0.0])

    def test_views_share_memory(self) -> None:
        x = self.eng.from_numpy([1.0, 2.0, 3.0, 4.0])
        tail = self.eng.offset(x, 2)
        self.assertEqual(tail.count, 2)
        self.eng.fill(tail, 0.0)
        np.testing.assert_array_equal(self.eng.to_numpy(x), [1.0, 2.0, 0.0, 0.0])

    def test_single_elements(self) -> None:
        x = self.eng.allocate(3, np.float32, zero_fill=True)
        self.eng.set_single(x, 1, 2.5)
        self.eng.incr_single(x, 1, 0.25)
        self.assertEqual(self.eng.get_single(x, 1), np.float32(2.75))
        self.assertEqual(self.eng.get_single(x, 0), 0.0)

    def test_free(self) -> None:
        x = self.eng.allocate(8)
        live = len(self.eng.allocator)
        self.eng.free(x)
        self.assertEqual(len(self.eng.allocator), live - 1)

    def test_backend_allocator_device_mismatch(self) -> None:
        with self.assertRaises(DeviceMismatchError):
            VectorEngine(HostBackend(), _ForeignAllocator())

    def test_device_from_config(self) -> None:
        eng = create_engine(config=EngineConfig(device="cpu"))
        self.assertTrue(eng.device.is_cpu())
        with self.assertRaises(ValueError):
            create_engine("tpu")


if __name__ == "__main__":
    unittest.main()
