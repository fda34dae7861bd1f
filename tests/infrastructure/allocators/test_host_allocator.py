import unittest
from unittest import mock

import numpy as np

from fusedvec.domain import DeviceOutOfMemoryError
from fusedvec.domain.device._device import Device
from fusedvec.infrastructure._device_array import host_view
from fusedvec.infrastructure.allocators._host_allocator import HostAllocator


class TestHostAllocator(unittest.TestCase):
    def setUp(self) -> None:
        self.alloc = HostAllocator()

    def test_allocate_and_free(self) -> None:
        arr = self.alloc.allocate(np.float32, 16)
        self.assertEqual(arr.count, 16)
        self.assertEqual(arr.dtype, np.float32)
        self.assertEqual(arr.device, Device("cpu"))
        self.assertEqual(len(self.alloc), 1)
        self.alloc.free(arr)
        self.assertEqual(len(self.alloc), 0)

    def test_zero_fill(self) -> None:
        arr = self.alloc.allocate("float64", 8, zero_fill=True)
        np.testing.assert_array_equal(host_view(arr), np.zeros(8))

    def test_int32_allowed_for_allocation(self) -> None:
        arr = self.alloc.allocate(np.int32, 3, zero_fill=True)
        self.assertEqual(arr.dtype, np.int32)

    def test_invalid_requests(self) -> None:
        with self.assertRaises(ValueError):
            self.alloc.allocate(np.float32, 0)
        with self.assertRaises(TypeError):
            self.alloc.allocate(np.int64, 4)

    def test_double_free_rejected(self) -> None:
        arr = self.alloc.allocate(np.float32, 4)
        self.alloc.free(arr)
        with self.assertRaises(ValueError):
            self.alloc.free(arr)

    def test_out_of_memory_is_reported(self) -> None:
        with mock.patch(
            "fusedvec.infrastructure.allocators._host_allocator.np.empty",
            side_effect=MemoryError("no room"),
        ):
            with self.assertRaises(DeviceOutOfMemoryError) as cm:
                self.alloc.allocate(np.float64, 1 << 20)
        self.assertEqual(cm.exception.nbytes, 8 << 20)
        self.assertEqual(cm.exception.device, "cpu")

    def test_round_trip(self) -> None:
        host = np.array([[1.0, 2.0], [3.0, 4.0]], dtype=np.float32)
        arr = self.alloc.copy_host_to_device(host)
        self.assertEqual(arr.count, 4)
        np.testing.assert_array_equal(self.alloc.copy_device_to_host(arr), host.reshape(-1))

    def test_copy_into_buffer_at_offset(self) -> None:
        arr = self.alloc.copy_host_to_device(np.array([7.0, 8.0]))
        out = np.zeros((2, 3))
        res = self.alloc.copy_device_to_host(arr, out=out, offset=3)
        self.assertIs(res, out)
        np.testing.assert_array_equal(out, [[0, 0, 0], [7, 8, 0]])

    def test_download_is_a_copy(self) -> None:
        arr = self.alloc.copy_host_to_device(np.array([1.0]))
        host = self.alloc.copy_device_to_host(arr)
        host[0] = 5.0
        self.assertEqual(host_view(arr)[0], 1.0)


if __name__ == "__main__":
    unittest.main()
