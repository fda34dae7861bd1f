"""
Unit tests for the elementwise transform dispatcher of the vector engine.
"""

from __future__ import annotations

import inspect
import unittest
from unittest import mock

import numpy as np

from fusedvec import DeviceArray, Device, DeviceMismatchError, EngineConfig, create_engine
from fusedvec.infrastructure.engine.mixins import TransformMixin
from fusedvec.infrastructure.functors import UNARY_FUNCTION_NAMES, make_functor


class TestEngineTransform(unittest.TestCase):
    def setUp(self) -> None:
        self.eng = create_engine("cpu", EngineConfig())

    def test_exp_into_new_array(self) -> None:
        x = self.eng.from_numpy(np.array([1.0, 2.0, 3.0], dtype=np.float32))
        y = self.eng.allocate(3, np.float32)
        res = self.eng.exp(x, out=y)
        self.assertEqual(res, y)
        np.testing.assert_allclose(self.eng.to_numpy(y), np.exp([1.0, 2.0, 3.0]), rtol=1e-6)
        np.testing.assert_array_equal(self.eng.to_numpy(x), [1.0, 2.0, 3.0])

    def test_affine_parameters_fused(self) -> None:
        x = self.eng.from_numpy([0.0, 0.5, 1.0])
        self.eng.sin(x, a=2.0, b=0.25, m=-3.0)
        np.testing.assert_allclose(
            self.eng.to_numpy(x), -3.0 * np.sin(2.0 * np.array([0.0, 0.5, 1.0]) + 0.25)
        )

    def test_binary_functions(self) -> None:
        x = self.eng.from_numpy([1.0, 2.0, 3.0])
        y = self.eng.allocate(3, np.float64)
        self.eng.pow(x, 2.0, out=y, b=1.0)
        np.testing.assert_allclose(self.eng.to_numpy(y), [4.0, 9.0, 16.0])
        self.eng.fmod(x, 2.0)
        np.testing.assert_allclose(self.eng.to_numpy(x), [1.0, 0.0, 1.0])

    def test_every_unary_function_has_a_method(self) -> None:
        for name in UNARY_FUNCTION_NAMES:
            with self.subTest(name=name):
                self.assertTrue(callable(getattr(self.eng, name)))

    def test_identity_in_place_does_no_traversal(self) -> None:
        x = self.eng.from_numpy([1.0, 2.0])
        with mock.patch.object(self.eng.backend, "map") as m_map, mock.patch.object(
            self.eng.backend, "copy", wraps=self.eng.backend.copy
        ) as m_copy:
            self.eng.linear(x)
        m_map.assert_not_called()
        m_copy.assert_called_once_with(x, x)
        np.testing.assert_array_equal(self.eng.to_numpy(x), [1.0, 2.0])

    def test_identity_out_of_place_is_exact_copy(self) -> None:
        values = np.array([np.pi, -1e-30, 7.0], dtype=np.float64)
        x = self.eng.from_numpy(values)
        y = self.eng.allocate(3, np.float64, zero_fill=True)
        self.eng.transform(make_functor("identity"), x, y)
        np.testing.assert_array_equal(self.eng.to_numpy(y), values)

    def test_linear(self) -> None:
        x = self.eng.from_numpy([1.0, 2.0])
        self.eng.linear(x, a=2.0, b=-1.0)
        np.testing.assert_array_equal(self.eng.to_numpy(x), [1.0, 3.0])

    def test_dot_multiply_and_fill(self) -> None:
        a = self.eng.from_numpy([1.0, 2.0, 3.0])
        b = self.eng.from_numpy([2.0, 2.0, 2.0])
        self.eng.dot_multiply(a, b, scale=0.5)
        np.testing.assert_array_equal(self.eng.to_numpy(b), [1.0, 2.0, 3.0])
        self.eng.fill(a, 4.0)
        np.testing.assert_array_equal(self.eng.to_numpy(a), [4.0, 4.0, 4.0])

    def test_copy_and_swap(self) -> None:
        a = self.eng.from_numpy([1.0, 2.0])
        b = self.eng.from_numpy([3.0, 4.0])
        self.eng.swap(a, b)
        np.testing.assert_array_equal(self.eng.to_numpy(a), [3.0, 4.0])
        np.testing.assert_array_equal(self.eng.to_numpy(b), [1.0, 2.0])
        self.eng.copy(a, b)
        np.testing.assert_array_equal(self.eng.to_numpy(b), [3.0, 4.0])

    def test_longer_out_receives_leading_elements(self) -> None:
        x = self.eng.from_numpy([0.0, 1.0, 2.0])
        y = self.eng.from_numpy([9.0, 9.0, 9.0, 9.0, 9.0])
        res = self.eng.exp(x, out=y)
        self.assertEqual(res.count, 3)
        self.assertEqual(res.ptr, y.ptr)
        got = self.eng.to_numpy(y)
        np.testing.assert_allclose(got[:3], np.exp([0.0, 1.0, 2.0]))
        np.testing.assert_array_equal(got[3:], [9.0, 9.0])

    def test_longer_out_identity_copy(self) -> None:
        x = self.eng.from_numpy([1.0, 2.0, 3.0])
        y = self.eng.from_numpy(np.full(5, -1.0))
        self.eng.linear(x, out=y)
        np.testing.assert_array_equal(self.eng.to_numpy(y), [1.0, 2.0, 3.0, -1.0, -1.0])

        z = self.eng.from_numpy(np.full(4, -1.0))
        res = self.eng.copy(x, z)
        self.assertEqual(res.count, 3)
        np.testing.assert_array_equal(self.eng.to_numpy(z), [1.0, 2.0, 3.0, -1.0])

    def test_longer_out_dot_multiply(self) -> None:
        a = self.eng.from_numpy([1.0, 2.0])
        b = self.eng.from_numpy([3.0, 4.0])
        out = self.eng.from_numpy([7.0, 7.0, 7.0, 7.0])
        self.eng.dot_multiply(a, b, out=out, scale=2.0)
        np.testing.assert_array_equal(self.eng.to_numpy(out), [6.0, 16.0, 7.0, 7.0])
        np.testing.assert_array_equal(self.eng.to_numpy(b), [3.0, 4.0])

    def test_common_functions_declared_on_class(self) -> None:
        declared = (
            "exp", "log", "sqrt", "tanh", "sigmoid",
            "square", "abs", "rectified_linear", "pow", "fmod",
        )
        for name in declared:
            with self.subTest(name=name):
                self.assertIn(name, TransformMixin.__dict__)
        params = list(inspect.signature(TransformMixin.pow).parameters)
        self.assertEqual(params, ["self", "array", "p", "out", "a", "b", "m"])
        self.assertEqual(
            list(inspect.signature(TransformMixin.cube).parameters),
            list(inspect.signature(TransformMixin.exp).parameters),
        )

    def test_int_arrays_rejected(self) -> None:
        x = self.eng.allocate(4, np.int32, zero_fill=True)
        with self.assertRaises(TypeError):
            self.eng.exp(x)

    def test_foreign_device_rejected(self) -> None:
        foreign = DeviceArray(ptr=0, count=4, dtype=np.float32, device=Device("cuda:0"))
        with self.assertRaises(DeviceMismatchError):
            self.eng.exp(foreign)


if __name__ == "__main__":
    unittest.main()
