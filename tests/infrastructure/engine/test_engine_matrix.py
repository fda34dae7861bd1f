import unittest

import numpy as np

from fusedvec import EngineConfig, create_engine, deflatten_column_major, flatten_column_major


class TestEngineMatrix(unittest.TestCase):
    def setUp(self) -> None:
        self.eng = create_engine("cpu", EngineConfig())
        self.dense = np.arange(15.0).reshape(5, 3)
        self.m = self.eng.from_numpy(flatten_column_major(self.dense))

    def _dense(self, arr, row):
        return deflatten_column_major(self.eng.to_numpy(arr), row)

    def test_fill_row(self) -> None:
        self.eng.fill_row(self.m, 5, 3, 1, -1.0)
        expected = self.dense.copy()
        expected[1, :] = -1.0
        np.testing.assert_array_equal(self._dense(self.m, 5), expected)

    def test_negative_row_index(self) -> None:
        a = self.eng.from_numpy(flatten_column_major(self.dense))
        self.eng.fill_row(self.m, 5, 3, -1, 9.0)
        self.eng.fill_row(a, 5, 3, 4, 9.0)
        np.testing.assert_array_equal(self.eng.to_numpy(self.m), self.eng.to_numpy(a))

    def test_fill_column(self) -> None:
        self.eng.fill_column(self.m, 5, 3, -1, 0.0)
        expected = self.dense.copy()
        expected[:, 2] = 0.0
        np.testing.assert_array_equal(self._dense(self.m, 5), expected)

    def test_transpose_small(self) -> None:
        # [[1, 2], [3, 4]] stored column-major
        m = self.eng.from_numpy([1.0, 3.0, 2.0, 4.0])
        t = self.eng.transpose(m, 2, 2)
        np.testing.assert_array_equal(self.eng.to_numpy(t), [1.0, 2.0, 3.0, 4.0])

    def test_transpose_rectangular_round_trip(self) -> None:
        dense = np.random.default_rng(3).normal(size=(37, 21)).astype(np.float32)
        m = self.eng.from_numpy(flatten_column_major(dense))
        t = self.eng.allocate(37 * 21, np.float32)
        self.eng.transpose(m, 37, 21, out=t)
        np.testing.assert_array_equal(self._dense(t, 21), dense.T)
        back = self.eng.transpose(t, 21, 37)
        np.testing.assert_array_equal(self.eng.to_numpy(back), self.eng.to_numpy(m))

    def test_transpose_in_place(self) -> None:
        live = len(self.eng.allocator)
        self.eng.transpose(self.m, 5, 3, out=self.m)
        np.testing.assert_array_equal(self._dense(self.m, 3), self.dense.T)
        self.assertEqual(len(self.eng.allocator), live)


if __name__ == "__main__":
    unittest.main()
