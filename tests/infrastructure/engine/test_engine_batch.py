import unittest

import numpy as np

from fusedvec import EngineConfig, create_engine, flatten_column_major


def _softmax_columns(dense: np.ndarray) -> np.ndarray:
    e = np.exp(dense - dense.max(axis=0, keepdims=True))
    return e / e.sum(axis=0, keepdims=True)


class TestEngineBatch(unittest.TestCase):
    def setUp(self) -> None:
        self.eng = create_engine("cpu", EngineConfig())
        self.dense = np.random.default_rng(7).normal(size=(4, 5))
        self.m = self.eng.from_numpy(flatten_column_major(self.dense))
        self.labels = [0, 3, 1, 2, 3]

    def _dense(self, arr) -> np.ndarray:
        return self.eng.to_numpy(arr).reshape((4, 5), order="F")

    def test_batch_softmax(self) -> None:
        out = self.eng.allocate(20, np.float64)
        self.eng.batch_softmax(self.m, 4, 5, out=out)
        np.testing.assert_allclose(self._dense(out), _softmax_columns(self.dense))

    def test_batch_softmax_with_bias_row(self) -> None:
        self.eng.batch_softmax(self.m, 4, 5, has_bias=True)
        got = self._dense(self.m)
        np.testing.assert_allclose(got[:3], _softmax_columns(self.dense[:3]))
        np.testing.assert_array_equal(got[3], np.zeros(5))

    def test_batch_minus_indicator(self) -> None:
        self.eng.batch_softmax_minus_indicator(self.m, 4, 5, self.labels)
        expected = _softmax_columns(self.dense)
        expected[self.labels, np.arange(5)] -= 1.0
        np.testing.assert_allclose(self._dense(self.m), expected, atol=1e-12)

    def test_batch_log_likelihood_with_device_labels(self) -> None:
        labels = self.eng.from_numpy(np.array(self.labels, dtype=np.int32))
        per_col = self.eng.allocate(5, np.float64)
        total = self.eng.batch_softmax_at_label(self.m, 4, 5, labels, out_log_probs=per_col)
        expected = np.log(_softmax_columns(self.dense)[self.labels, np.arange(5)])
        np.testing.assert_allclose(self.eng.to_numpy(per_col), expected)
        self.assertAlmostEqual(total, float(expected.sum()))
        np.testing.assert_array_equal(self._dense(self.m), self.dense)

    def test_best_label(self) -> None:
        self.assertEqual(self.eng.best_label(self.m, 4, 5), list(self.dense.argmax(axis=0)))
        self.assertEqual(
            self.eng.best_label(self.m, 4, 5, has_bias=True),
            list(self.dense[:3].argmax(axis=0)),
        )


if __name__ == "__main__":
    unittest.main()
