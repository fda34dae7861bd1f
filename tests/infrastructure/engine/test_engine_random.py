import unittest

import numpy as np

from fusedvec import EngineConfig, create_engine


class TestEngineRandom(unittest.TestCase):
    def setUp(self) -> None:
        self.eng = create_engine("cpu", EngineConfig(seed=42))

    def test_same_seed_same_numbers(self) -> None:
        other = create_engine("cpu", EngineConfig(seed=42))
        a = self.eng.allocate(100, np.float32)
        b = other.allocate(100, np.float32)
        self.eng.fill_random_normal(a)
        other.fill_random_normal(b)
        np.testing.assert_array_equal(self.eng.to_numpy(a), other.to_numpy(b))

    def test_stream_advances_and_resets(self) -> None:
        x = self.eng.allocate(50, np.float64)
        self.eng.fill_random_uniform(x)
        first = self.eng.to_numpy(x)
        self.assertEqual(self.eng.stream_position, 50)
        self.eng.fill_random_uniform(x)
        self.assertFalse(np.array_equal(first, self.eng.to_numpy(x)))
        self.eng.fill_random_normal(x)
        self.assertEqual(self.eng.stream_position, 200)

        self.eng.reset_seed()
        self.assertEqual(self.eng.seed, 42)
        self.eng.fill_random_uniform(x)
        np.testing.assert_array_equal(self.eng.to_numpy(x), first)

        self.eng.reset_seed(7)
        self.assertEqual((self.eng.seed, self.eng.stream_position), (7, 0))

    def test_uniform_range_and_mean(self) -> None:
        x = self.eng.allocate(20000, np.float64)
        self.eng.fill_random_uniform(x, -2.0, 4.0)
        v = self.eng.to_numpy(x)
        self.assertGreaterEqual(v.min(), -2.0)
        self.assertLess(v.max(), 4.0)
        self.assertAlmostEqual(float(v.mean()), 1.0, delta=0.05)

    def test_normal_moments(self) -> None:
        x = self.eng.allocate(20000, np.float32)
        self.eng.fill_random_normal(x, 3.0, 0.5)
        v = self.eng.to_numpy(x).astype(np.float64)
        self.assertAlmostEqual(float(v.mean()), 3.0, delta=0.02)
        self.assertAlmostEqual(float(v.std()), 0.5, delta=0.02)

    def test_derived_distributions(self) -> None:
        x = self.eng.allocate(20000, np.float64)
        self.eng.fill_random_lognormal(x, 0.0, 0.25)
        v = self.eng.to_numpy(x)
        self.assertTrue(np.all(v > 0.0))
        self.assertAlmostEqual(float(np.median(np.log(v))), 0.0, delta=0.02)

        self.eng.fill_random_laplacian(x, loc=1.0, scale=2.0)
        v = self.eng.to_numpy(x)
        self.assertAlmostEqual(float(np.median(v)), 1.0, delta=0.1)
        self.assertAlmostEqual(float(np.mean(np.abs(v - 1.0))), 2.0, delta=0.1)

        self.eng.fill_random_cauchy(x, loc=-1.0, scale=0.5)
        v = self.eng.to_numpy(x)
        self.assertAlmostEqual(float(np.median(v)), -1.0, delta=0.05)
        q1, q3 = np.percentile(v, [25, 75])
        self.assertAlmostEqual(float(q3 - q1), 1.0, delta=0.1)


if __name__ == "__main__":
    unittest.main()
