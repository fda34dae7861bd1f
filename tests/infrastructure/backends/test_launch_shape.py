import unittest

from fusedvec.infrastructure.backends._launch import (
    MAX_THREADS_PER_BLOCK,
    TILE_DIM,
    kernel_dim_1d,
    transpose_grid,
)


class TestKernelDim1D(unittest.TestCase):
    def test_single_block_rounds_to_warp(self) -> None:
        self.assertEqual(kernel_dim_1d(1), (1, 32))
        self.assertEqual(kernel_dim_1d(32), (1, 32))
        self.assertEqual(kernel_dim_1d(33), (1, 64))
        self.assertEqual(kernel_dim_1d(1000), (1, 1024))
        self.assertEqual(kernel_dim_1d(1024), (1, 1024))

    def test_spill_into_full_blocks(self) -> None:
        self.assertEqual(kernel_dim_1d(1025), (2, MAX_THREADS_PER_BLOCK))
        self.assertEqual(kernel_dim_1d(4096), (4, MAX_THREADS_PER_BLOCK))
        grid, block = kernel_dim_1d(5000)
        self.assertGreaterEqual(grid * block, 5000)
        self.assertEqual(grid, 5)

    def test_non_positive(self) -> None:
        with self.assertRaises(ValueError):
            kernel_dim_1d(0)


class TestTransposeGrid(unittest.TestCase):
    def test_covers_matrix(self) -> None:
        for row, col in ((1, 1), (16, 16), (17, 3), (2, 40), (100, 33)):
            with self.subTest(row=row, col=col):
                (gx, gy), block = transpose_grid(row, col)
                self.assertEqual(block, (TILE_DIM, TILE_DIM))
                self.assertGreaterEqual(gx * TILE_DIM, row)
                self.assertGreaterEqual(gy * TILE_DIM, col)
                self.assertGreaterEqual(min(gx, gy), 1)

    def test_exact_tiles(self) -> None:
        self.assertEqual(transpose_grid(32, 48)[0], (2, 3))
        self.assertEqual(transpose_grid(33, 48)[0], (3, 3))


if __name__ == "__main__":
    unittest.main()
