import re
import unittest

from fusedvec.infrastructure.functors import (
    BINARY_FUNCTION_NAMES,
    CUDA_PREAMBLE,
    ELEMENTARY_FUNCTIONS,
    UNARY_FUNCTION_NAMES,
    get_elementary,
)


class TestElementaryRegistry(unittest.TestCase):
    def test_arity(self) -> None:
        for name in UNARY_FUNCTION_NAMES:
            self.assertEqual(get_elementary(name).arity, 1)
        for name in BINARY_FUNCTION_NAMES:
            self.assertEqual(get_elementary(name).arity, 2)
        self.assertEqual(get_elementary("infinity_guard").arity, 2)

    def test_identity_is_registered_but_not_public(self) -> None:
        self.assertIn("identity", ELEMENTARY_FUNCTIONS)
        self.assertNotIn("identity", UNARY_FUNCTION_NAMES)
        self.assertEqual(get_elementary("identity").device, "")

    def test_unknown_name(self) -> None:
        with self.assertRaises(KeyError):
            get_elementary("gamma")

    def test_preamble_defines_custom_device_functions(self) -> None:
        defined = set(re.findall(r"__forceinline__ T (fv_\w+)\(", CUDA_PREAMBLE))
        used = {f.device for f in ELEMENTARY_FUNCTIONS.values() if f.device.startswith("fv_")}
        self.assertTrue(used)
        self.assertLessEqual(used, defined)

    def test_preamble_threshold(self) -> None:
        self.assertIn("#define FV_INF_THRESHOLD 100000.0", CUDA_PREAMBLE)


if __name__ == "__main__":
    unittest.main()
