"""
Test correlation IDs used to tag one pipeline run in the logs
"""

import sys
import unittest
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from permit_swap.infra.correlation import (
    CorrelationContext,
    generate_correlation_id,
    get_correlation_id,
    log_prefix,
)


class TestCorrelationContext(unittest.TestCase):

    def test_ids_unique(self):
        self.assertEqual(len(generate_correlation_id()), 12)
        self.assertNotEqual(generate_correlation_id(), generate_correlation_id())

    def test_scoped_to_context(self):
        self.assertIsNone(get_correlation_id())
        self.assertEqual(log_prefix(), "")

        with CorrelationContext("swap") as cid:
            self.assertTrue(cid.startswith("swap_"))
            self.assertEqual(get_correlation_id(), cid)
            self.assertEqual(log_prefix(), f"[{cid}] ")

        self.assertIsNone(get_correlation_id())

    def test_nested_restores_outer(self):
        with CorrelationContext("outer") as outer:
            with CorrelationContext("inner") as inner:
                self.assertEqual(get_correlation_id(), inner)
            self.assertEqual(get_correlation_id(), outer)

    def test_reset_after_exception(self):
        with self.assertRaises(RuntimeError):
            with CorrelationContext("swap"):
                raise RuntimeError("stage failed")

        self.assertIsNone(get_correlation_id())


if __name__ == "__main__":
    unittest.main()
