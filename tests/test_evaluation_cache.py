from __future__ import annotations

import unittest

from evalbars.evaluation import Evaluation
from evalbars.EvaluationCache import DEFAULT_CACHE_CAPACITY, EvaluationCache


class EvaluationCacheTests(unittest.TestCase):
    def test_default_capacity(self) -> None:
        self.assertEqual(EvaluationCache().capacity, DEFAULT_CACHE_CAPACITY)
        self.assertEqual(DEFAULT_CACHE_CAPACITY, 100)

    def test_overflow_evicts_least_recently_used(self) -> None:
        cache = EvaluationCache(capacity=2)
        cache.put("a", Evaluation(0.1))
        cache.put("b", Evaluation(0.2))
        cache.put("c", Evaluation(0.3))

        self.assertNotIn("a", cache)
        self.assertIn("b", cache)
        self.assertIn("c", cache)
        self.assertEqual(len(cache), 2)

    def test_get_refreshes_recency(self) -> None:
        cache = EvaluationCache(capacity=2)
        first = Evaluation(0.1)
        cache.put("a", first)
        cache.put("b", Evaluation(0.2))

        self.assertIs(cache.get("a"), first)
        cache.put("c", Evaluation(0.3))

        self.assertIn("a", cache)
        self.assertNotIn("b", cache)

    def test_missing_key_returns_none(self) -> None:
        self.assertIsNone(EvaluationCache().get("missing"))

    def test_clear(self) -> None:
        cache = EvaluationCache()
        cache.put("a", Evaluation(0.1))
        cache.clear()
        self.assertEqual(len(cache), 0)

    def test_rejects_zero_capacity(self) -> None:
        with self.assertRaises(ValueError):
            EvaluationCache(capacity=0)
