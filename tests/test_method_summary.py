"""
MethodSummary 单元测试
"""

import math
import unittest
from concurrent.futures import ThreadPoolExecutor
from functools import cmp_to_key
from itertools import permutations

from call_tree_tool.models import CallEdge, CallTree
from call_tree_tool.analyzer.method.summary import (
    MethodSummary,
    build_method_summaries,
    sort_methods,
    UNBOUNDED_DEPTH,
)


def build_sample_tree() -> CallTree:
    tree = CallTree((1, 1))
    main = tree.add_edge("main", total_time=100.0, self_time=10.0, children_time=90.0)
    a = tree.add_edge("A", main, called=2, total_time=60.0, self_time=20.0, children_time=40.0)
    tree.add_edge("B", a, total_time=40.0, self_time=40.0)
    b = tree.add_edge("B", main, total_time=30.0, self_time=25.0, children_time=5.0, wait_time=3.0)
    tree.add_edge("C", b, total_time=5.0, self_time=5.0)
    return tree.freeze()


def make_method(name: str, total_time: float, depth: int) -> MethodSummary:
    edge = CallEdge(name, depth=depth, total_time=total_time, self_time=total_time)
    return MethodSummary(name, [edge])


class TestMethodSummaryRollup(unittest.TestCase):
    """测试方法级汇总"""

    def setUp(self):
        self.tree = build_sample_tree()
        self.summaries = {summary.full_name: summary for summary in build_method_summaries(self.tree)}

    def test_one_summary_per_method(self):
        self.assertEqual(list(self.summaries.keys()), ["main", "A", "B", "C"])

    def test_rollup_matches_edge_sums(self):
        for summary in self.summaries.values():
            for metric in ('called', 'total_time', 'self_time', 'wait_time', 'children_time'):
                expected = sum(getattr(edge, metric) for edge in summary.call_edges)
                self.assertEqual(getattr(summary, metric), expected, f"{summary.full_name}.{metric}")

    def test_method_called_from_two_call_sites(self):
        b = self.summaries["B"]
        self.assertEqual(len(b.call_edges), 2)
        self.assertEqual(b.called, 2)
        self.assertEqual(b.total_time, 70.0)
        self.assertEqual(b.self_time, 65.0)
        self.assertEqual(b.wait_time, 3.0)
        self.assertEqual(b.children_time, 5.0)
        self.assertEqual(b.min_depth, 1)
        self.assertFalse(b.is_root)
        self.assertEqual([child.target for child in b.children], ["C"])

    def test_root_method(self):
        main = self.summaries["main"]
        self.assertTrue(main.is_root)
        self.assertEqual(main.min_depth, 0)
        self.assertEqual([child.target for child in main.children], ["A", "B"])

    def test_pre_merged_call_count(self):
        self.assertEqual(self.summaries["A"].called, 2)

    def test_to_s(self):
        self.assertEqual(self.summaries["A"].to_s(), "A")
        self.assertEqual(str(self.summaries["A"]), "A")


class TestEmptyMethodSummary(unittest.TestCase):
    """测试没有调用记录的方法"""

    def setUp(self):
        self.summary = MethodSummary("empty")

    def test_zero_metrics(self):
        self.assertEqual(self.summary.called, 0)
        self.assertEqual(self.summary.total_time, 0)
        self.assertEqual(self.summary.self_time, 0)
        self.assertEqual(self.summary.wait_time, 0)
        self.assertEqual(self.summary.children_time, 0)

    def test_min_depth_is_unbounded(self):
        self.assertEqual(self.summary.min_depth, UNBOUNDED_DEPTH)
        self.assertTrue(math.isinf(self.summary.min_depth))

    def test_is_root_and_children(self):
        self.assertTrue(self.summary.is_root)
        self.assertEqual(self.summary.children, ())

    def test_empty_ranks_after_same_total_at_real_depth(self):
        other = make_method("other", 0.0, 0)
        self.assertEqual(self.summary.compare(other), -1)


class TestMemoization(unittest.TestCase):
    """测试缓存行为"""

    def setUp(self):
        self.summary = {s.full_name: s for s in build_method_summaries(build_sample_tree())}["B"]

    def test_repeated_access_returns_same_values(self):
        first = (self.summary.called, self.summary.total_time, self.summary.self_time,
                 self.summary.wait_time, self.summary.children_time, self.summary.min_depth,
                 self.summary.is_root)
        second = (self.summary.called, self.summary.total_time, self.summary.self_time,
                  self.summary.wait_time, self.summary.children_time, self.summary.min_depth,
                  self.summary.is_root)
        self.assertEqual(first, second)
        self.assertIs(self.summary.children, self.summary.children)

    def test_cached_values_are_not_recomputed(self):
        total_time = self.summary.total_time
        self.summary.call_edges = ()
        self.assertEqual(self.summary.total_time, total_time)

    def test_concurrent_first_access(self):
        summary = {s.full_name: s for s in build_method_summaries(build_sample_tree())}["main"]
        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda _: summary.children, range(32)))
        for result in results:
            self.assertIs(result, results[0])


class TestOrdering(unittest.TestCase):
    """测试方法排序规则"""

    def test_total_time_ascending(self):
        small = make_method("small", 1.0, 0)
        large = make_method("large", 2.0, 0)
        self.assertEqual(small.compare(large), -1)
        self.assertEqual(large.compare(small), 1)
        self.assertTrue(small < large)

    def test_smaller_min_depth_sorts_after(self):
        x = make_method("Foo", 10.0, 2)
        y = make_method("Foo", 10.0, 1)
        self.assertEqual(x.compare(y), -1)
        self.assertEqual(y.compare(x), 1)
        self.assertEqual(sorted([y, x]), [x, y])

    def test_name_comparison_is_negated(self):
        a = make_method("a", 5.0, 0)
        b = make_method("b", 5.0, 0)
        self.assertEqual(a.compare(b), 1)
        self.assertEqual(b.compare(a), -1)
        self.assertEqual(sorted([a, b]), [b, a])

    def test_identical_keys_compare_equal(self):
        self.assertEqual(make_method("same", 1.0, 1).compare(make_method("same", 1.0, 1)), 0)

    def test_strict_total_order(self):
        methods = [
            make_method("a", 1.0, 0),
            make_method("b", 1.0, 0),
            make_method("a", 1.0, 3),
            make_method("c", 2.0, 1),
            make_method("b", 0.5, 2),
            MethodSummary("empty"),
        ]
        for left in methods:
            for right in methods:
                self.assertEqual(left.compare(right), -right.compare(left))

        for a, b, c in permutations(methods, 3):
            if a.compare(b) < 0 and b.compare(c) < 0:
                self.assertLess(a.compare(c), 0)

        self.assertEqual(sorted(methods), sorted(methods, key=cmp_to_key(MethodSummary.compare)))

    def test_sort_methods_descending(self):
        summaries = build_method_summaries(build_sample_tree())
        self.assertEqual([s.full_name for s in sort_methods(summaries)], ["main", "B", "A", "C"])
        self.assertEqual([s.full_name for s in sort_methods(summaries, reverse=False)], ["C", "A", "B", "main"])


if __name__ == '__main__':
    unittest.main()
