"""
展示阶段单元测试
"""

import io
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

import pandas as pd

from call_tree_tool.models import CallTree
from call_tree_tool.analyzer.method.summary import build_method_summaries
from call_tree_tool.analyzer.method.presenter import (
    FLAT_COLUMNS,
    build_flat_rows,
    build_graph_rows,
    present_thread_reports,
    thread_total_time,
    _print_markdown_table,
)


def build_sample_tree() -> CallTree:
    tree = CallTree((1, 1))
    main = tree.add_edge("main", total_time=100.0, self_time=10.0, children_time=90.0)
    a = tree.add_edge("A", main, called=2, total_time=60.0, self_time=20.0, children_time=40.0)
    tree.add_edge("B", a, total_time=40.0, self_time=40.0)
    b = tree.add_edge("B", main, total_time=30.0, self_time=25.0, children_time=5.0, wait_time=3.0)
    tree.add_edge("C", b, total_time=5.0, self_time=5.0)
    return tree.freeze()


class TestFlatRows(unittest.TestCase):
    """测试平铺列表"""

    def setUp(self):
        self.summaries = build_method_summaries(build_sample_tree())

    def test_thread_total_time(self):
        self.assertEqual(thread_total_time(self.summaries), 100.0)

    def test_rows_sorted_hottest_first(self):
        rows = build_flat_rows(self.summaries)
        self.assertEqual([row['name'] for row in rows], ["main", "B", "A", "C"])
        self.assertEqual(list(rows[0].keys()), FLAT_COLUMNS)

    def test_row_values(self):
        row = build_flat_rows(self.summaries)[1]
        self.assertEqual(row['called'], 2)
        self.assertEqual(row['total_time'], 70.0)
        self.assertEqual(row['self_time'], 65.0)
        self.assertEqual(row['min_depth'], 1)
        self.assertFalse(row['is_root'])
        self.assertAlmostEqual(row['total_percent'], 70.0)
        self.assertAlmostEqual(row['self_percent'], 65.0)

    def test_min_percent_filter(self):
        rows = build_flat_rows(self.summaries, min_percent=50.0)
        self.assertEqual([row['name'] for row in rows], ["main", "B", "A"])

    def test_empty_summaries(self):
        self.assertEqual(build_flat_rows([]), [])


class TestGraphRows(unittest.TestCase):
    """测试调用图表格"""

    def setUp(self):
        self.rows = build_graph_rows(build_method_summaries(build_sample_tree()))

    def rows_for(self, method):
        return [(row['relation'], row['name'], row['total_time']) for row in self.rows if row['method'] == method]

    def test_root_method_rows(self):
        self.assertEqual(self.rows_for("main"), [
            ('method', 'main', 100.0),
            ('caller', '<root>', 100.0),
            ('callee', 'A', 60.0),
            ('callee', 'B', 30.0),
        ])

    def test_method_with_two_callers(self):
        self.assertEqual(self.rows_for("B"), [
            ('method', 'B', 70.0),
            ('caller', 'A', 40.0),
            ('caller', 'main', 30.0),
            ('callee', 'C', 5.0),
        ])

    def test_methods_in_ranking_order(self):
        methods = [row['method'] for row in self.rows if row['relation'] == 'method']
        self.assertEqual(methods, ["main", "B", "A", "C"])


class TestPresentThreadReports(unittest.TestCase):
    """测试报告文件输出"""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        self.summaries_by_thread = {(1, 1): build_method_summaries(build_sample_tree())}

    def test_csv_reports(self):
        with redirect_stdout(io.StringIO()):
            files = present_thread_reports(self.summaries_by_thread, self.temp_dir.name,
                                           label="run", output_formats=['csv'])

        names = sorted(path.name for path in files)
        self.assertEqual(names, ["run_pid1_tid1_flat.csv", "run_pid1_tid1_graph.csv"])

        df = pd.read_csv(Path(self.temp_dir.name) / "run_pid1_tid1_flat.csv")
        self.assertEqual(list(df.columns), FLAT_COLUMNS)
        self.assertEqual(list(df['name']), ["main", "B", "A", "C"])

    def test_xlsx_reports(self):
        with redirect_stdout(io.StringIO()):
            files = present_thread_reports(self.summaries_by_thread, self.temp_dir.name,
                                           output_formats=['xlsx'])
        self.assertEqual(sorted(path.suffix for path in files), ['.xlsx', '.xlsx'])
        for path in files:
            self.assertTrue(path.exists())

    def test_print_markdown(self):
        output = io.StringIO()
        with redirect_stdout(output):
            present_thread_reports(self.summaries_by_thread, self.temp_dir.name,
                                   output_formats=['csv'], print_markdown=True)
        text = output.getvalue()
        self.assertIn("| name | called |", text)
        self.assertIn("| main | 1 | 100.00 |", text)

    def test_markdown_without_rows(self):
        output = io.StringIO()
        with redirect_stdout(output):
            _print_markdown_table([], "empty")
        self.assertIn("无数据可显示", output.getvalue())


if __name__ == '__main__':
    unittest.main()
