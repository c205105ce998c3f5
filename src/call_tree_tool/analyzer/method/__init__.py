"""
方法汇总模块
"""

from .aggregator import (
    group_by_caller,
    group_by_callee,
    aggregate_parents,
    aggregate_children,
)
from .summary import MethodSummary, build_method_summaries, sort_methods, UNBOUNDED_DEPTH
from .presenter import build_flat_rows, build_graph_rows, present_thread_reports

__all__ = [
    'group_by_caller',
    'group_by_callee',
    'aggregate_parents',
    'aggregate_children',
    'MethodSummary',
    'build_method_summaries',
    'sort_methods',
    'UNBOUNDED_DEPTH',
    'build_flat_rows',
    'build_graph_rows',
    'present_thread_reports',
]
