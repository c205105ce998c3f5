"""
分析器模块
"""

from .method import (
    MethodSummary,
    build_method_summaries,
    sort_methods,
    group_by_caller,
    group_by_callee,
    aggregate_parents,
    aggregate_children,
)
from .utils import EdgeGroup, ROOT_CALLER
from .main import summarize_file, analyze_file, analyze_files

__all__ = [
    'MethodSummary',
    'build_method_summaries',
    'sort_methods',
    'group_by_caller',
    'group_by_callee',
    'aggregate_parents',
    'aggregate_children',
    'EdgeGroup',
    'ROOT_CALLER',
    'summarize_file',
    'analyze_file',
    'analyze_files',
]
