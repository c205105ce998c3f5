"""
Call Tree Tool Package
"""

from .models import TraceEvent, CallEdge, CallTree
from .parser import parse_profiler_data
from .call_tree_builder import build_call_trees, CallTreeBuilder
from .analyzer import MethodSummary, EdgeGroup, ROOT_CALLER, build_method_summaries

__all__ = [
    'TraceEvent',
    'CallEdge',
    'CallTree',
    'parse_profiler_data',
    'build_call_trees',
    'CallTreeBuilder',
    'MethodSummary',
    'EdgeGroup',
    'ROOT_CALLER',
    'build_method_summaries',
]
