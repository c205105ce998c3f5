"""
方法级汇总

MethodSummary 汇总整个调用树中指向同一方法的所有 CallEdge，
并定义报告中方法的排序规则。
"""

import math
import threading
from typing import Any, Callable, Dict, List, Sequence, Tuple
import logging

from ...models import CallEdge, CallTree
from ..utils.data_structures import EdgeGroup
from .aggregator import aggregate_parents, aggregate_children

logger = logging.getLogger(__name__)

# call_edges 为空时的最小深度
UNBOUNDED_DEPTH = math.inf


class MethodSummary:
    """单个方法在整个运行过程中的汇总统计"""

    # 排序规则：(字段, 方向)，方向 1 为升序，-1 为降序，依次比较
    ORDERING: Tuple[Tuple[str, int], ...] = (
        ('total_time', 1),
        ('min_depth', -1),
        ('full_name', -1),
    )

    def __init__(self, full_name: str, call_edges: Sequence[CallEdge] = ()):
        self.full_name = full_name
        self.call_edges: Tuple[CallEdge, ...] = tuple(call_edges)
        self._cache: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"MethodSummary({self.full_name!r}, edges={len(self.call_edges)})"

    def __str__(self) -> str:
        return self.full_name

    def to_s(self) -> str:
        return self.full_name

    def _memoize(self, name: str, compute: Callable[[], Any]) -> Any:
        """首次访问时计算并缓存，之后直接返回缓存值（多线程下只计算一次）"""
        try:
            return self._cache[name]
        except KeyError:
            pass
        with self._lock:
            if name not in self._cache:
                self._cache[name] = compute()
            return self._cache[name]

    def _sum(self, metric: str):
        return sum(getattr(edge, metric) for edge in self.call_edges)

    @property
    def called(self) -> int:
        return self._memoize('called', lambda: self._sum('called'))

    @property
    def total_time(self) -> float:
        return self._memoize('total_time', lambda: self._sum('total_time'))

    @property
    def self_time(self) -> float:
        return self._memoize('self_time', lambda: self._sum('self_time'))

    @property
    def wait_time(self) -> float:
        return self._memoize('wait_time', lambda: self._sum('wait_time'))

    @property
    def children_time(self) -> float:
        return self._memoize('children_time', lambda: self._sum('children_time'))

    @property
    def min_depth(self):
        """所有调用记录中的最小深度，没有调用记录时为 UNBOUNDED_DEPTH"""
        return self._memoize(
            'min_depth',
            lambda: min((edge.depth for edge in self.call_edges), default=UNBOUNDED_DEPTH)
        )

    @property
    def is_root(self) -> bool:
        """所有调用记录都没有父调用"""
        return self._memoize('is_root', lambda: all(edge.parent is None for edge in self.call_edges))

    @property
    def children(self) -> Tuple[CallEdge, ...]:
        """该方法在所有调用位置直接发起的全部子调用"""
        return self._memoize(
            'children',
            lambda: tuple(child for edge in self.call_edges for child in edge.children)
        )

    def compare(self, other: 'MethodSummary') -> int:
        """
        比较两个方法，返回 -1 / 0 / 1

        1. total_time 升序
        2. min_depth 较小者排在后面
        3. full_name 字典序取反
        """
        for attr, direction in self.ORDERING:
            result = _compare_values(getattr(self, attr), getattr(other, attr))
            if result:
                return result * direction
        return 0

    def __lt__(self, other: 'MethodSummary') -> bool:
        if not isinstance(other, MethodSummary):
            return NotImplemented
        return self.compare(other) < 0

    def __gt__(self, other: 'MethodSummary') -> bool:
        if not isinstance(other, MethodSummary):
            return NotImplemented
        return self.compare(other) > 0

    def aggregate_parents(self) -> List[EdgeGroup]:
        return aggregate_parents(self)

    def aggregate_children(self) -> List[EdgeGroup]:
        return aggregate_children(self)


def _compare_values(left, right) -> int:
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def build_method_summaries(call_tree: CallTree) -> List[MethodSummary]:
    """
    为调用树中的每个不同方法创建 MethodSummary

    Args:
        call_tree: 已完成的调用树

    Returns:
        List[MethodSummary]: 按方法首次出现的顺序排列
    """
    summaries = [
        MethodSummary(target, edges)
        for target, edges in call_tree.edges_by_target().items()
    ]
    logger.info(f"线程 {call_tree.thread} 汇总得到 {len(summaries)} 个方法")
    return summaries


def sort_methods(summaries: Sequence[MethodSummary], reverse: bool = True) -> List[MethodSummary]:
    """按 MethodSummary.compare 排序，默认降序（最耗时的方法在前）"""
    return sorted(summaries, reverse=reverse)
