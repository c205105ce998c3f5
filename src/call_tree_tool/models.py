# -*- coding: utf-8 -*-
"""
调用树数据模型定义
"""

import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional, Sequence, Tuple
import logging

logger = logging.getLogger(__name__)

# 浮点累加误差容忍度
TIME_TOLERANCE = 1e-6


@dataclass
class TraceEvent:
    """Trace 事件数据模型"""
    name: str
    cat: str
    ph: str
    pid: int
    tid: int
    ts: float
    dur: Optional[float] = None
    args: Dict[str, Any] = field(default_factory=dict)

    @property
    def wait_time(self) -> float:
        """获取等待时间，与 dur 同单位，缺省为 0"""
        if not self.args:
            return 0.0
        wait = self.args.get('wait', 0.0)
        try:
            wait = float(wait)
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(wait):
            return 0.0
        return max(wait, 0.0)

    @property
    def is_complete(self) -> bool:
        """判断是否为带持续时间的完整事件"""
        return self.ph == 'X' and self.dur is not None and self.dur > 0


@dataclass(eq=False)
class CallEdge:
    """
    一次调用记录：某个方法在调用树中某个位置上被调用

    parent/children 只是树内导航引用，所有 CallEdge 由所属的 CallTree 持有。
    """
    target: str
    index: int = 0
    parent: Optional['CallEdge'] = field(default=None, repr=False)
    depth: int = 0
    called: int = 1
    total_time: float = 0.0
    self_time: float = 0.0
    wait_time: float = 0.0
    children_time: float = 0.0
    children: Sequence['CallEdge'] = field(default_factory=list, repr=False)
    thread: Optional[Tuple[int, int]] = None

    @property
    def is_root(self) -> bool:
        """没有父调用即为根调用"""
        return self.parent is None


class CallTree:
    """
    单个线程的调用树

    所有 CallEdge 保存在 edges 列表中，CallEdge.index 即其在列表中的位置。
    """

    def __init__(self, thread: Optional[Tuple[int, int]] = None):
        self.thread = thread
        self.edges: List[CallEdge] = []
        self.roots: List[CallEdge] = []
        self._frozen = False

    def __len__(self) -> int:
        return len(self.edges)

    def __iter__(self):
        return iter(self.edges)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def add_edge(self, target: str, parent: Optional[CallEdge] = None, **metrics) -> CallEdge:
        """
        在树中新增一个 CallEdge

        Args:
            target: 被调用方法的标识
            parent: 父调用，None 表示根调用
            **metrics: called / total_time / self_time / wait_time / children_time

        Returns:
            CallEdge: 新建的调用记录
        """
        if self._frozen:
            raise ValueError("调用树已冻结，不能再添加调用记录")

        edge = CallEdge(
            target=target,
            index=len(self.edges),
            parent=parent,
            depth=parent.depth + 1 if parent else 0,
            thread=self.thread,
            **metrics
        )
        self.edges.append(edge)
        if parent is None:
            self.roots.append(edge)
        else:
            parent.children.append(edge)
        return edge

    def freeze(self) -> 'CallTree':
        """冻结调用树，children 转换为元组"""
        for edge in self.edges:
            edge.children = tuple(edge.children)
        self._frozen = True
        return self

    def edges_by_target(self) -> Dict[str, List[CallEdge]]:
        """按被调用方法分组所有调用记录（保持首次出现的顺序）"""
        grouped = defaultdict(list)
        for edge in self.walk():
            grouped[edge.target].append(edge)
        return dict(grouped)

    def walk(self):
        """深度优先遍历所有调用记录（先序，子节点按调用顺序）"""
        stack = list(reversed(self.roots))
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children))

    def validate(self) -> None:
        """
        校验调用树是否满足输入约定

        Raises:
            ValueError: 出现负数指标、深度不一致或 total_time != self_time + children_time
        """
        for edge in self.edges:
            if edge.depth < 0:
                raise ValueError(f"调用记录 #{edge.index} ({edge.target}) 深度为负数: {edge.depth}")
            expected_depth = edge.parent.depth + 1 if edge.parent is not None else 0
            if edge.depth != expected_depth:
                raise ValueError(
                    f"调用记录 #{edge.index} ({edge.target}) 深度不一致: {edge.depth} != {expected_depth}"
                )
            if edge.called < 0:
                raise ValueError(f"调用记录 #{edge.index} ({edge.target}) 调用次数为负数: {edge.called}")

            for metric in ('total_time', 'self_time', 'wait_time', 'children_time'):
                value = getattr(edge, metric)
                if not math.isfinite(value) or value < 0:
                    raise ValueError(f"调用记录 #{edge.index} ({edge.target}) {metric} 不是非负有限数值: {value}")

            if not math.isclose(edge.total_time, edge.self_time + edge.children_time,
                                rel_tol=1e-9, abs_tol=TIME_TOLERANCE):
                raise ValueError(
                    f"调用记录 #{edge.index} ({edge.target}) 时间不一致: "
                    f"total_time={edge.total_time} != self_time={edge.self_time} + children_time={edge.children_time}"
                )

    def get_tree_statistics(self) -> Dict[str, Any]:
        """获取调用树的统计信息"""
        max_depth = max((edge.depth for edge in self.edges), default=0)
        return {
            'thread': self.thread,
            'total_edges': len(self.edges),
            'root_edges': len(self.roots),
            'max_depth': max_depth,
            'total_time': sum(edge.total_time for edge in self.roots),
        }
