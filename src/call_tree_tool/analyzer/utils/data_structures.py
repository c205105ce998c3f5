"""
数据结构定义
"""

from dataclasses import dataclass, field
from typing import List, Union

from ...models import CallEdge


class _RootCaller:
    """没有父调用的调用记录所使用的分组键"""
    __slots__ = ()

    def __repr__(self) -> str:
        return '<root>'


ROOT_CALLER = _RootCaller()


@dataclass
class EdgeGroup:
    """合并后的调用关系：同一分组键下所有 CallEdge 的指标之和"""
    key: Union[str, _RootCaller]
    call_edges: List[CallEdge] = field(default_factory=list, repr=False)
    called: int = 0
    total_time: float = 0.0
    self_time: float = 0.0
    wait_time: float = 0.0
    children_time: float = 0.0

    @property
    def is_root(self) -> bool:
        return self.key is ROOT_CALLER

    @property
    def name(self) -> str:
        return str(self.key)

    def add(self, edge: CallEdge):
        """累加一个调用记录"""
        self.call_edges.append(edge)
        self.called += edge.called
        self.total_time += edge.total_time
        self.self_time += edge.self_time
        self.wait_time += edge.wait_time
        self.children_time += edge.children_time
