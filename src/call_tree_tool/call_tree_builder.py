"""
基于扫描线的调用树构建算法
时间复杂度: O(n log n)（排序） + O(n * d)（d 为调用深度）
"""

from dataclasses import dataclass
from typing import List, Dict, Optional, Tuple, Any
import logging
from collections import defaultdict

from .models import TraceEvent, CallTree, CallEdge

logger = logging.getLogger(__name__)


@dataclass
class EventInterval:
    """事件时间区间"""
    event: TraceEvent
    start: float  # ts
    end: float    # ts + dur
    index: int    # 原始事件索引，用于排序稳定性

    def __post_init__(self):
        """确保end >= start"""
        if self.end < self.start:
            self.end = self.start

    @property
    def duration(self) -> float:
        return self.end - self.start


class CallStackNode:
    """扫描线阶段使用的原始调用栈节点，每个事件一个"""

    def __init__(self, interval: Optional[EventInterval], parent: Optional['CallStackNode'] = None):
        self.interval = interval
        self.children: List['CallStackNode'] = []
        self.parent = parent

    @property
    def name(self) -> str:
        return self.interval.event.name if self.interval else "ROOT"

    def add_child(self, child: 'CallStackNode'):
        """添加子节点"""
        child.parent = self
        self.children.append(child)

    def contains(self, interval: EventInterval) -> bool:
        """虚拟根节点包含一切"""
        if self.interval is None:
            return True
        return self.interval.start <= interval.start and self.interval.end >= interval.end


class CallTreeBuilder:
    """基于扫描线的调用树构建器"""

    def __init__(self, merge_calls: bool = True):
        """
        Args:
            merge_calls: 是否合并同一调用路径下对同一方法的多次调用
        """
        self.logger = logger
        self.merge_calls = merge_calls

    def build_call_trees(self, events: List[TraceEvent]) -> Dict[Tuple[int, int], CallTree]:
        """
        为所有事件构建调用树

        Args:
            events: 事件列表

        Returns:
            Dict[Tuple[int, int], CallTree]: 按(pid, tid)分组的调用树
        """
        events_by_pid_tid = self._group_events_by_pid_tid(events)

        call_trees = {}
        for (pid, tid), group_events in events_by_pid_tid.items():
            self.logger.info(f"为进程 {pid} 线程 {tid} 构建调用树，事件数: {len(group_events)}")

            root = self._build_call_stack_tree(group_events)
            if root is None:
                self.logger.warning(f"进程 {pid} 线程 {tid} 没有有效的事件")
                continue

            call_tree = self._to_call_tree(root, (pid, tid))
            call_tree.validate()
            call_trees[(pid, tid)] = call_tree.freeze()

        self.logger.info(f"成功构建 {len(call_trees)} 个调用树")
        return call_trees

    def _group_events_by_pid_tid(self, events: List[TraceEvent]) -> Dict[Tuple[int, int], List[TraceEvent]]:
        """
        按pid和tid分组完整事件，过滤掉没有持续时间或pid/tid无效的事件
        """
        events_by_pid_tid = defaultdict(list)

        for event in events:
            if event is None or not event.is_complete:
                continue
            if event.pid is None or event.tid is None:
                continue

            try:
                pid = int(event.pid)
                tid = int(event.tid)
            except (ValueError, TypeError):
                continue

            events_by_pid_tid[(pid, tid)].append(event)

        self.logger.info(f"按pid/tid分组完成，共 {len(events_by_pid_tid)} 个组")
        return dict(events_by_pid_tid)

    def _build_call_stack_tree(self, events: List[TraceEvent]) -> Optional[CallStackNode]:
        """
        使用扫描线算法构建原始调用栈树

        Args:
            events: 同一线程的事件列表

        Returns:
            CallStackNode: 虚拟根节点，没有有效事件时返回 None
        """
        intervals = [
            EventInterval(event=event, start=event.ts, end=event.ts + event.dur, index=i)
            for i, event in enumerate(events)
        ]
        if not intervals:
            return None

        # 开始时间相同时，先处理更长的区间，使其成为父节点
        intervals.sort(key=lambda x: (x.start, -(x.end - x.start), x.index))

        root = CallStackNode(None)
        active_stack = [root]

        for interval in intervals:
            # 弹出所有已经结束的节点
            while len(active_stack) > 1 and active_stack[-1].interval.end <= interval.start:
                active_stack.pop()

            parent = self._find_parent_node(interval, active_stack)
            node = CallStackNode(interval)
            parent.add_child(node)
            active_stack.append(node)

        return root

    def _find_parent_node(self, interval: EventInterval, active_stack: List[CallStackNode]) -> CallStackNode:
        """从栈顶向下查找第一个包含当前区间的节点"""
        for i in range(len(active_stack) - 1, -1, -1):
            if active_stack[i].contains(interval):
                return active_stack[i]
        return active_stack[0]

    def _group_nodes(self, nodes: List[CallStackNode]) -> List[List[CallStackNode]]:
        """按方法名分组兄弟节点（保持首次出现的顺序）"""
        if not self.merge_calls:
            return [[node] for node in nodes]

        groups: Dict[str, List[CallStackNode]] = {}
        for node in nodes:
            groups.setdefault(node.name, []).append(node)
        return list(groups.values())

    def _to_call_tree(self, root: CallStackNode, thread: Tuple[int, int]) -> CallTree:
        """
        将原始调用栈树转换为 CallTree

        合并后的 CallEdge 的子调用来自组内所有节点的子节点，因此合并是递归的。
        """
        call_tree = CallTree(thread)

        pending: List[Tuple[Optional[CallEdge], List[CallStackNode]]] = [(None, root.children)]
        while pending:
            parent_edge, nodes = pending.pop()
            for group in self._group_nodes(nodes):
                edge = call_tree.add_edge(
                    group[0].name,
                    parent_edge,
                    called=len(group),
                    total_time=sum(node.interval.duration for node in group),
                    wait_time=sum(node.interval.event.wait_time for node in group),
                )
                grandchildren = [child for node in group for child in node.children]
                if grandchildren:
                    pending.append((edge, grandchildren))

        # 子调用的 index 总是大于父调用，逆序遍历即可自底向上计算
        for edge in reversed(call_tree.edges):
            children_time = sum(child.total_time for child in edge.children)
            # 兄弟区间部分重叠时子调用总和可能超过自身
            edge.children_time = min(children_time, edge.total_time)
            edge.self_time = edge.total_time - edge.children_time
            edge.wait_time = min(edge.wait_time, edge.total_time)

        return call_tree


def build_call_trees(events: List[TraceEvent], merge_calls: bool = True) -> Dict[Tuple[int, int], CallTree]:
    """
    构建调用树的便捷函数

    Args:
        events: 事件列表
        merge_calls: 是否合并同一调用路径下对同一方法的多次调用

    Returns:
        Dict[Tuple[int, int], CallTree]: 按(pid, tid)分组的调用树
    """
    builder = CallTreeBuilder(merge_calls=merge_calls)
    return builder.build_call_trees(events)


def get_tree_statistics(call_trees: Dict[Tuple[int, int], CallTree]) -> Dict[str, Any]:
    """
    获取所有调用树的统计信息
    """
    stats = {
        'total_trees': len(call_trees),
        'total_edges': 0,
        'max_depth': 0,
        'tree_sizes': []
    }

    for call_tree in call_trees.values():
        tree_stats = call_tree.get_tree_statistics()
        stats['total_edges'] += tree_stats['total_edges']
        stats['max_depth'] = max(stats['max_depth'], tree_stats['max_depth'])
        stats['tree_sizes'].append(tree_stats)

    return stats
