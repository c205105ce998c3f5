"""
调用关系聚合阶段 (纯函数实现)

将一组 CallEdge 按调用方（或被调用方）的方法标识合并为 EdgeGroup。
分组是对输入的划分：所有分组指标之和等于输入 CallEdge 指标之和。
"""

from typing import Callable, Dict, Iterable, List, Union
import logging

from ...models import CallEdge
from ..utils.data_structures import EdgeGroup, ROOT_CALLER, _RootCaller

logger = logging.getLogger(__name__)

GroupKey = Union[str, _RootCaller]


def caller_key(edge: CallEdge) -> GroupKey:
    """调用方的方法标识，根调用使用 ROOT_CALLER"""
    if edge.parent is not None:
        return edge.parent.target
    return ROOT_CALLER


def callee_key(edge: CallEdge) -> GroupKey:
    """被调用方的方法标识"""
    return edge.target


def group_edges(edges: Iterable[CallEdge], key_func: Callable[[CallEdge], GroupKey]) -> List[EdgeGroup]:
    """
    单次遍历，按 key_func 生成的键对 CallEdge 分组并累加指标

    Args:
        edges: CallEdge 序列
        key_func: 分组键函数

    Returns:
        List[EdgeGroup]: 分组结果，顺序为各键首次出现的顺序
    """
    groups: Dict[GroupKey, EdgeGroup] = {}
    for edge in edges:
        key = key_func(edge)
        group = groups.get(key)
        if group is None:
            group = groups[key] = EdgeGroup(key)
        group.add(edge)
    return list(groups.values())


def group_by_caller(edges: Iterable[CallEdge]) -> List[EdgeGroup]:
    """按调用方的方法标识分组，没有父调用的记录归入 ROOT_CALLER 分组"""
    return group_edges(edges, caller_key)


def group_by_callee(edges: Iterable[CallEdge]) -> List[EdgeGroup]:
    """按被调用的方法标识分组"""
    return group_edges(edges, callee_key)


def aggregate_parents(method) -> List[EdgeGroup]:
    """方法的调用方视图：对方法自身的所有 CallEdge 按调用方分组"""
    return group_by_caller(method.call_edges)


def aggregate_children(method) -> List[EdgeGroup]:
    """
    方法的子调用视图：对方法的所有子调用按其调用方分组

    子调用的父调用总是该方法本身，因此结果最多一个分组。
    需要按被调用方拆分时使用 group_by_callee(method.children)。
    """
    return group_by_caller(method.children)
