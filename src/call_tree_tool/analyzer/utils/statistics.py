"""
统计相关工具
"""


def percent_of(value: float, total: float) -> float:
    """计算占比（百分数），total 为 0 时返回 0"""
    if total <= 0:
        return 0.0
    return value / total * 100

