"""
分析器工具模块
"""

from .data_structures import EdgeGroup, ROOT_CALLER
from .statistics import percent_of

__all__ = ['EdgeGroup', 'ROOT_CALLER', 'percent_of']
