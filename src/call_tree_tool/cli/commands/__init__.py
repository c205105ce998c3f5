"""
CLI命令模块
"""

from .analysis import AnalysisCommand

__all__ = ['AnalysisCommand']
