# -*- coding: utf-8 -*-
"""
CLI验证器模块
"""

from typing import List

from ..analyzer.method.presenter import SUPPORTED_OUTPUT_FORMATS


def parse_output_formats(output_format: str) -> List[str]:
    """
    解析输出格式

    Args:
        output_format: 逗号分隔的格式字符串，如 "csv,xlsx"

    Returns:
        List[str]: 格式列表

    Raises:
        ValueError: 如果格式为空、重复或不受支持
    """
    if not output_format or not output_format.strip():
        raise ValueError("输出格式不能为空")

    formats = [fmt.strip() for fmt in output_format.split(',')]
    for fmt in formats:
        if not fmt:
            raise ValueError("输出格式不能为空字符串")
        if fmt not in SUPPORTED_OUTPUT_FORMATS:
            raise ValueError(f"不支持的输出格式: {fmt}。支持的格式: {', '.join(SUPPORTED_OUTPUT_FORMATS)}")

    if len(formats) != len(set(formats)):
        raise ValueError("输出格式不能重复")

    return formats


def validate_min_percent(min_percent: float) -> float:
    """
    验证最小占比阈值

    Raises:
        ValueError: 如果不在 [0, 100] 范围内
    """
    if min_percent < 0 or min_percent > 100:
        raise ValueError(f"最小占比必须在 0 到 100 之间: {min_percent}")
    return min_percent
