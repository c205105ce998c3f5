"""
数据展示阶段 (纯函数实现)

将 MethodSummary / EdgeGroup 转换为表格行，并输出 CSV、Excel 或 markdown 表格。
"""

from pathlib import Path
from typing import Dict, List, Any, Optional, Sequence
import logging

import pandas as pd

from ..utils.data_structures import EdgeGroup
from ..utils.statistics import percent_of
from .aggregator import group_by_callee
from .summary import MethodSummary, sort_methods

logger = logging.getLogger(__name__)

FLAT_COLUMNS = [
    'name', 'called', 'total_time', 'self_time', 'wait_time', 'children_time',
    'min_depth', 'is_root', 'total_percent', 'self_percent',
]

GRAPH_COLUMNS = [
    'method', 'relation', 'name', 'called', 'total_time', 'self_time',
    'wait_time', 'children_time', 'total_percent',
]

SUPPORTED_OUTPUT_FORMATS = ('csv', 'xlsx')


def thread_total_time(summaries: Sequence[MethodSummary]) -> float:
    """线程总耗时：所有根方法的 total_time 之和"""
    return sum(
        edge.total_time
        for summary in summaries
        for edge in summary.call_edges
        if edge.parent is None
    )


def _sort_groups(groups: List[EdgeGroup]) -> List[EdgeGroup]:
    """按 total_time 降序，其次按名称排序"""
    return sorted(groups, key=lambda group: (-group.total_time, group.name))


def build_flat_rows(summaries: Sequence[MethodSummary], min_percent: float = 0.0) -> List[Dict[str, Any]]:
    """
    生成平铺列表：每个方法一行，最耗时的方法在前

    Args:
        summaries: 方法汇总列表
        min_percent: total_percent 低于该值的方法不输出

    Returns:
        List[Dict[str, Any]]: 表格行
    """
    total = thread_total_time(summaries)

    rows = []
    for summary in sort_methods(summaries):
        total_percent = percent_of(summary.total_time, total)
        if total_percent < min_percent:
            continue
        rows.append({
            'name': summary.full_name,
            'called': summary.called,
            'total_time': summary.total_time,
            'self_time': summary.self_time,
            'wait_time': summary.wait_time,
            'children_time': summary.children_time,
            'min_depth': summary.min_depth,
            'is_root': summary.is_root,
            'total_percent': total_percent,
            'self_percent': percent_of(summary.self_time, total),
        })
    return rows


def _group_row(method: str, relation: str, group: EdgeGroup, total: float) -> Dict[str, Any]:
    return {
        'method': method,
        'relation': relation,
        'name': group.name,
        'called': group.called,
        'total_time': group.total_time,
        'self_time': group.self_time,
        'wait_time': group.wait_time,
        'children_time': group.children_time,
        'total_percent': percent_of(group.total_time, total),
    }


def build_graph_rows(summaries: Sequence[MethodSummary], min_percent: float = 0.0) -> List[Dict[str, Any]]:
    """
    生成调用图表格：每个方法先输出一行自身信息，再输出其调用方与被调用方分组

    Args:
        summaries: 方法汇总列表
        min_percent: total_percent 低于该值的方法不输出

    Returns:
        List[Dict[str, Any]]: 表格行
    """
    total = thread_total_time(summaries)

    rows = []
    for summary in sort_methods(summaries):
        if percent_of(summary.total_time, total) < min_percent:
            continue

        rows.append({
            'method': summary.full_name,
            'relation': 'method',
            'name': summary.full_name,
            'called': summary.called,
            'total_time': summary.total_time,
            'self_time': summary.self_time,
            'wait_time': summary.wait_time,
            'children_time': summary.children_time,
            'total_percent': percent_of(summary.total_time, total),
        })
        for group in _sort_groups(summary.aggregate_parents()):
            rows.append(_group_row(summary.full_name, 'caller', group, total))
        for group in _sort_groups(group_by_callee(summary.children)):
            rows.append(_group_row(summary.full_name, 'callee', group, total))
    return rows


def _print_markdown_table(rows: List[Dict[str, Any]], title: str):
    """在stdout中以markdown格式打印表格"""
    if not rows:
        print(f"\n## {title}\n\n无数据可显示\n")
        return

    print(f"\n## {title}\n")

    columns = list(rows[0].keys())
    print("| " + " | ".join(columns) + " |")
    print("| " + " | ".join(["---"] * len(columns)) + " |")

    for row in rows:
        values = []
        for col in columns:
            value = row.get(col, "")
            if isinstance(value, float):
                if col.endswith('_percent'):
                    values.append(f"{value:.2f}%")
                else:
                    values.append(f"{value:.2f}")
            else:
                values.append(str(value))
        print("| " + " | ".join(values) + " |")

    print()


def _generate_output_files(rows: List[Dict[str, Any]], columns: List[str], output_dir: str,
                           base_name: str, output_formats: Sequence[str]) -> List[Path]:
    """
    生成输出文件 (CSV和Excel)

    Args:
        rows: 数据行列表
        columns: 列顺序
        output_dir: 输出目录
        base_name: 基础文件名
        output_formats: 输出格式，支持 csv / xlsx

    Returns:
        List[Path]: 生成的文件路径列表
    """
    if not rows:
        logger.warning(f"没有数据可供展示: {base_name}")
        return []

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(rows, columns=columns)

    files = []
    if 'csv' in output_formats:
        csv_file = output_path / f"{base_name}.csv"
        try:
            df.to_csv(csv_file, index=False)
            files.append(csv_file)
            print(f"生成 CSV 文件: {csv_file}")
        except OSError as e:
            logger.error(f"生成 CSV 文件失败: {e}")

    if 'xlsx' in output_formats:
        excel_file = output_path / f"{base_name}.xlsx"
        try:
            df.to_excel(excel_file, index=False, engine='openpyxl')
            files.append(excel_file)
            print(f"生成 Excel 文件: {excel_file}")
        except OSError as e:
            logger.error(f"生成 Excel 文件失败: {e}")

    return files


def present_thread_reports(summaries_by_thread: Dict[Any, List[MethodSummary]],
                           output_dir: str,
                           label: Optional[str] = None,
                           output_formats: Sequence[str] = SUPPORTED_OUTPUT_FORMATS,
                           min_percent: float = 0.0,
                           print_markdown: bool = False) -> List[Path]:
    """
    为每个线程生成平铺列表和调用图报告

    Args:
        summaries_by_thread: (pid, tid) -> 方法汇总列表
        output_dir: 输出目录
        label: 文件标签
        output_formats: 输出格式
        min_percent: 最小占比阈值
        print_markdown: 是否在stdout中打印markdown表格

    Returns:
        List[Path]: 生成的文件路径列表
    """
    print("生成报告...")

    files = []
    for (pid, tid), summaries in summaries_by_thread.items():
        base_name = f"pid{pid}_tid{tid}"
        if label:
            base_name = f"{label}_{base_name}"

        flat_rows = build_flat_rows(summaries, min_percent)
        graph_rows = build_graph_rows(summaries, min_percent)
        print(f"线程 ({pid}, {tid}): {len(flat_rows)} 个方法, {len(graph_rows)} 行调用图")

        if print_markdown:
            _print_markdown_table(flat_rows, f"{base_name} 方法列表")

        files.extend(_generate_output_files(flat_rows, FLAT_COLUMNS, output_dir,
                                            f"{base_name}_flat", output_formats))
        files.extend(_generate_output_files(graph_rows, GRAPH_COLUMNS, output_dir,
                                            f"{base_name}_graph", output_formats))
    return files
