"""
主分析器模块 - 函数式实现
"""

import multiprocessing as mp
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union
import logging

from ..parser import parse_profiler_data
from ..call_tree_builder import build_call_trees, get_tree_statistics
from .method import build_method_summaries, present_thread_reports, MethodSummary
from .method.presenter import SUPPORTED_OUTPUT_FORMATS

logger = logging.getLogger(__name__)


def summarize_file(file_path: Union[str, Path],
                   merge_calls: bool = True) -> Optional[Dict[Tuple[int, int], List[MethodSummary]]]:
    """
    解析文件并生成每个线程的方法汇总

    Args:
        file_path: trace 文件路径
        merge_calls: 是否合并同一调用路径下的重复调用

    Returns:
        Optional[Dict[Tuple[int, int], List[MethodSummary]]]: (pid, tid) -> 方法汇总，解析失败返回 None
    """
    # 1. 解析数据
    events = parse_profiler_data(file_path)
    if events is None:
        logger.error(f"解析文件 {file_path} 失败")
        return None

    # 2. 构建调用树
    call_trees = build_call_trees(events, merge_calls=merge_calls)
    print(f"构建了 {len(call_trees)} 个调用树")
    if not call_trees:
        logger.warning(f"文件 {file_path} 中没有可用的完整事件")
    else:
        stats = get_tree_statistics(call_trees)
        print(f"调用记录总数: {stats['total_edges']}, 最大调用深度: {stats['max_depth']}")
        for tree_stats in stats['tree_sizes']:
            logger.debug(f"调用树统计: {tree_stats}")

    # 3. 方法汇总
    return {
        thread: build_method_summaries(call_tree)
        for thread, call_tree in sorted(call_trees.items())
    }


def analyze_file(file_path: Union[str, Path],
                 output_dir: str = ".",
                 label: Optional[str] = None,
                 output_formats: Sequence[str] = SUPPORTED_OUTPUT_FORMATS,
                 min_percent: float = 0.0,
                 merge_calls: bool = True,
                 print_markdown: bool = False) -> List[Path]:
    """
    分析单个文件并生成报告

    Args:
        file_path: trace 文件路径
        output_dir: 输出目录
        label: 文件标签，默认使用文件名
        output_formats: 输出格式
        min_percent: 最小占比阈值
        merge_calls: 是否合并同一调用路径下的重复调用
        print_markdown: 是否在stdout中打印markdown表格

    Returns:
        List[Path]: 生成的文件路径列表
    """
    print(f"开始处理文件: {file_path}")
    summaries_by_thread = summarize_file(file_path, merge_calls=merge_calls)
    if summaries_by_thread is None:
        return []

    # 4. 生成报告
    return present_thread_reports(
        summaries_by_thread,
        output_dir,
        label=label or Path(file_path).name.split('.')[0],
        output_formats=output_formats,
        min_percent=min_percent,
        print_markdown=print_markdown,
    )


def _process_single_file_internal(args):
    """处理单个文件的内部函数，用于并行处理"""
    file_path, kwargs = args
    try:
        return file_path, analyze_file(file_path, **kwargs)
    except Exception as e:
        logger.error(f"处理文件 {file_path} 时出错: {e}", exc_info=True)
        return file_path, None


def analyze_files(file_paths: List[str], label: Optional[str] = None,
                  max_workers: Optional[int] = None, **kwargs) -> List[Path]:
    """
    分析多个文件，每个文件独立生成报告

    Args:
        file_paths: 文件路径列表
        label: 文件标签，多个文件时作为前缀与文件名组合
        max_workers: 最大工作进程数
        **kwargs: 透传给 analyze_file 的参数

    Returns:
        List[Path]: 生成的文件路径列表
    """
    print(f"开始分析 {len(file_paths)} 个文件")

    if len(file_paths) == 1:
        _, result = _process_single_file_internal((file_paths[0], dict(kwargs, label=label)))
        return result or []

    tasks = []
    for file_path in file_paths:
        stem = Path(file_path).name.split('.')[0]
        file_label = f"{label}_{stem}" if label else stem
        tasks.append((file_path, dict(kwargs, label=file_label)))

    num_workers = max_workers or min(len(file_paths), mp.cpu_count())
    print(f"使用 {num_workers} 个进程进行并行处理")

    generated_files = []
    failed = []
    with ProcessPoolExecutor(max_workers=num_workers) as executor:
        futures = [executor.submit(_process_single_file_internal, task) for task in tasks]
        for future in as_completed(futures):
            file_path, result = future.result()
            if result is None:
                failed.append(file_path)
            else:
                generated_files.extend(result)

    if failed:
        logger.warning(f"{len(failed)} 个文件处理失败: {', '.join(failed)}")
    return sorted(generated_files)
