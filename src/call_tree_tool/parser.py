"""
Chrome trace / PyTorch Profiler JSON 解析器
"""

import json
import gzip
import math
from pathlib import Path
from typing import Dict, List, Any, Optional, Union
import logging

from .models import TraceEvent

logger = logging.getLogger(__name__)


def _parse_event(event_data: Dict[str, Any]) -> Optional[TraceEvent]:
    """
    解析单个事件

    Args:
        event_data: 事件数据字典

    Returns:
        TraceEvent: 解析后的事件对象，如果解析失败返回 None
    """
    if not isinstance(event_data, dict):
        logger.warning(f"解析事件失败: 事件不是字典 ({type(event_data).__name__})")
        return None

    try:
        ts = float(event_data.get('ts', 0.0))
        dur = event_data.get('dur')
        dur = float(dur) if dur is not None else None
        if not math.isfinite(ts) or (dur is not None and not math.isfinite(dur)):
            raise ValueError(f"时间戳或持续时间不是有限数值: ts={ts}, dur={dur}")
        args = event_data.get('args') or {}

        return TraceEvent(
            name=str(event_data.get('name', '')),
            cat=str(event_data.get('cat', '')),
            ph=str(event_data.get('ph', '')),
            pid=event_data.get('pid', 0),
            tid=event_data.get('tid', 0),
            ts=ts,
            dur=dur,
            args=args if isinstance(args, dict) else {},
        )
    except (TypeError, ValueError) as e:
        logger.warning(f"解析事件失败: {e}")
        return None


def load_trace_events(data: Union[Dict[str, Any], List[Any]]) -> List[TraceEvent]:
    """
    从已加载的 JSON 数据中提取事件

    Args:
        data: 包含 traceEvents 的字典，或直接是事件列表

    Returns:
        List[TraceEvent]: 成功解析的事件
    """
    if isinstance(data, dict):
        raw_events = data.get('traceEvents', [])
    elif isinstance(data, list):
        raw_events = data
    else:
        raise ValueError(f"不支持的 trace 数据格式: {type(data).__name__}")

    events = []
    skipped = 0
    for raw_event in raw_events:
        event = _parse_event(raw_event)
        if event is None:
            skipped += 1
            continue
        events.append(event)

    if skipped:
        logger.warning(f"跳过 {skipped} 个无法解析的事件")
    return events


def parse_profiler_data(file_path: Union[str, Path]) -> Optional[List[TraceEvent]]:
    """
    解析 trace JSON 文件（支持 .gz 压缩）

    Args:
        file_path: JSON 文件路径

    Returns:
        Optional[List[TraceEvent]]: 事件列表，文件不存在或格式错误时返回 None
    """
    file_path = Path(file_path)
    if not file_path.exists():
        logger.error(f"文件不存在: {file_path}")
        return None

    try:
        print(f"正在解析文件: {file_path}")

        open_func = gzip.open if file_path.suffix == '.gz' else open
        with open_func(file_path, 'rt', encoding='utf-8') as f:
            data = json.load(f)

        events = load_trace_events(data)
        print(f"读取到 {len(events)} 个事件")
        return events

    except Exception as e:
        logger.error(f"解析文件出错: {e}", exc_info=True)
        return None
