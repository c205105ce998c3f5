"""
分析命令模块
"""

import logging
import time
from pathlib import Path

from ..validators import parse_output_formats, validate_min_percent
from ..file_utils import parse_file_paths
from ...analyzer import analyze_files

logger = logging.getLogger(__name__)


class AnalysisCommand:
    """分析命令处理器"""

    def run(self, args) -> int:
        """运行单个或多个文件分析"""
        print("=== 文件分析 ===")
        print(f"文件模式: {args.file}")
        print(f"标签: {args.label if args.label else '使用文件名'}")
        print(f"合并重复调用: {not args.no_merge_calls}")
        print(f"最小占比: {args.min_percent}%")
        print(f"输出格式: {args.output_format}")
        print(f"输出目录: {args.output_dir}")
        print()

        try:
            output_formats = parse_output_formats(args.output_format)
            min_percent = validate_min_percent(args.min_percent)
        except ValueError as e:
            print(f"错误: 参数验证失败 - {e}")
            return 1

        try:
            file_paths = parse_file_paths(args.file)
        except ValueError as e:
            print(f"错误: 解析文件路径失败 - {e}")
            return 1

        print(f"找到 {len(file_paths)} 个文件:")
        for i, file_path in enumerate(file_paths[:5]):
            print(f"  {i+1}. {file_path}")
        if len(file_paths) > 5:
            print(f"  ... 还有 {len(file_paths) - 5} 个文件")

        output_dir = Path(args.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        start_time = time.time()
        try:
            generated_files = analyze_files(
                file_paths,
                label=args.label,
                max_workers=args.max_workers,
                output_dir=str(output_dir),
                output_formats=output_formats,
                min_percent=min_percent,
                merge_calls=not args.no_merge_calls,
                print_markdown=args.print_markdown,
            )
        except ValueError as e:
            logger.error(f"分析失败: {e}", exc_info=True)
            print(f"错误: {e}")
            return 1

        total_time = time.time() - start_time
        print(f"\n分析完成，总耗时: {total_time:.2f} 秒")

        if not generated_files:
            print("警告: 没有生成任何文件")
            return 1

        print("\n生成的文件:")
        for file_path in generated_files:
            print(f"  {file_path}")
        return 0
