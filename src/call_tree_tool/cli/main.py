"""
CLI主模块
"""

import argparse
import logging
import sys
from typing import List, Optional

from .commands import AnalysisCommand


def build_parser() -> argparse.ArgumentParser:
    """构建命令行参数解析器"""
    parser = argparse.ArgumentParser(
        description="Call Tree Tool - 按方法汇总 trace JSON 文件中的调用树",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例用法:
  # 分析单个文件，输出 CSV 和 Excel
  call-tree-tool analysis trace.json --label baseline

  # 只输出 CSV，并隐藏占比低于 1% 的方法
  call-tree-tool analysis trace.json --output-format csv --min-percent 1

  # 在stdout中打印markdown表格
  call-tree-tool analysis trace.json --print-markdown

  # 每次调用单独记录，不合并同一调用路径下的重复调用
  call-tree-tool analysis trace.json --no-merge-calls

  # 分析目录或 glob 匹配的多个文件（每个文件独立生成报告）
  call-tree-tool analysis "traces/*.json" --output-dir reports
        """
    )
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='日志级别 (默认: WARNING)')

    subparsers = parser.add_subparsers(dest='command', help='可用命令')

    analysis_parser = subparsers.add_parser('analysis', help='分析单个或多个 trace JSON 文件')
    analysis_parser.add_argument('file', help='要分析的文件路径，支持目录和 glob 模式 (如: "dir/*.json")')
    analysis_parser.add_argument('--label', default=None, help='文件标签 (默认: 文件名)')
    analysis_parser.add_argument('--output-format', default='csv,xlsx',
                                 choices=['csv', 'xlsx', 'csv,xlsx'],
                                 help='输出格式 (默认: csv,xlsx)')
    analysis_parser.add_argument('--output-dir', default='.', help='输出目录 (默认: 当前目录)')
    analysis_parser.add_argument('--min-percent', type=float, default=0.0,
                                 help='隐藏总耗时占比低于该值的方法 (默认: 0)')
    analysis_parser.add_argument('--no-merge-calls', action='store_true',
                                 help='不合并同一调用路径下对同一方法的重复调用 (默认: 合并)')
    analysis_parser.add_argument('--print-markdown', action='store_true',
                                 help='是否在stdout中以markdown格式打印方法列表 (默认: False)')
    analysis_parser.add_argument('--max-workers', type=int, default=None,
                                 help='并行处理的最大工作进程数，默认为CPU核心数')

    return parser


def parse_arguments(argv: Optional[List[str]] = None):
    """解析命令行参数"""
    return build_parser().parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """主函数"""
    args = parse_arguments(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if not args.command:
        print("错误: 请指定命令 (analysis)")
        print("使用 --help 查看帮助信息")
        return 1

    if args.command == 'analysis':
        command = AnalysisCommand()
        return command.run(args)

    print(f"错误: 未知命令: {args.command}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
