#!/usr/bin/env python3
"""
导出保存命令的执行结果为 CSV

每条结果的 output 按行拆分，一行输出一条记录:
    SYSTEM ID, USERNAME, JUMPCLOUD USERNAME, COMMAND REQUEST TIME

示例:
    python export_command_results_csv.py -key $KEY -commandid 5a1b... -out users.csv
"""
import argparse
import csv
import logging
import os
import sys
from pathlib import Path
from typing import TextIO

from jcapi import JCAPIClient, JCAPIError, JCCommandResult
from jcapi.config import get_logger, resolve_settings

CSV_HEADER = ["SYSTEM ID", "USERNAME", "JUMPCLOUD USERNAME", "COMMAND REQUEST TIME"]


def resolve_output_path(outfile: str) -> Path:
    """转为绝对路径，文件已存在则拒绝"""
    path = Path(os.path.abspath(outfile))
    if path.exists():
        raise FileExistsError(f"Output already exists: {path}")
    return path


def write_results_to_csv(results: list[JCCommandResult], stream: TextIO) -> int:
    """
    写入 CSV，表头和每条结果写完后都会 flush

    Returns:
        写入的数据行数 (不含表头)
    """
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    stream.flush()

    rows = 0
    for result in results:
        for line in result.output_lines():
            writer.writerow([result.system, line, "", result.request_time])
            rows += 1
        stream.flush()
    return rows


def fatal(logger: logging.Logger, message: str) -> int:
    logger.critical(message)
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='export_command_results_csv',
        description='Export JumpCloud saved command results to CSV',
    )
    parser.add_argument('-key', default=None, help='Your JumpCloud Administrator API Key')
    parser.add_argument('-commandid', default='', help='The id of the saved command')
    parser.add_argument('-out', default='', help='File path for CSV output (default: stdout)')
    parser.add_argument('-url', default=None, help='Alternative JumpCloud API URL (optional)')
    parser.add_argument('-debug', action='store_true', help='Log API requests')
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = get_logger("export_command_results_csv", debug=args.debug)

    try:
        api_key, url = resolve_settings(args.key, args.url)
    except (OSError, ValueError) as e:
        return fatal(logger, f"Could not read configuration: {e}")

    if not api_key:
        return fatal(logger, "API key must be provided.")
    if not args.commandid:
        return fatal(logger, "Command id must be provided")

    path = None
    if args.out:
        try:
            path = resolve_output_path(args.out)
        except FileExistsError as e:
            return fatal(logger, f"Problem with the outfile: {e}")
        except (OSError, ValueError):
            return fatal(logger, "Entered an incorrect file path for CSV output")

    client = JCAPIClient(api_key, url)
    try:
        results = client.get_command_results_by_saved_command_id(args.commandid)
    except JCAPIError as e:
        return fatal(logger, str(e))
    logger.debug("Fetched %d command results for %s", len(results), args.commandid)

    try:
        if path is None:
            rows = write_results_to_csv(results, sys.stdout)
        else:
            # "x" 模式: 检查之后文件被创建也不会覆盖
            with open(path, 'x', newline='', encoding='utf-8') as f:
                rows = write_results_to_csv(results, f)
    except FileExistsError as e:
        return fatal(logger, f"Problem with the outfile: Output already exists: {e.filename}")
    except OSError as e:
        return fatal(logger, f"Error writing to csv: {e}")

    if path is not None:
        logger.info("Wrote %d rows to %s", rows, path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
