#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
cli.py

命令行接口模块，负责解析命令行参数、加载配置和API密钥，
并通过调度器执行唯一的一个远程操作。
"""

import os
import sys
import json
import logging
from typing import Optional, Sequence

from wcwidth import wcswidth

from . import PROGRAM_NAME, VERSION, DESCRIPTION
from .api_client import ApiContext, JsmonClient
from .config_parser import ConfigParser
from .dispatcher import Dispatcher, INVOKED, NO_ACTION
from .flags import build_flag_state
from .normalizer import resolve_api_key
from .usage import print_usage


def print_banner() -> None:
    """打印程序横幅 (按显示宽度对齐中文字符)"""
    program_text = f"{PROGRAM_NAME}  v{VERSION}"
    desc_text = DESCRIPTION

    # 框内宽度，不包括左右的 '│'
    inner_width = 41
    left_padding_str = "   "

    lines = []
    for text in (program_text, desc_text):
        # wcswidth 遇到控制字符返回-1
        width = wcswidth(text)
        if width < 0:
            width = len(text)
        padding = " " * max(0, inner_width - len(left_padding_str) - width)
        lines.append(f"    │{left_padding_str}{text}{padding}│")

    border = "─" * inner_width
    blank = " " * inner_width
    banner = "\n".join([
        "",
        f"    ┌{border}┐",
        f"    │{blank}│",
        *lines,
        f"    │{blank}│",
        f"    └{border}┘",
        "",
    ])
    # 标准输出只用于结果
    print(banner, file=sys.stderr)


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """
    设置日志记录

    参数:
        verbose: 是否启用详细日志
        log_file: 日志文件路径，为空时只输出到终端
    """
    # 清除现有的日志处理器
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    # 设置日志级别
    log_level = logging.DEBUG if verbose else logging.INFO

    # 创建控制台处理器
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))

    # 配置根日志记录器
    logging.root.setLevel(log_level)
    logging.root.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(filename=os.path.expanduser(log_file), mode="a", encoding="utf-8")
        except OSError as e:
            logging.warning(f"无法打开日志文件 {log_file}: {e}，仅输出到终端")
        else:
            file_handler.setLevel(log_level)
            file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
            logging.root.addHandler(file_handler)

    logging.debug(f"{PROGRAM_NAME} v{VERSION} 启动")
    logging.debug(f"日志级别: {'DEBUG' if verbose else 'INFO'}")


def print_result(result) -> None:
    """把操作结果以JSON格式写到标准输出"""
    if result is None:
        return
    if isinstance(result, str):
        print(result)
    else:
        print(json.dumps(result, indent=2, ensure_ascii=False))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    主程序入口点

    参数:
        argv: 命令行参数，默认使用 sys.argv[1:]

    返回:
        退出代码 (0表示已执行操作，1表示未执行任何操作)
    """
    program = os.path.basename(sys.argv[0]) or "jsmon"

    # 解析命令行参数
    flags = build_flag_state(argv, prog=program)

    print_banner()

    if flags["help"]:
        print_usage(program)
        return 1

    # 设置日志
    setup_logging(verbose=flags["verbose"])

    # 解析配置文件
    config_parser = ConfigParser()
    config = config_parser.parse_config()
    if config.get("log_file"):
        setup_logging(verbose=flags["verbose"], log_file=config["log_file"])

    # 缺少密钥时直接退出
    api_key = resolve_api_key(flags["apikey"], config_parser.load_api_key)

    client = JsmonClient(ApiContext.from_config(api_key, config))
    try:
        outcome = Dispatcher().dispatch(flags, client)
    except KeyboardInterrupt:
        logging.warning("程序被用户中断 (Ctrl+C)")
        return 1
    finally:
        client.close()

    if outcome.status == NO_ACTION:
        print("未指定任何操作。使用 -h 或 --help 查看帮助信息。", file=sys.stderr)
        print_usage(program)
        return 1

    if outcome.status == INVOKED:
        print_result(outcome.result)

    return outcome.exit_code


if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code)
