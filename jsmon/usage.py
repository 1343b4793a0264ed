#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
usage.py

帮助信息输出，按分组列出 FLAGS 中的全部参数。
"""

import sys
from typing import List, Optional, TextIO

from .flags import FLAGS, SECTION_CRON, SECTION_GENERAL, SECTION_MORE, FlagSpec

SECTION_TITLES = (
    (SECTION_GENERAL, "Flags:"),
    (SECTION_CRON, "CRON JOB FLAGS:"),
    (SECTION_MORE, "MORE OPTIONS:"),
)

# 参数列宽度
OPTION_WIDTH = 44


def _format_flag(spec: FlagSpec) -> str:
    option = ", ".join(spec.options) if spec.options else f"-{spec.name}"
    if spec.metavar:
        option = f"{option} {spec.metavar}"

    text = spec.help
    if spec.kind == "int" and spec.default_value:
        text = f"{text} (默认 {spec.default_value})"

    if len(option) >= OPTION_WIDTH - 2:
        return f"  {option}\n  {'':<{OPTION_WIDTH}}{text}"
    return f"  {option:<{OPTION_WIDTH}}{text}"


def render_usage(program: str) -> str:
    """生成帮助文本"""
    lines: List[str] = [f"Usage of {program}:", "  [flags]", ""]

    for section, title in SECTION_TITLES:
        if section != SECTION_GENERAL:
            lines.append("")
        lines.append(title)
        lines.extend(_format_flag(spec) for spec in FLAGS if spec.section == section)

    lines.append("")
    lines.append("  --version" + " " * (OPTION_WIDTH - len("--version")) + "显示版本信息")
    return "\n".join(lines) + "\n"


def print_usage(program: str, stream: Optional[TextIO] = None) -> None:
    """把帮助信息写入诊断输出流"""
    (stream or sys.stderr).write(render_usage(program))
