#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
flags.py

命令行参数表。所有可识别的参数都在 FLAGS 中声明一次，
参数解析器和帮助信息都由这张表生成。
"""

import sys
import argparse
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from . import PROGRAM_NAME, VERSION

# 帮助信息分组
SECTION_GENERAL = "general"
SECTION_CRON = "cron"
SECTION_MORE = "more"


@dataclass(frozen=True)
class FlagSpec:
    """单个命令行参数的声明"""

    name: str
    kind: str  # str, bool, int, list
    help: str
    metavar: Optional[str] = None
    default: Any = None
    section: str = SECTION_GENERAL
    options: Tuple[str, ...] = ()

    @property
    def option_strings(self) -> Tuple[str, ...]:
        # 与Go的flag包一致，长参数同时接受一个或两个'-'
        if self.options:
            return self.options
        if len(self.name) == 1:
            return (f"-{self.name}",)
        return (f"-{self.name}", f"--{self.name}")

    @property
    def default_value(self) -> Any:
        if self.default is not None:
            return self.default
        return {"str": "", "bool": False, "int": 0, "list": ()}[self.kind]


FLAGS: Tuple[FlagSpec, ...] = (
    FlagSpec("apikey", "str", "API认证密钥", metavar="<XXXXXX-XXXX-XXXX-XXXX-XXXXXX>"),
    FlagSpec("scanFile", "str", "按文件ID扫描文件", metavar="<fileId>"),
    FlagSpec("uploadFile", "str", "上传本地文件进行扫描", metavar="<filePath>"),
    FlagSpec("uploadUrl", "str", "提交URL进行扫描", metavar="<url>"),
    FlagSpec("scanUrl", "str", "按URL或扫描ID重新扫描", metavar="<urlId>"),
    FlagSpec("urls", "bool", "查看所有URL"),
    FlagSpec("urlSize", "int", "获取的URL数量", metavar="<int>", default=10),
    FlagSpec("files", "bool", "查看已上传的文件"),
    FlagSpec("getScannerData", "bool", "获取扫描器结果"),
    FlagSpec("rescanDomain", "str", "重新扫描域名", metavar="<domain>"),
    FlagSpec("totalAnalysisData", "bool", "获取分析数据汇总"),
    FlagSpec("searchUrlsByDomain", "str", "按域名搜索URL", metavar="<domain>"),
    FlagSpec("changedUrls", "bool", "查看响应发生变化的URL"),
    FlagSpec("getEmails", "str", "获取域名关联的邮箱", metavar="<d1,d2,...>"),
    FlagSpec("getS3Domains", "str", "获取域名关联的S3存储桶", metavar="<d1,d2,...>"),
    FlagSpec("getIps", "str", "获取域名关联的IP地址", metavar="<d1,d2,...>"),
    FlagSpec("getGqlOps", "str", "获取域名的GraphQL操作", metavar="<d1,d2,...>"),
    FlagSpec("getDomainUrls", "str", "获取域名下的URL", metavar="<d1,d2,...>"),
    FlagSpec("getApiPaths", "str", "获取域名的API路径", metavar="<d1,d2,...>"),
    FlagSpec("getResultByJsmonId", "str", "按JSMon ID获取结果", metavar="<jsmonId>"),
    FlagSpec("getResultByFileId", "str", "按文件ID获取结果", metavar="<fileId>"),
    FlagSpec("reverseSearchResults", "str", "按字段反向搜索结果", metavar="<field=value>"),
    FlagSpec("scanDomain", "str", "扫描域名", metavar="<domain>"),
    FlagSpec("words", "str", "扫描域名时使用的关键词", metavar="<w1,w2,...>"),
    FlagSpec("usage", "bool", "查看账户用量"),
    FlagSpec("getAutomationData", "str", "获取域名的自动化扫描结果", metavar="<domain>"),
    FlagSpec("size", "int", "自动化结果获取数量", metavar="<int>", default=10000),
    FlagSpec("getDomains", "bool", "查看所有域名"),
    FlagSpec("cron", "str", "定时任务操作: start, stop, update",
             metavar="<start|stop|update>", section=SECTION_CRON),
    FlagSpec("notifications", "str", "定时任务通知渠道", metavar="<string>", section=SECTION_CRON),
    FlagSpec("time", "int", "定时任务执行间隔", metavar="<int64>", section=SECTION_CRON),
    FlagSpec("type", "str", "定时任务类型", metavar="<string>", section=SECTION_CRON),
    FlagSpec("H", "list", "自定义请求头，格式 'Key: Value' (可重复使用)",
             metavar="<custom header>", section=SECTION_MORE),
    FlagSpec("verbose", "bool", "详细输出模式", section=SECTION_MORE, options=("-v", "--verbose")),
    FlagSpec("help", "bool", "显示帮助信息", section=SECTION_MORE, options=("-h", "--help")),
)

FLAG_NAMES = frozenset(spec.name for spec in FLAGS)


def get_flag(name: str) -> FlagSpec:
    for spec in FLAGS:
        if spec.name == name:
            return spec
    raise KeyError(name)


class FlagParser(argparse.ArgumentParser):
    """参数解析器，错误信息输出到stderr后以状态码2退出"""

    def error(self, message):
        message = message.replace("unrecognized arguments", "无法识别的参数")
        message = message.replace("expected one argument", "缺少参数值")
        self.exit(2, f"错误: {message}\n使用 -h 或 --help 查看帮助信息\n")


def build_parser(prog: Optional[str] = None) -> FlagParser:
    """根据 FLAGS 构建参数解析器"""
    parser = FlagParser(prog=prog, add_help=False, allow_abbrev=False)

    for spec in FLAGS:
        if spec.kind == "bool":
            parser.add_argument(*spec.option_strings, dest=spec.name,
                                action="store_true", help=spec.help)
        elif spec.kind == "int":
            parser.add_argument(*spec.option_strings, dest=spec.name, type=int,
                                default=spec.default_value, metavar=spec.metavar, help=spec.help)
        elif spec.kind == "list":
            parser.add_argument(*spec.option_strings, dest=spec.name, action="append",
                                default=None, metavar=spec.metavar, help=spec.help)
        else:
            parser.add_argument(*spec.option_strings, dest=spec.name,
                                default=spec.default_value, metavar=spec.metavar, help=spec.help)

    parser.add_argument("--version", action="version", version=f"{PROGRAM_NAME} v{VERSION}")
    return parser


def build_flag_state(argv: Optional[Sequence[str]] = None,
                     prog: Optional[str] = None) -> Mapping[str, Any]:
    """
    解析命令行参数并生成只读的 FlagState

    参数:
        argv: 参数列表，默认使用 sys.argv[1:]
        prog: 程序名称

    返回:
        参数名到参数值的只读映射
    """
    parser = build_parser(prog)
    namespace = parser.parse_args(sys.argv[1:] if argv is None else list(argv))

    values = vars(namespace)
    # 可重复参数转换为元组，保证整个映射不可变
    values["H"] = tuple(values.get("H") or ())
    return MappingProxyType(values)


def set_flags(flags: Mapping[str, Any]) -> List[str]:
    """返回取值不同于默认值的参数名"""
    return [spec.name for spec in FLAGS if flags.get(spec.name, spec.default_value) != spec.default_value]
