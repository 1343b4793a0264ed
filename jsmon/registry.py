#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
registry.py

操作注册表：按顺序声明每个参数组合对应的操作，以及调用前需要的规范化参数。
调度器自上而下匹配，第一个满足条件的操作生效。
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Tuple

from .exceptions import MalformedFlagError
from .normalizer import parse_domains, parse_reverse_query, resolve_headers

FlagState = Mapping[str, Any]
Predicate = Callable[[FlagState], bool]
ArgBuilder = Callable[[FlagState], Any]


@dataclass(frozen=True)
class Action:
    """一个可调用的远程操作"""

    name: str
    predicate: Predicate
    operation: str  # JsmonClient 上的方法名
    args: Tuple[ArgBuilder, ...] = ()

    def matches(self, flags: FlagState) -> bool:
        return self.predicate(flags)

    def build_args(self, flags: FlagState) -> Tuple[Any, ...]:
        """按声明顺序生成规范化后的参数，格式错误时抛出 MalformedFlagError"""
        return tuple(builder(flags) for builder in self.args)


# ---- 条件 ----

def is_set(name: str) -> Predicate:
    """参数为非空字符串或True时成立"""
    def predicate(flags: FlagState) -> bool:
        value = flags.get(name)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value != ""
        return False
    return predicate


# ---- 参数构建 ----

def raw(name: str) -> ArgBuilder:
    return lambda flags: flags[name]


def trimmed(name: str) -> ArgBuilder:
    """去除首尾空白，结果为空时视为格式错误"""
    def builder(flags: FlagState) -> str:
        value = flags[name].strip()
        if not value:
            raise MalformedFlagError(name, "参数值不能为空")
        return value
    return builder


def domains(name: str) -> ArgBuilder:
    return lambda flags: parse_domains(flags[name])


def domain_list(name: str) -> ArgBuilder:
    """列表操作至少需要一个域名"""
    def builder(flags: FlagState) -> list:
        parsed = parse_domains(flags[name])
        if not parsed:
            raise MalformedFlagError(name, f"域名列表为空: '{flags[name]}'")
        return parsed
    return builder


def headers() -> ArgBuilder:
    return resolve_headers


def reverse_query(name: str) -> ArgBuilder:
    return lambda flags: parse_reverse_query(flags[name])


CRON_OPERATIONS = {
    "start": "start_cron",
    "stop": "stop_cron",
    "update": "update_cron",
}


def cron_args(flags: FlagState) -> Tuple[str, str, int, str]:
    """解析定时任务参数，返回 (模式, 通知渠道, 时间, 类型)"""
    mode = flags["cron"].strip().lower()
    if mode not in CRON_OPERATIONS:
        raise MalformedFlagError("cron", f"未知的定时任务操作 '{flags['cron']}'，可选值: start, stop, update")
    return mode, flags["notifications"].strip(), flags["time"], flags["type"].strip()


def _list_action(flag: str, operation: str) -> Action:
    return Action(flag, is_set(flag), operation, (domain_list(flag),))


# 匹配顺序即声明顺序，不要随意调整
ACTIONS: Tuple[Action, ...] = (
    Action("scanFile", is_set("scanFile"), "scan_file", (raw("scanFile"),)),
    Action("uploadFile", is_set("uploadFile"), "upload_file", (raw("uploadFile"), headers())),
    Action("uploadUrl", is_set("uploadUrl"), "upload_url", (raw("uploadUrl"), headers())),
    Action("scanUrl", is_set("scanUrl"), "rescan_url", (trimmed("scanUrl"),)),
    Action("urls", is_set("urls"), "view_urls", (raw("urlSize"),)),
    Action("files", is_set("files"), "view_files"),
    Action("getScannerData", is_set("getScannerData"), "get_scanner_data"),
    Action("rescanDomain", is_set("rescanDomain"), "rescan_domain", (trimmed("rescanDomain"),)),
    Action("totalAnalysisData", is_set("totalAnalysisData"), "total_analysis_data"),
    Action("searchUrlsByDomain", is_set("searchUrlsByDomain"), "search_urls_by_domain",
           (trimmed("searchUrlsByDomain"),)),
    Action("changedUrls", is_set("changedUrls"), "changed_urls"),
    _list_action("getEmails", "get_emails"),
    _list_action("getS3Domains", "get_s3_domains"),
    _list_action("getIps", "get_ips"),
    _list_action("getGqlOps", "get_gql_ops"),
    _list_action("getDomainUrls", "get_domain_urls"),
    _list_action("getApiPaths", "get_api_paths"),
    Action("getResultByJsmonId", is_set("getResultByJsmonId"), "get_result_by_jsmon_id",
           (trimmed("getResultByJsmonId"),)),
    Action("getResultByFileId", is_set("getResultByFileId"), "get_result_by_file_id",
           (trimmed("getResultByFileId"),)),
    Action("reverseSearchResults", is_set("reverseSearchResults"), "reverse_search_results",
           (reverse_query("reverseSearchResults"),)),
    Action("scanDomain", is_set("scanDomain"), "scan_domain", (trimmed("scanDomain"), domains("words"))),
    Action("usage", is_set("usage"), "get_usage"),
    Action("getAutomationData", is_set("getAutomationData"), "get_automation_data",
           (trimmed("getAutomationData"), raw("size"))),
    Action("getDomains", is_set("getDomains"), "get_domains"),
    Action("cron", is_set("cron"), "cron", (cron_args,)),
)


def recognized_flags() -> Tuple[str, ...]:
    """注册表中作为触发条件的参数名"""
    return tuple(action.name for action in ACTIONS)
