#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
normalizer.py

输入规范化模块，负责把原始参数文本转换为操作所需的标准形式：
域名列表拆分、自定义请求头收集、反向搜索条件解析以及API密钥解析。
"""

import sys
import logging
from typing import Callable, List, Mapping, Tuple

from .exceptions import ApiKeyNotFoundError, MalformedFlagError

logger = logging.getLogger("normalizer")


def parse_domains(raw: str) -> List[str]:
    """
    拆分逗号分隔的域名列表

    参数:
        raw: 原始字符串 (例如: "a.com, b.com ,c.com")

    返回:
        去除空白后的域名列表，保持原有顺序，空项被丢弃
    """
    if not raw:
        return []
    return [part.strip() for part in raw.split(',') if part.strip()]


def resolve_headers(flags: Mapping[str, object]) -> List[str]:
    """
    返回按命令行顺序收集的 -H 请求头

    不校验 "Key: Value" 格式，交由请求层处理。
    """
    return list(flags.get("H") or [])


def parse_reverse_query(raw: str) -> Tuple[str, str]:
    """
    解析 field=value 形式的反向搜索条件

    只在第一个'='处拆分，因此 "domain=a=b" 得到 ("domain", "a=b")。

    参数:
        raw: 原始参数值

    返回:
        (字段, 值) 元组

    异常:
        MalformedFlagError: 缺少'='或字段/值为空
    """
    if '=' not in raw:
        raise MalformedFlagError("reverseSearchResults", f"格式无效 '{raw}'，应为 field=value")

    field, value = [part.strip() for part in raw.split('=', 1)]
    if not field or not value:
        raise MalformedFlagError("reverseSearchResults", f"字段和值都不能为空: '{raw}'")
    return field, value


def resolve_api_key(explicit: str, loader: Callable[[], str]) -> str:
    """
    解析本次运行使用的API密钥

    优先使用 -apikey 显式传入的值；否则调用 loader 读取已保存的密钥。
    两者都不可用时打印提示并以状态码1退出。

    参数:
        explicit: -apikey 参数值
        loader: 读取已保存密钥的函数

    返回:
        API密钥
    """
    explicit = (explicit or "").strip()
    if explicit:
        logger.debug("使用 -apikey 参数提供的API密钥")
        return explicit

    try:
        api_key = (loader() or "").strip()
    except ApiKeyNotFoundError as e:
        print(f"加载API密钥失败: {e}", file=sys.stderr)
        api_key = ""

    if not api_key:
        print("请使用 -apikey 参数提供API密钥。", file=sys.stderr)
        sys.exit(1)

    logger.debug("使用已保存的API密钥")
    return api_key
