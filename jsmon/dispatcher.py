#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
dispatcher.py

调度器：根据 FlagState 从注册表中选出唯一的操作并调用。

规则:
- 按注册表声明顺序匹配，只调用第一个满足条件的操作
- 没有匹配的操作时返回 NO_ACTION，由调用方打印帮助并退出
- 参数格式错误属于可恢复错误，打印提示后返回 MALFORMED，不调用任何操作
- 操作本身的成功或失败由客户端负责报告，调度器不做解释
"""

import sys
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from .exceptions import MalformedFlagError
from .flags import set_flags
from .registry import ACTIONS, Action, FlagState

logger = logging.getLogger("dispatcher")

INVOKED = "invoked"
NO_ACTION = "no_action"
MALFORMED = "malformed"


@dataclass
class DispatchResult:
    """一次调度的结果"""

    status: str
    action: Optional[Action] = None
    result: Any = None
    error: Optional[str] = None

    @property
    def exit_code(self) -> int:
        return 0 if self.status == INVOKED else 1


class Dispatcher:
    """按顺序匹配注册表并调用第一个匹配的操作"""

    def __init__(self, actions: Sequence[Action] = ACTIONS):
        self.actions = tuple(actions)

    def select(self, flags: FlagState) -> Optional[Action]:
        """返回第一个条件成立的操作，没有则返回None"""
        for action in self.actions:
            if action.matches(flags):
                return action
        return None

    def dispatch(self, flags: FlagState, client: Any) -> DispatchResult:
        """
        选择并调用操作

        参数:
            flags: 本次运行的参数状态
            client: 提供远程操作的客户端对象

        返回:
            DispatchResult
        """
        logger.debug(f"已设置的参数: {', '.join(set_flags(flags)) or '无'}")

        action = self.select(flags)
        if action is None:
            logger.debug("没有匹配的操作")
            return DispatchResult(status=NO_ACTION)

        try:
            args = action.build_args(flags)
        except MalformedFlagError as e:
            print(f"参数错误: {e}", file=sys.stderr)
            logger.debug(f"操作 {action.name} 参数无效，已跳过")
            return DispatchResult(status=MALFORMED, action=action, error=str(e))

        logger.info(f"执行操作: {action.name}")
        operation = getattr(client, action.operation)
        result = operation(*args)
        return DispatchResult(status=INVOKED, action=action, result=result)
