#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
exceptions.py

客户端自定义异常。
"""


class JsmonError(Exception):
    """所有客户端异常的基类"""


class MalformedFlagError(JsmonError):
    """参数值格式错误，属于可恢复错误，不会调用任何操作"""

    def __init__(self, flag: str, message: str):
        self.flag = flag
        super().__init__(f"-{flag}: {message}")


class ApiKeyNotFoundError(JsmonError):
    """未找到已保存的API密钥"""
