# -*- coding: utf-8 -*-

"""JSMon 命令行客户端"""

PROGRAM_NAME = "JSMon CLI"
VERSION = "0.3.0"
DESCRIPTION = "JSMon 安全扫描服务命令行客户端"
