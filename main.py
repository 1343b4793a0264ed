#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
main.py

JSMon 命令行客户端的主程序入口点。
未安装时可直接运行: python main.py -usage
"""

import sys
import os

# 添加当前目录到Python路径，确保能够导入项目模块
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from jsmon.cli import main

if __name__ == "__main__":
    # 调用命令行接口的主函数并传递退出代码
    sys.exit(main())
