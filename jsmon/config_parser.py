#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
config_parser.py

配置文件解析模块，负责读取和解析 ~/.jsmon/config.txt，
提供默认配置、配置验证以及已保存API密钥的读取。
"""

import os
import logging
from typing import Dict, Any, Optional

from .exceptions import ApiKeyNotFoundError

# 默认配置
DEFAULT_CONFIG = {
    "api_key": "",
    "base_url": "https://api.jsmon.sh/api/v2",
    "timeout": 30.0,
    "max_retries": 2,
    "retry_delay": 1.0,
    "log_file": "",
}

# 环境变量
ENV_CONFIG_PATH = "JSMON_CONFIG"
ENV_API_KEY = "JSMON_API_KEY"


def default_config_path() -> str:
    """配置文件路径，可通过 JSMON_CONFIG 环境变量覆盖"""
    return os.environ.get(ENV_CONFIG_PATH) or os.path.join(os.path.expanduser("~"), ".jsmon", "config.txt")


class ConfigParser:
    """配置解析器类，处理配置文件的读取和验证"""

    def __init__(self, config_path: Optional[str] = None):
        """
        初始化配置解析器

        参数:
            config_path: 配置文件路径
        """
        self.config_path = config_path or default_config_path()
        self.logger = logging.getLogger("config")
        self.config = DEFAULT_CONFIG.copy()
        self.parsed = False

    def parse_config(self) -> Dict[str, Any]:
        """
        解析配置文件

        返回:
            配置字典
        """
        if not os.path.exists(self.config_path):
            self.logger.warning(f"配置文件 {self.config_path} 不存在，将创建默认配置")
            self._create_default_config()
            self._apply_env()
            self.parsed = True
            return self.config

        try:
            self.logger.debug(f"正在读取配置文件: {self.config_path}")
            with open(self.config_path, 'r', encoding='utf-8') as f:
                for line in f:
                    line = line.strip()
                    # 跳过空行和注释
                    if not line or line.startswith('#'):
                        continue

                    # 解析键值对
                    try:
                        key, value = [part.strip() for part in line.split('=', 1)]
                        self._process_config_item(key, value)
                    except ValueError:
                        self.logger.warning(f"无法解析配置行: {line}")

        except (OSError, UnicodeDecodeError) as e:
            self.logger.error(f"读取配置文件时出错: {e}")
            self.logger.warning("使用默认配置继续")
            self.config = DEFAULT_CONFIG.copy()

        self._apply_env()
        self._validate_config()
        self.parsed = True
        return self.config

    def load_api_key(self) -> str:
        """
        读取已保存的API密钥

        返回:
            API密钥

        异常:
            ApiKeyNotFoundError: 环境变量和配置文件中都没有密钥
        """
        config = self.config if self.parsed else self.parse_config()
        api_key = config.get("api_key", "")
        if not api_key:
            raise ApiKeyNotFoundError(f"环境变量 {ENV_API_KEY} 和配置文件 {self.config_path} 中均未设置 api_key")
        return api_key

    def _process_config_item(self, key: str, value: str) -> None:
        """
        处理单个配置项

        参数:
            key: 配置键
            value: 配置值字符串
        """
        value = value.strip('"').strip("'")

        if key == "api_key":
            self.config["api_key"] = value

        elif key == "base_url":
            self.config["base_url"] = value.rstrip('/')

        elif key == "timeout":
            try:
                self.config["timeout"] = max(1.0, float(value))
            except ValueError:
                self.logger.warning(f"无效的timeout值: {value}，使用默认值: {DEFAULT_CONFIG['timeout']}")

        elif key == "max_retries":
            try:
                self.config["max_retries"] = max(0, int(value))
            except ValueError:
                self.logger.warning(f"无效的max_retries值: {value}，使用默认值: {DEFAULT_CONFIG['max_retries']}")

        elif key == "retry_delay":
            try:
                self.config["retry_delay"] = max(0.0, float(value))
            except ValueError:
                self.logger.warning(f"无效的retry_delay值: {value}，使用默认值: {DEFAULT_CONFIG['retry_delay']}")

        elif key == "log_file":
            self.config["log_file"] = value

        else:
            self.logger.warning(f"未知配置项: {key}")

    def _apply_env(self) -> None:
        """环境变量中的API密钥优先于配置文件"""
        env_key = os.environ.get(ENV_API_KEY, "").strip()
        if env_key:
            self.config["api_key"] = env_key

    def _validate_config(self) -> None:
        """验证配置是否有效"""
        base_url = self.config.get("base_url", "")
        if not base_url.startswith(("http://", "https://")):
            self.logger.warning(f"无效的base_url: {base_url}，使用默认值: {DEFAULT_CONFIG['base_url']}")
            self.config["base_url"] = DEFAULT_CONFIG["base_url"]

    def _create_default_config(self) -> None:
        """创建默认配置文件"""
        try:
            config_dir = os.path.dirname(self.config_path)
            if config_dir and not os.path.exists(config_dir):
                os.makedirs(config_dir)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                f.write("""# JSMon 命令行客户端配置文件

# API密钥，也可以通过 -apikey 参数或 JSMON_API_KEY 环境变量提供
api_key =

# API服务地址
base_url = https://api.jsmon.sh/api/v2

# 请求超时时间(秒)
timeout = 30

# 请求失败时的最大重试次数
max_retries = 2

# 重试间隔(秒)
retry_delay = 1.0

# 日志文件路径，留空则只输出到终端
log_file =
""")
            self.logger.info(f"已创建默认配置文件: {self.config_path}")
        except OSError as e:
            self.logger.error(f"创建默认配置文件失败: {e}")
