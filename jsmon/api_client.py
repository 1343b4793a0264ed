#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
api_client.py

JSMon API 客户端，每个远程操作对应一个方法。
请求失败(超时、连接错误、429、5xx)时按配置重试，
最终失败只记录日志并返回None，不向调用方抛出。
"""

import os
import time
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

import requests

from . import PROGRAM_NAME, VERSION

# 配置日志
logger = logging.getLogger("api_client")

AUTH_HEADER = "X-Jsmon-Key"

# 需要重试的HTTP状态码
RETRY_STATUS_CODES = {429, 500, 502, 503, 504}

# API路径
ENDPOINTS = {
    "scan_file": "/scanFile/{file_id}",
    "upload_file": "/uploadFile",
    "upload_url": "/uploadUrl",
    "rescan_url": "/scanUrl/{url_id}",
    "view_urls": "/searchAllUrls",
    "view_files": "/viewFiles",
    "scanner_data": "/getScannerResults",
    "rescan_domain": "/rescanDomain/{domain}",
    "total_analysis": "/getTotalCountAnalysisData",
    "urls_by_domain": "/searchUrlsByDomain",
    "changed_urls": "/urlsmultipleResponse",
    "emails": "/getAllEmails",
    "s3_domains": "/getS3Domains",
    "ips": "/getAllIps",
    "gql_ops": "/getGqlOps",
    "domain_urls": "/getDomainUrls",
    "api_paths": "/getApiPaths",
    "result_by_jsmon_id": "/getResultByJsmonId/{jsmon_id}",
    "result_by_file_id": "/getResultByFileId/{file_id}",
    "reverse_search": "/reverseSearchResults",
    "scan_domain": "/scanDomain",
    "usage": "/usage",
    "automation": "/getAllAutomationResults",
    "domains": "/getDomains",
    "start_cron": "/startCron",
    "stop_cron": "/stopCron",
    "update_cron": "/updateCron",
}


@dataclass(frozen=True)
class ApiContext:
    """本次运行的凭据和连接设置，启动时创建一次，之后只读"""

    api_key: str
    base_url: str = "https://api.jsmon.sh/api/v2"
    timeout: float = 30.0
    max_retries: int = 2
    retry_delay: float = 1.0

    @classmethod
    def from_config(cls, api_key: str, config: Dict[str, Any]) -> "ApiContext":
        return cls(
            api_key=api_key,
            base_url=config.get("base_url", cls.base_url).rstrip('/'),
            timeout=config.get("timeout", cls.timeout),
            max_retries=config.get("max_retries", cls.max_retries),
            retry_delay=config.get("retry_delay", cls.retry_delay),
        )


class JsmonClient:
    """JSMon API 客户端"""

    def __init__(self, context: ApiContext, session: Optional[requests.Session] = None):
        """
        初始化客户端

        参数:
            context: 凭据和连接设置
            session: 可选的会话对象，默认新建
        """
        self.context = context

        # 会话对象，用于保持连接
        self.session = session or requests.Session()
        self.session.headers.update({
            AUTH_HEADER: context.api_key,
            'User-Agent': f'{PROGRAM_NAME}/{VERSION}',
            'Accept': 'application/json',
        })

        logger.debug(f"API客户端初始化完成，服务地址: {context.base_url}")

    def _url(self, endpoint: str, **path_params: str) -> str:
        path = ENDPOINTS[endpoint].format(**{k: quote(str(v), safe='') for k, v in path_params.items()})
        return f"{self.context.base_url}{path}"

    def _request(self, method: str, url: str, **kwargs) -> Optional[Any]:
        """
        发送请求并解析JSON响应

        参数:
            method: HTTP方法
            url: 完整URL
            kwargs: 传给 requests 的其他参数

        返回:
            解析后的响应内容，失败时返回None
        """
        attempts = self.context.max_retries + 1

        for attempt in range(1, attempts + 1):
            try:
                logger.debug(f"发送{method}请求到: {url}")
                response = self.session.request(method, url, timeout=self.context.timeout, **kwargs)

            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
                if attempt < attempts:
                    logger.warning(f"请求{url}失败: {e}，正在重试 ({attempt}/{self.context.max_retries})...")
                    time.sleep(self.context.retry_delay)
                    continue
                logger.error(f"请求{url}失败: {e}")
                return None

            except requests.exceptions.RequestException as e:
                logger.error(f"请求异常: {e}")
                return None

            if response.status_code in RETRY_STATUS_CODES and attempt < attempts:
                logger.warning(f"服务器返回 {response.status_code}，正在重试 ({attempt}/{self.context.max_retries})...")
                time.sleep(self.context.retry_delay)
                continue

            if response.status_code >= 400:
                logger.error(f"API返回错误: {response.status_code} {response.text}")
                return None

            try:
                return response.json()
            except ValueError:
                return response.text

        return None

    def _get(self, url: str, **params: Any) -> Optional[Any]:
        return self._request("GET", url, params=params or None)

    def _post(self, url: str, payload: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        return self._request("POST", url, json=payload)

    # ---- 文件和URL ----

    def scan_file(self, file_id: str) -> Optional[Any]:
        """按文件ID扫描文件"""
        return self._post(self._url("scan_file", file_id=file_id))

    def upload_file(self, file_path: str, headers: Sequence[str] = ()) -> Optional[Any]:
        """上传本地文件进行扫描"""
        if not os.path.isfile(file_path):
            logger.error(f"文件未找到: {file_path}")
            return None

        data = {"headers": list(headers)} if headers else None
        try:
            with open(file_path, 'rb') as f:
                files = {"file": (os.path.basename(file_path), f)}
                return self._request("POST", self._url("upload_file"), files=files, data=data)
        except OSError as e:
            logger.error(f"读取文件失败: {e}")
            return None

    def upload_url(self, url: str, headers: Sequence[str] = ()) -> Optional[Any]:
        """提交URL进行扫描，自定义请求头由服务端抓取时使用"""
        return self._post(self._url("upload_url"), {"url": url, "customHeaders": list(headers)})

    def rescan_url(self, url_id: str) -> Optional[Any]:
        return self._post(self._url("rescan_url", url_id=url_id))

    def view_urls(self, size: int) -> Optional[Any]:
        return self._get(self._url("view_urls"), size=size)

    def view_files(self) -> Optional[Any]:
        return self._get(self._url("view_files"))

    def get_scanner_data(self) -> Optional[Any]:
        return self._get(self._url("scanner_data"))

    # ---- 域名 ----

    def rescan_domain(self, domain: str) -> Optional[Any]:
        return self._post(self._url("rescan_domain", domain=domain))

    def total_analysis_data(self) -> Optional[Any]:
        return self._get(self._url("total_analysis"))

    def search_urls_by_domain(self, domain: str) -> Optional[Any]:
        return self._get(self._url("urls_by_domain"), domain=domain)

    def changed_urls(self) -> Optional[Any]:
        return self._get(self._url("changed_urls"))

    def _domain_list(self, endpoint: str, domains: List[str]) -> Optional[Any]:
        return self._post(self._url(endpoint), {"domains": list(domains)})

    def get_emails(self, domains: List[str]) -> Optional[Any]:
        return self._domain_list("emails", domains)

    def get_s3_domains(self, domains: List[str]) -> Optional[Any]:
        return self._domain_list("s3_domains", domains)

    def get_ips(self, domains: List[str]) -> Optional[Any]:
        return self._domain_list("ips", domains)

    def get_gql_ops(self, domains: List[str]) -> Optional[Any]:
        return self._domain_list("gql_ops", domains)

    def get_domain_urls(self, domains: List[str]) -> Optional[Any]:
        return self._domain_list("domain_urls", domains)

    def get_api_paths(self, domains: List[str]) -> Optional[Any]:
        return self._domain_list("api_paths", domains)

    # ---- 结果 ----

    def get_result_by_jsmon_id(self, jsmon_id: str) -> Optional[Any]:
        return self._get(self._url("result_by_jsmon_id", jsmon_id=jsmon_id))

    def get_result_by_file_id(self, file_id: str) -> Optional[Any]:
        return self._get(self._url("result_by_file_id", file_id=file_id))

    def reverse_search_results(self, query: Tuple[str, str]) -> Optional[Any]:
        """按 (字段, 值) 反向搜索结果"""
        field, value = query
        return self._get(self._url("reverse_search"), field=field, value=value)

    def scan_domain(self, domain: str, words: Sequence[str] = ()) -> Optional[Any]:
        return self._post(self._url("scan_domain"), {"domain": domain, "words": list(words)})

    def get_usage(self) -> Optional[Any]:
        return self._get(self._url("usage"))

    def get_automation_data(self, domain: str, size: int) -> Optional[Any]:
        return self._get(self._url("automation"), domain=domain, size=size)

    def get_domains(self) -> Optional[Any]:
        return self._get(self._url("domains"))

    # ---- 定时任务 ----

    def cron(self, settings: Tuple[str, str, int, str]) -> Optional[Any]:
        """
        执行定时任务操作

        参数:
            settings: (模式, 通知渠道, 时间, 类型)，模式为 start/stop/update
        """
        mode, notifications, interval, cron_type = settings
        if mode == "stop":
            return self.stop_cron()
        if mode == "update":
            return self.update_cron(notifications, interval, cron_type)
        return self.start_cron(notifications, interval, cron_type)

    def start_cron(self, notifications: str, interval: int, cron_type: str) -> Optional[Any]:
        return self._post(self._url("start_cron"), self._cron_payload(notifications, interval, cron_type))

    def stop_cron(self) -> Optional[Any]:
        return self._post(self._url("stop_cron"))

    def update_cron(self, notifications: str, interval: int, cron_type: str) -> Optional[Any]:
        return self._request("PUT", self._url("update_cron"),
                             json=self._cron_payload(notifications, interval, cron_type))

    @staticmethod
    def _cron_payload(notifications: str, interval: int, cron_type: str) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if notifications:
            payload["notificationChannel"] = notifications
        if interval:
            payload["time"] = interval
        if cron_type:
            payload["type"] = cron_type
        return payload

    def close(self) -> None:
        """关闭连接会话"""
        if self.session:
            self.session.close()
