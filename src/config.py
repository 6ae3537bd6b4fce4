"""Configuration helpers for the presale tracker."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


@dataclass
class AppConfig:
    # 臺北市預售屋實價登錄資料集
    resource_id: str = "2979c431-7a32-4067-9af2-e716cd825c4b"
    open_data_base_url: str = "https://data.taipei/api/v1/dataset"
    page_limit: int = 1000  # 每頁筆數
    max_records: int = 30000  # 最多抓取筆數
    page_delay_seconds: float = 0.1  # 每頁之間的間隔
    request_timeout_seconds: int = 60
    proxy_url: Optional[str] = None  # 例如：https://corsproxy.io/?
    log_level: str = "INFO"
    port: int = 8000
    frontend_url: Optional[str] = None


def load_config() -> AppConfig:
    load_dotenv()

    resource_id = os.getenv("PRESALE_RESOURCE_ID", AppConfig.resource_id)
    base_url = os.getenv("OPEN_DATA_BASE_URL", AppConfig.open_data_base_url)

    limit_raw = os.getenv("OPEN_DATA_PAGE_LIMIT")
    page_limit = int(limit_raw) if limit_raw else AppConfig.page_limit

    max_raw = os.getenv("OPEN_DATA_MAX_RECORDS")
    max_records = int(max_raw) if max_raw else AppConfig.max_records

    delay_raw = os.getenv("OPEN_DATA_PAGE_DELAY")
    page_delay = float(delay_raw) if delay_raw else AppConfig.page_delay_seconds

    timeout_raw = os.getenv("OPEN_DATA_TIMEOUT")
    timeout = int(timeout_raw) if timeout_raw else AppConfig.request_timeout_seconds

    # 代理網址（選用）
    proxy_url = os.getenv("CORS_PROXY_URL") or None

    log_level = os.getenv("LOG_LEVEL", AppConfig.log_level).upper()

    port_raw = os.getenv("PORT")
    port = int(port_raw) if port_raw else AppConfig.port

    frontend_url = os.getenv("FRONTEND_URL") or None

    return AppConfig(
        resource_id=resource_id,
        open_data_base_url=base_url.rstrip("/"),
        page_limit=page_limit,
        max_records=max_records,
        page_delay_seconds=page_delay,
        request_timeout_seconds=timeout,
        proxy_url=proxy_url,
        log_level=log_level,
        port=port,
        frontend_url=frontend_url,
    )
