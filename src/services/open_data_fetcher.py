"""臺北市政府資料開放平台 - 預售屋實價登錄分頁下載.

支援：
- 分頁抓取（每頁 limit 筆，直到資料不足一頁或達上限）
- 選用代理網址
- 每頁之間可取消
- 錯誤處理（HTTP 狀態、逾時、非 CSV 內容）
"""

import asyncio
import logging
import time
from typing import List, Optional
from urllib.parse import quote, urlencode

import aiohttp

from ..config import AppConfig, load_config
from .csv_parser import PresaleDataError, RawRecord, parse_csv_strict
from .encoding import decode_content
from .presale_pipeline import PipelineResult, ResultStore, get_result_store, process_records

logger = logging.getLogger(__name__)

# 筆數過少時通常只是每週更新的增量資料
LOW_RECORD_WARNING = 200


class OpenDataFetchError(RuntimeError):
    """開放資料下載失敗."""


class OpenDataFetcher:
    """開放資料分頁下載器."""

    def __init__(self, config: Optional[AppConfig] = None):
        """初始化下載器.

        Args:
            config: 應用程式設定，未指定時由環境變數載入
        """
        self.config = config or load_config()

    def build_page_url(self, offset: int) -> str:
        """組合單頁下載網址（有設定代理時包在代理網址之後）."""
        params = urlencode({
            "scope": "resourceAquire",
            "format": "csv",
            "limit": self.config.page_limit,
            "offset": offset,
            "_t": int(time.time() * 1000),
        })
        target = f"{self.config.open_data_base_url}/{self.config.resource_id}?{params}"
        if self.config.proxy_url:
            return f"{self.config.proxy_url}{quote(target, safe='')}"
        return target

    async def _fetch_page(self, session: aiohttp.ClientSession, url: str) -> bytes:
        timeout = aiohttp.ClientTimeout(total=self.config.request_timeout_seconds)
        async with session.get(url, timeout=timeout) as response:
            if response.status != 200:
                raise OpenDataFetchError(f"連線失敗 | status={response.status}")
            return await response.read()

    async def fetch_all(self, cancel_event: Optional[asyncio.Event] = None) -> List[RawRecord]:
        """
        抓取所有分頁並合併為原始資料列表。

        Args:
            cancel_event: 設定後於下一頁開始前停止抓取

        Returns:
            原始資料列表

        Raises:
            OpenDataFetchError: 任一頁下載失敗或內容不是 CSV
        """
        records: List[RawRecord] = []
        offset = 0
        page = 0
        limit = self.config.page_limit

        logger.info(
            f"🔄 開始抓取開放資料 | resource={self.config.resource_id} | limit={limit} | "
            f"max={self.config.max_records}"
        )

        async with aiohttp.ClientSession() as session:
            while True:
                if cancel_event is not None and cancel_event.is_set():
                    logger.info(f"⏹️ 抓取已取消 | page={page} | 已取得={len(records)}")
                    break

                page += 1
                url = self.build_page_url(offset)
                logger.info(f"抓取第 {page} 頁 | offset={offset}")

                try:
                    content = await self._fetch_page(session, url)
                except asyncio.TimeoutError as exc:
                    raise OpenDataFetchError(f"下載超時 | page={page}") from exc
                except aiohttp.ClientError as exc:
                    raise OpenDataFetchError(f"網路連線錯誤 | page={page} | error={exc}") from exc

                try:
                    rows = parse_csv_strict(decode_content(content))
                except PresaleDataError as exc:
                    raise OpenDataFetchError(f"{exc} | page={page}") from exc

                if not rows:
                    break

                records.extend(rows)
                offset += limit

                if len(rows) < limit or offset >= self.config.max_records:
                    break

                await asyncio.sleep(self.config.page_delay_seconds)

        if records and len(records) < LOW_RECORD_WARNING:
            logger.warning(f"⚠️ 資料筆數偏少，可能僅為每週更新 | 筆數={len(records)}")

        logger.info(f"✅ 抓取完成 | pages={page} | 總筆數={len(records)}")
        return records


async def refresh_from_open_data(
    config: Optional[AppConfig] = None,
    store: Optional[ResultStore] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> PipelineResult:
    """抓取最新開放資料、處理並更新結果（便捷函式）.

    過濾後沒有任何建案時不會取代先前的結果。

    Raises:
        OpenDataFetchError: 下載失敗或抓取結果為空
        PresaleDataError: 資料處理失敗
    """
    fetcher = OpenDataFetcher(config)
    records = await fetcher.fetch_all(cancel_event=cancel_event)

    if not records:
        raise OpenDataFetchError("抓取成功但資料為空")

    result = process_records(records)
    if not result.is_empty:
        (store or get_result_store()).set(result)
    return result
