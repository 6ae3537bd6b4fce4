"""預售屋資料處理流程 - 解碼、解析、正規化、彙整."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from .aggregator import aggregate
from .csv_parser import PresaleDataError, RawRecord, describe_record, parse_csv
from .encoding import resolve_encoding
from .normalizer import DatasetStats, normalize_records
from .summary import AggregationResult, build_result

logger = logging.getLogger(__name__)


# ==================== 數據類定義 ====================

@dataclass
class PipelineResult:
    """單次處理結果."""
    result: AggregationResult
    stats: DatasetStats
    first_record: Optional[RawRecord] = None  # 供除錯（欄位名稱不符時）
    encoding: Optional[str] = None  # 文字輸入時為 None
    processed_at: datetime = field(default_factory=datetime.now)

    @property
    def is_empty(self) -> bool:
        """有原始資料但過濾後沒有任何建案."""
        return not self.result.projects and self.stats.total_raw > 0

    def describe_first_record(self) -> Optional[str]:
        if self.first_record is None:
            return None
        return describe_record(self.first_record)


# ==================== 結果快取 ====================

class ResultStore:
    """最近一次處理結果；每次處理都會整個取代前一次結果."""

    def __init__(self):
        self._result: Optional[PipelineResult] = None

    def get(self) -> Optional[PipelineResult]:
        return self._result

    def set(self, result: PipelineResult) -> None:
        self._result = result
        logger.info(
            f"處理結果已更新 | 建案數={len(result.result.projects)} | "
            f"交易筆數={len(result.result.transactions)}"
        )

    def clear(self) -> None:
        self._result = None
        logger.info("處理結果已清空")


# 全域結果實例
_result_store = ResultStore()


def get_result_store() -> ResultStore:
    return _result_store


# ==================== 處理流程 ====================

def process_records(records: Sequence[RawRecord], encoding: Optional[str] = None) -> PipelineResult:
    """
    正規化並彙整已解析的原始資料。

    Args:
        records: 原始資料
        encoding: 來源編碼（僅供記錄）

    Returns:
        PipelineResult

    Raises:
        PresaleDataError: 處理過程發生非預期錯誤
    """
    first_record = records[0] if records else None

    try:
        normalized = normalize_records(records)
        projects = aggregate(normalized.rows)
        result = build_result(projects, normalized.transactions)
    except PresaleDataError:
        raise
    except Exception as exc:
        logger.error(f"資料處理失敗 | rows={len(records)} | error={exc}", exc_info=True)
        raise PresaleDataError(f"資料處理失敗：{exc}", first_record=first_record) from exc

    pipeline_result = PipelineResult(
        result=result,
        stats=normalized.stats,
        first_record=first_record,
        encoding=encoding,
    )

    if pipeline_result.is_empty:
        logger.warning(f"篩選後無預售屋資料 | 總筆數={normalized.stats.total_raw}")

    return pipeline_result


def process_text(text: str, encoding: Optional[str] = None) -> PipelineResult:
    """解析 CSV 文字並處理."""
    try:
        records: List[RawRecord] = parse_csv(text)
    except Exception as exc:
        logger.error(f"CSV 解析失敗 | error={exc}", exc_info=True)
        raise PresaleDataError(f"文字解析失敗，請確認格式：{exc}") from exc

    logger.info(f"CSV 讀取完成 | 總筆數={len(records)}")
    return process_records(records, encoding=encoding)


def process_bytes(buffer: bytes) -> PipelineResult:
    """解碼上傳檔案並處理."""
    decoded = resolve_encoding(buffer)
    logger.info(
        f"檔案解碼完成 | encoding={decoded.encoding} | fallback={decoded.fallback} | "
        f"size={len(buffer)}"
    )
    return process_text(decoded.text, encoding=decoded.encoding)
