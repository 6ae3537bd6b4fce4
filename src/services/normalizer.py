"""預售屋交易資料正規化與過濾."""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from ..utils.formatting import parse_int, parse_number, parse_roc_date
from .csv_parser import RawRecord
from .fields import Field, resolve_field

logger = logging.getLogger(__name__)

PRESALE_MARKER = "預售"

# 超過門檻代表來源以「元」為單位，需換算為「萬」
UNIT_PRICE_THRESHOLD = 10000
TOTAL_PRICE_THRESHOLD = 1000000
PARKING_PRICE_THRESHOLD = 10000
TEN_THOUSAND = 10000

SPECIAL_FLOOR_MARKER = "一"
SPECIAL_NOTE_MARKERS = ("露台", "特殊")


# ==================== 數據類定義 ====================

class RoomType(Enum):
    OPEN_PLAN = "開放式格局"
    ONE_ROOM = "1房"
    TWO_ROOM = "2房"
    THREE_ROOM = "3房"
    FOUR_PLUS_ROOM = "4房"


class RejectReason(Enum):
    NOT_PRESALE = "not_presale"  # 交易類別不是預售屋
    MISSING_NAME = "missing_name"  # 沒有建案名稱
    NO_PRICE = "no_price"  # 單價與總價皆為 0


@dataclass(frozen=True)
class NormalizedTransaction:
    """單筆預售屋交易."""
    district: str  # 行政區（原始值）
    project_name: str  # 建案名稱
    address: str  # 土地區段位置建物區段門牌
    transaction_date_raw: str  # 交易年月日（民國，例如：1121015）
    transaction_date: Optional[date]  # 解析失敗時為 None
    unit_price: float  # 單價（萬/坪）
    total_price: float  # 總價（萬元）
    net_area: float  # 扣除車位後面積（坪）
    floor: str  # 交易樓層
    room_type: RoomType
    is_special_unit: bool  # 一樓或含露台等特殊戶
    notes: str
    case_object: str  # 交易標的


@dataclass(frozen=True)
class NormalizedRow:
    """通過預售與建案名稱過濾的資料列；價格為 0 時 transaction 為 None."""
    project_name: str
    transaction: Optional[NormalizedTransaction]
    parking_price: float  # 車位總價（萬元）


@dataclass
class DatasetStats:
    """資料統計."""
    total_raw: int = 0
    presale: int = 0  # 成功轉換為交易的筆數
    filtered: int = 0
    reasons: Dict[RejectReason, int] = field(default_factory=dict)


@dataclass
class NormalizationResult:
    rows: List[NormalizedRow]
    stats: DatasetStats

    @property
    def transactions(self) -> List[NormalizedTransaction]:
        return [row.transaction for row in self.rows if row.transaction is not None]


# ==================== 欄位轉換 ====================

def classify_room_type(room_count: Optional[str]) -> RoomType:
    """依房數分類格局；無法解析或 0 房視為開放式格局."""
    count = parse_int(room_count)
    if count is None or count <= 0:
        return RoomType.OPEN_PLAN
    if count == 1:
        return RoomType.ONE_ROOM
    if count == 2:
        return RoomType.TWO_ROOM
    if count == 3:
        return RoomType.THREE_ROOM
    return RoomType.FOUR_PLUS_ROOM


def is_special_unit(floor: str, notes: str) -> bool:
    """一樓（「一」或「1」）或備註含露台、特殊字樣者視為特殊戶."""
    if SPECIAL_FLOOR_MARKER in floor or floor == "1":
        return True
    return any(marker in notes for marker in SPECIAL_NOTE_MARKERS)


def fix_unit_scale(value: float, threshold: float) -> float:
    """超過門檻的金額由「元」換算為「萬」."""
    if value > threshold:
        return value / TEN_THOUSAND
    return value


def is_presale(case_type: Optional[str]) -> bool:
    """沒有交易類別欄位（或為空）時不過濾."""
    if not case_type:
        return True
    case_type = case_type.strip()
    return not case_type or PRESALE_MARKER in case_type


# ==================== 正規化 ====================

def normalize_record(record: RawRecord) -> Tuple[Optional[NormalizedRow], Optional[RejectReason]]:
    """
    正規化單筆原始資料。

    Returns:
        (row, reason)：
        - 非預售或沒有建案名稱：row 為 None
        - 價格皆為 0：row 仍回傳（供車位資訊使用），但 row.transaction 為 None
        - 成功：reason 為 None
    """
    if not is_presale(resolve_field(record, Field.CASE_TYPE)):
        return None, RejectReason.NOT_PRESALE

    name = resolve_field(record, Field.PROJECT_NAME)
    if not name:
        return None, RejectReason.MISSING_NAME

    district = resolve_field(record, Field.DISTRICT) or ""
    address = resolve_field(record, Field.ADDRESS) or ""
    case_object = resolve_field(record, Field.CASE_OBJECT) or ""

    unit_price = parse_number(resolve_field(record, Field.UNIT_PRICE))
    total_price = parse_number(resolve_field(record, Field.TOTAL_PRICE))
    transfer_area = parse_number(resolve_field(record, Field.TRANSFER_AREA))
    parking_area = parse_number(resolve_field(record, Field.PARKING_AREA))
    parking_price = parse_number(resolve_field(record, Field.PARKING_PRICE))

    net_area = max(0.0, transfer_area - parking_area)

    unit_price = fix_unit_scale(unit_price, UNIT_PRICE_THRESHOLD)
    total_price = fix_unit_scale(total_price, TOTAL_PRICE_THRESHOLD)
    parking_price = fix_unit_scale(parking_price, PARKING_PRICE_THRESHOLD)

    if not (total_price > 0 or unit_price > 0):
        row = NormalizedRow(project_name=name, transaction=None, parking_price=parking_price)
        return row, RejectReason.NO_PRICE

    floor = resolve_field(record, Field.FLOOR) or ""
    date_raw = resolve_field(record, Field.TRANSACTION_DATE) or ""
    notes = resolve_field(record, Field.NOTES) or ""

    transaction = NormalizedTransaction(
        district=district,
        project_name=name,
        address=address,
        transaction_date_raw=date_raw,
        transaction_date=parse_roc_date(date_raw),
        unit_price=unit_price,
        total_price=total_price,
        net_area=net_area,
        floor=floor,
        room_type=classify_room_type(resolve_field(record, Field.ROOM_COUNT)),
        is_special_unit=is_special_unit(floor, notes),
        notes=notes,
        case_object=case_object,
    )

    return NormalizedRow(project_name=name, transaction=transaction, parking_price=parking_price), None


def normalize_records(records: Iterable[RawRecord]) -> NormalizationResult:
    """
    正規化所有原始資料並統計過濾結果。

    Args:
        records: 原始資料

    Returns:
        NormalizationResult（保留資料列的原始順序）
    """
    rows: List[NormalizedRow] = []
    reasons: Counter = Counter()
    total = 0

    for record in records:
        total += 1
        row, reason = normalize_record(record)
        if reason is not None:
            reasons[reason] += 1
            logger.debug(f"資料已過濾 | reason={reason.value} | row={total}")
        if row is not None:
            rows.append(row)

    presale = sum(1 for row in rows if row.transaction is not None)
    stats = DatasetStats(
        total_raw=total,
        presale=presale,
        filtered=total - presale,
        reasons=dict(reasons),
    )

    logger.info(
        f"資料正規化完成 | 總筆數={stats.total_raw} | 預售={stats.presale} | 過濾={stats.filtered}"
    )
    return NormalizationResult(rows=rows, stats=stats)
