"""欄位名稱對照.

台北市預售屋資料集有中文欄位版本，也有以代碼命名欄位的版本
（BUILD_NAME、UPRICE…），這裡把兩種名稱對應到同一個欄位概念。
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from .csv_parser import RawRecord


class Field(Enum):
    PROJECT_NAME = "project_name"
    DISTRICT = "district"
    ADDRESS = "address"
    CASE_TYPE = "case_type"
    CASE_OBJECT = "case_object"
    UNIT_PRICE = "unit_price"
    TOTAL_PRICE = "total_price"
    TRANSFER_AREA = "transfer_area"
    FLOOR = "floor"
    TRANSACTION_DATE = "transaction_date"
    NOTES = "notes"
    PARKING_PRICE = "parking_price"
    PARKING_AREA = "parking_area"
    ROOM_COUNT = "room_count"


# 依優先順序排列的欄位別名
FIELD_ALIASES: Dict[Field, Tuple[str, ...]] = {
    Field.PROJECT_NAME: ("建案名稱", "BUILD_NAME", "case_name"),
    Field.DISTRICT: ("行政區", "DISTRICT", "district"),
    Field.ADDRESS: ("土地區段位置建物區段門牌", "LOCATION", "address"),
    Field.CASE_TYPE: ("CASE_T", "case_t"),
    Field.CASE_OBJECT: ("交易標的", "CASE_F"),
    Field.UNIT_PRICE: ("單價元坪", "UPRICE"),
    Field.TOTAL_PRICE: ("總價元", "TPRICE"),
    Field.TRANSFER_AREA: ("建物移轉總面積坪", "FAREA"),
    Field.FLOOR: ("交易樓層", "TBUILD"),
    Field.TRANSACTION_DATE: ("交易年月日", "SDATE"),
    Field.NOTES: ("備註", "RMNOTE"),
    Field.PARKING_PRICE: ("車位總價元", "PPRICE"),
    Field.PARKING_AREA: ("車位移轉總面積坪", "PAREA"),
    Field.ROOM_COUNT: ("建物現況格局-房", "BUILD_R"),
}


def find_key(record: RawRecord, alias: str) -> Optional[str]:
    """找出與別名相符的欄位名稱（不分大小寫，忽略欄位名稱前後空白）."""
    target = alias.upper()
    for header in record.headers:
        if header and header.strip().upper() == target:
            return header
    return None


def resolve_key(record: RawRecord, field: Field) -> Optional[str]:
    """依別名順序找出欄位概念對應的實際欄位名稱."""
    for alias in FIELD_ALIASES[field]:
        key = find_key(record, alias)
        if key is not None:
            return key
    return None


def resolve_field(record: RawRecord, field: Field) -> Optional[str]:
    """
    取得欄位概念的值。

    找到欄位即回傳其值（即使是空字串）；所有別名都不存在時回傳 None。
    """
    key = resolve_key(record, field)
    if key is None:
        return None
    return record.get(key)
