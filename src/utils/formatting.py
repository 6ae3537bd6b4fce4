"""Utility helpers for parsing and formatting 實價登錄 field values."""
from __future__ import annotations

import math
import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

# 民國紀年與西元紀年的差距
ROC_YEAR_OFFSET = 1911

_NUMBER_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INT_PREFIX = re.compile(r"^[+-]?\d+")


def parse_roc_date(value: Optional[str]) -> Optional[date]:
    """
    解析民國年日期字串。

    7 碼視為 3 位數年份（1121015），其餘長度視為 2 位數年份（990101）。

    Examples:
        "1121015" -> date(2023, 10, 15)
        "990101" -> date(2010, 1, 1)
        "12" -> None
    """
    if not value or len(value) < 6:
        return None

    year_len = 3 if len(value) == 7 else 2
    try:
        year = int(value[:year_len]) + ROC_YEAR_OFFSET
        month = int(value[year_len:year_len + 2])
        day = int(value[year_len + 2:])
        return date(year, month, day)
    except ValueError:
        return None


def format_roc_date(value: date) -> str:
    """將日期格式化為民國年（例如：112/10/15）."""
    return f"{value.year - ROC_YEAR_OFFSET}/{value.month:02d}/{value.day:02d}"


def parse_number(value: Optional[str]) -> float:
    """
    解析數值欄位，只取開頭的數字部分。

    千分位逗號會先移除；無法解析時回傳 0。

    Examples:
        "1,234.5" -> 1234.5
        "12.5萬" -> 12.5
        "" -> 0.0
    """
    if not value:
        return 0.0
    match = _NUMBER_PREFIX.match(value.strip().replace(",", ""))
    if not match:
        return 0.0
    number = float(match.group(0))
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def parse_int(value: Optional[str]) -> Optional[int]:
    """解析整數欄位（例如：「3」、「2房」），無法解析時回傳 None."""
    if not value:
        return None
    match = _INT_PREFIX.match(value.strip())
    if not match:
        return None
    return int(match.group(0))


def round_fixed(value: float, digits: int = 0) -> Decimal:
    """
    四捨五入到指定小數位數，.5 一律進位（不採用銀行家捨入）。

    以數值的最短十進位表示計算，因此 30.125 -> 30.13、1500.5 -> 1501。
    """
    exponent = Decimal(1).scaleb(-digits)
    return Decimal(repr(float(value))).quantize(exponent, rounding=ROUND_HALF_UP)


def round_half_up(value: float) -> int:
    """四捨五入到整數（.5 一律進位）."""
    return int(round_fixed(value, 0))


def format_fixed(value: float, digits: int = 1) -> str:
    """固定小數位數格式化（例如：format_fixed(17.25, 1) -> "17.3"）."""
    return str(round_fixed(value, digits))


def format_number(value: float) -> str:
    """整數值不顯示小數點（300.0 -> "300"、12.5 -> "12.5"）."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_range(
    low: float,
    high: float,
    digits: int = 1,
    sep: str = " - ",
    suffix: str = "",
) -> str:
    """
    格式化數值範圍，最小值等於最大值時只顯示單一數值。

    Examples:
        format_range(15, 20) -> "15.0 - 20.0"
        format_range(15, 15) -> "15.0"
        format_range(500, 800, 0, "-", "萬") -> "500-800萬"
    """
    start = format_fixed(low, digits)
    end = format_fixed(high, digits)
    if start == end:
        return f"{start}{suffix}"
    return f"{start}{sep}{end}{suffix}"
