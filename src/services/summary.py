"""建案彙總資料的統計與格式化."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from ..utils.formatting import format_number, format_range, format_roc_date, round_fixed, round_half_up
from .aggregator import ProjectAccumulator
from .normalizer import NormalizedTransaction

logger = logging.getLogger(__name__)

EMPTY = "-"


# ==================== 數據類定義 ====================

@dataclass(frozen=True)
class FormattedRoomStat:
    count: int
    area_range: str  # 例如：25.3-30.1坪
    total_range: str  # 例如：1500-1800萬
    unit_price_range: str  # 例如：60.5-62.0萬


@dataclass(frozen=True)
class ParkingSummary:
    count: int
    avg: str  # 平均車位價（萬元），無資料為 "-"
    range: str  # 例如：200-280


@dataclass(frozen=True)
class SpecialSummary:
    count: int
    desc: str  # 例如：3戶


@dataclass(frozen=True)
class ProjectSummary:
    """建案統計資料."""
    name: str
    district: str
    address: str
    transaction_count: int
    price_range: str  # 單價範圍（萬/坪）
    avg_price_num: float  # 平均單價（排序用）
    total_amount: str  # 總銷金額（例如：12億3456萬）
    raw_total_amount: float  # 總銷金額（萬元，排序用）
    area_range: str  # 面積範圍（坪）
    total_price_range: str  # 總價範圍（萬元）
    room_types: Dict[str, FormattedRoomStat]
    date_range: str  # 交易期間（民國年）
    last_date: str
    parking: ParkingSummary
    special: SpecialSummary


@dataclass(frozen=True)
class AggregationResult:
    projects: List[ProjectSummary]  # 已排序
    transactions: List[NormalizedTransaction]  # 新到舊，無日期者在最後


# ==================== 格式化 ====================

def format_total_amount(total: float) -> str:
    """將總金額（萬元）拆為「億」與「萬」（例如：123456 -> 12億3456萬）."""
    hundred_millions, remainder = divmod(round_half_up(total), 10000)
    return f"{hundred_millions}億{remainder}萬"


def _range_or_zero(values: List[float], digits: int, empty: str = "0") -> str:
    if not values:
        return empty
    return format_range(min(values), max(values), digits)


def _format_date_range(project: ProjectAccumulator) -> Tuple[str, str]:
    """
    計算交易期間。

    優先使用解析成功的日期；全部解析失敗時改以原始字串排序。

    Returns:
        (date_range, last_date)
    """
    if project.date_objects:
        ordered = sorted(project.date_objects)
        start = format_roc_date(ordered[0])
        end = format_roc_date(ordered[-1])
        date_range = start if start == end else f"{start} - {end}"
        return date_range, end

    raw_dates = sorted(project.dates)
    earliest = raw_dates[0] if raw_dates else EMPTY
    latest = raw_dates[-1] if raw_dates else EMPTY
    date_range = latest if earliest == latest else f"{earliest} - {latest}"
    return date_range, EMPTY


def _format_room_types(project: ProjectAccumulator) -> Dict[str, FormattedRoomStat]:
    formatted = {}
    for room_type, stat in project.room_stats.items():
        if stat.unit_prices:
            unit_price_range = format_range(
                min(stat.unit_prices), max(stat.unit_prices), 1, "-", "萬"
            )
        else:
            unit_price_range = "0.0萬"

        formatted[room_type.value] = FormattedRoomStat(
            count=stat.count,
            area_range=format_range(min(stat.areas), max(stat.areas), 1, "-", "坪"),
            total_range=format_range(
                min(stat.total_prices), max(stat.total_prices), 0, "-", "萬"
            ),
            unit_price_range=unit_price_range,
        )
    return formatted


def _format_parking(project: ProjectAccumulator) -> ParkingSummary:
    prices = project.parking.prices
    if not prices:
        return ParkingSummary(count=project.parking.count, avg=EMPTY, range=EMPTY)

    avg = round_half_up(sum(prices) / len(prices))
    low, high = min(prices), max(prices)
    if low == high:
        price_range = format_number(low)
    else:
        price_range = f"{format_number(low)}-{format_number(high)}"

    return ParkingSummary(
        count=project.parking.count,
        avg=str(avg) if avg else EMPTY,
        range=price_range,
    )


def summarize_project(project: ProjectAccumulator) -> ProjectSummary:
    """將建案累計資料轉換為顯示用的統計資料."""
    unit_prices = project.unit_prices
    avg_price = 0.0
    if unit_prices:
        avg_price = float(round_fixed(sum(unit_prices) / len(unit_prices), 1))

    date_range, last_date = _format_date_range(project)

    return ProjectSummary(
        name=project.name,
        district=project.district,
        address=project.address,
        transaction_count=project.transaction_count,
        price_range=_range_or_zero(unit_prices, 1),
        avg_price_num=avg_price,
        total_amount=format_total_amount(project.total_price_sum),
        raw_total_amount=project.total_price_sum,
        area_range=_range_or_zero(project.areas, 2),
        total_price_range=_range_or_zero(project.total_prices, 0),
        room_types=_format_room_types(project),
        date_range=date_range,
        last_date=last_date,
        parking=_format_parking(project),
        special=SpecialSummary(
            count=project.special_count,
            desc=f"{project.special_count}戶" if project.special_count > 0 else EMPTY,
        ),
    )


# ==================== 排序 ====================

def rank_projects(summaries: Iterable[ProjectSummary]) -> List[ProjectSummary]:
    """成交筆數多者在前；筆數相同時總銷金額高者在前."""
    return sorted(
        summaries,
        key=lambda s: (-s.transaction_count, -s.raw_total_amount),
    )


def sort_transactions(transactions: Iterable[NormalizedTransaction]) -> List[NormalizedTransaction]:
    """交易日期新到舊排序，沒有日期的交易排在最後（其餘維持原順序）."""
    return sorted(
        transactions,
        key=lambda t: (
            t.transaction_date is None,
            -t.transaction_date.toordinal() if t.transaction_date else 0,
        ),
    )


def build_result(
    projects: Dict[str, ProjectAccumulator],
    transactions: Iterable[NormalizedTransaction],
) -> AggregationResult:
    """產生排序後的建案統計與全部交易列表."""
    summaries = rank_projects(summarize_project(project) for project in projects.values())
    feed = sort_transactions(transactions)

    logger.info(f"統計完成 | 建案數={len(summaries)} | 交易筆數={len(feed)}")
    return AggregationResult(projects=summaries, transactions=feed)
