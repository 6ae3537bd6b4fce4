"""依建案名稱彙整預售屋交易."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List

from .normalizer import NormalizedRow, NormalizedTransaction, RoomType

logger = logging.getLogger(__name__)

DEFAULT_DISTRICT = "未知區域"
DEFAULT_ADDRESS = "位置未詳"

# 單價低於此值視為雜訊（例如補 0 的資料），不列入單價統計
MIN_VALID_UNIT_PRICE = 10


@dataclass
class RoomStat:
    """單一格局的累計資料."""
    count: int = 0
    areas: List[float] = field(default_factory=list)
    unit_prices: List[float] = field(default_factory=list)
    total_prices: List[float] = field(default_factory=list)


@dataclass
class ParkingStat:
    count: int = 0
    prices: List[float] = field(default_factory=list)


@dataclass
class ProjectAccumulator:
    """單一建案的累計資料（以建案名稱原字串為鍵）."""
    name: str
    district: str
    address: str
    transaction_count: int = 0
    total_price_sum: float = 0.0
    unit_prices: List[float] = field(default_factory=list)
    total_prices: List[float] = field(default_factory=list)
    areas: List[float] = field(default_factory=list)
    dates: List[str] = field(default_factory=list)
    date_objects: List[date] = field(default_factory=list)
    room_stats: Dict[RoomType, RoomStat] = field(default_factory=dict)
    parking: ParkingStat = field(default_factory=ParkingStat)
    special_count: int = 0

    @classmethod
    def from_transaction(cls, transaction: NormalizedTransaction) -> "ProjectAccumulator":
        return cls(
            name=transaction.project_name,
            district=transaction.district or DEFAULT_DISTRICT,
            address=transaction.address or DEFAULT_ADDRESS,
        )

    def add_transaction(self, transaction: NormalizedTransaction) -> None:
        self.transaction_count += 1

        if transaction.unit_price > MIN_VALID_UNIT_PRICE:
            self.unit_prices.append(transaction.unit_price)
        self.total_prices.append(transaction.total_price)
        self.total_price_sum += transaction.total_price
        self.areas.append(transaction.net_area)

        if transaction.transaction_date_raw:
            self.dates.append(transaction.transaction_date_raw)
            if transaction.transaction_date is not None:
                self.date_objects.append(transaction.transaction_date)

        if transaction.is_special_unit:
            self.special_count += 1

        room = self.room_stats.setdefault(transaction.room_type, RoomStat())
        room.count += 1
        room.areas.append(transaction.net_area)
        if transaction.unit_price > MIN_VALID_UNIT_PRICE:
            room.unit_prices.append(transaction.unit_price)
        room.total_prices.append(transaction.total_price)

    def add_parking(self, price: float) -> None:
        self.parking.count += 1
        self.parking.prices.append(price)


def aggregate(rows: Iterable[NormalizedRow]) -> Dict[str, ProjectAccumulator]:
    """
    依建案名稱彙整交易。

    車位價格獨立於交易判斷：只要該建案已建立（即使本列價格為 0），
    車位價格 > 0 就會列入車位統計。

    Args:
        rows: 正規化後的資料列（依原始順序）

    Returns:
        建案名稱 -> ProjectAccumulator（保留首次出現順序）
    """
    projects: Dict[str, ProjectAccumulator] = {}

    for row in rows:
        transaction = row.transaction
        if transaction is not None:
            project = projects.get(transaction.project_name)
            if project is None:
                project = ProjectAccumulator.from_transaction(transaction)
                projects[transaction.project_name] = project
            project.add_transaction(transaction)

        if row.parking_price > 0 and row.project_name in projects:
            projects[row.project_name].add_parking(row.parking_price)

    logger.info(f"建案彙整完成 | 建案數={len(projects)}")
    return projects
