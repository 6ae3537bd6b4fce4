"""Pydantic models for Web API requests and responses."""
from typing import Dict, Optional, List
from datetime import date, datetime
from pydantic import BaseModel, Field


# ============ 資料載入相關 ============
class TextUploadRequest(BaseModel):
    csv_text: str = Field(..., description="CSV 文字內容")


class DatasetStats(BaseModel):
    total_raw: int = Field(..., description="原始筆數")
    presale: int = Field(..., description="預售屋交易筆數")
    filtered: int = Field(..., description="過濾筆數")
    reasons: Dict[str, int] = Field(default_factory=dict, description="過濾原因統計")


class ProcessResponse(BaseModel):
    stats: DatasetStats
    project_count: int
    transaction_count: int
    encoding: Optional[str]
    processed_at: datetime


# ============ 建案統計相關 ============
class RoomTypeStat(BaseModel):
    count: int
    area_range: str
    total_range: str
    unit_price_range: str


class ParkingInfo(BaseModel):
    count: int
    avg: str
    range: str


class SpecialInfo(BaseModel):
    count: int
    desc: str


class ProjectSummary(BaseModel):
    name: str
    district: str
    address: str
    transaction_count: int
    price_range: str
    avg_price_num: float
    total_amount: str
    raw_total_amount: float
    area_range: str
    total_price_range: str
    room_types: Dict[str, RoomTypeStat]
    date_range: str
    last_date: str
    parking: ParkingInfo
    special: SpecialInfo


# ============ 交易明細相關 ============
class Transaction(BaseModel):
    district: str
    project_name: str
    date_raw: str = Field(..., description="交易年月日（民國）")
    transaction_date: Optional[date]
    unit_price: str = Field(..., description="單價（萬/坪）")
    total_price: str = Field(..., description="總價（萬元）")
    area: str = Field(..., description="面積（坪，已扣除車位）")
    room_type: str
    floor: str
    is_special_unit: bool
    case_object: str


# ============ 市場分析相關 ============
class DistrictStat(BaseModel):
    district: str
    avg_price: float
    transactions: int
    project_count: int


class MarketAnalysis(BaseModel):
    project_count: int
    total_transactions: int
    avg_price_overall: float
    districts: List[DistrictStat]
    top_expensive: List[str]
    top_volume: List[str]
    prompt: str
