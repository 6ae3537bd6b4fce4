"""市場分析摘要 - 提供給文字分析（AI 報告）使用的統計資料與提示文字."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence

from ..utils.formatting import format_fixed, round_fixed
from .summary import ProjectSummary

TOP_N = 3


@dataclass
class DistrictSummary:
    district: str
    avg_price: float  # 各建案平均單價的平均（萬/坪）
    transactions: int
    project_count: int


@dataclass
class MarketOverview:
    project_count: int
    total_transactions: int
    avg_price_overall: float  # 萬/坪
    districts: List[DistrictSummary]  # 均價高到低
    top_expensive: List[ProjectSummary]
    top_volume: List[ProjectSummary]


def build_market_overview(projects: Sequence[ProjectSummary], top_n: int = TOP_N) -> MarketOverview:
    """
    計算整體與各行政區的行情摘要。

    Raises:
        ValueError: 沒有任何建案資料
    """
    if not projects:
        raise ValueError("無資料可供分析，請先載入資料")

    total_transactions = sum(p.transaction_count for p in projects)
    avg_overall = float(round_fixed(sum(p.avg_price_num for p in projects) / len(projects), 1))

    grouped: Dict[str, Dict[str, float]] = {}
    for project in projects:
        stats = grouped.setdefault(project.district, {"count": 0, "price_sum": 0.0, "projects": 0})
        stats["count"] += project.transaction_count
        stats["price_sum"] += project.avg_price_num
        stats["projects"] += 1

    districts = [
        DistrictSummary(
            district=district,
            avg_price=float(round_fixed(stats["price_sum"] / stats["projects"], 1)),
            transactions=int(stats["count"]),
            project_count=int(stats["projects"]),
        )
        for district, stats in grouped.items()
    ]
    districts.sort(key=lambda d: d.avg_price, reverse=True)

    return MarketOverview(
        project_count=len(projects),
        total_transactions=total_transactions,
        avg_price_overall=avg_overall,
        districts=districts,
        top_expensive=sorted(projects, key=lambda p: p.avg_price_num, reverse=True)[:top_n],
        top_volume=sorted(projects, key=lambda p: p.transaction_count, reverse=True)[:top_n],
    )


def build_analysis_prompt(overview: MarketOverview) -> str:
    """產生市場分析提示文字."""
    lines = [
        "請扮演專業房產數據分析師，根據以下【台北市預售屋實價登錄數據】，"
        "提供一份**精簡、客觀、條列式**的重點分析。",
        "",
        "**原則：精簡扼要、事實導向、不說廢話、只講重點。**",
        "",
        "【數據摘要】",
        f"- 總樣本：{overview.project_count} 案 (共 {overview.total_transactions} 筆成交)",
        f"- 全市均價：{format_fixed(overview.avg_price_overall, 1)} 萬/坪",
        "",
        "- 區域行情 (均價 | 成交量)：",
    ]
    lines.extend(
        f"  * {d.district}: {format_fixed(d.avg_price, 1)}萬 | {d.transactions}戶"
        for d in overview.districts
    )
    lines.append("")
    lines.append(f"- 單價 Top {len(overview.top_expensive)}：")
    lines.extend(
        f"  * {p.name} ({p.district}): {p.price_range}萬" for p in overview.top_expensive
    )
    lines.append("")
    lines.append(f"- 銷量 Top {len(overview.top_volume)}：")
    lines.extend(
        f"  * {p.name} ({p.district}): {p.transaction_count}戶" for p in overview.top_volume
    )
    lines.extend([
        "",
        "【輸出要求 (請使用 Markdown)】",
        "1. **價格事實**：簡述價格區間與天花板，點出最高價區域。",
        "2. **量能觀察**：指出交易最熱絡的區域或建案。",
        "3. **市場快評**：基於數據，用一句話總結目前市場狀態 (例如：價漲量縮、特定區域獨強等)。",
        "",
        "4. **各區成交詳情列表**：",
        "請直接將上方提供的【各行政區成交詳情】整理輸出，格式如下：",
        "### 行政區",
        "* **案名** 單價(區間) 房型(區間) 成交筆數",
    ])
    return "\n".join(lines)
