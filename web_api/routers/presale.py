"""Presale transaction endpoints for Web API."""
from typing import List, Optional
from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from web_api.models import schemas
from src.services import market_analysis, open_data_fetcher, presale_pipeline
from src.services.csv_parser import PresaleDataError
from src.services.presale_pipeline import PipelineResult
from src.services.summary import ProjectSummary
from src.utils.formatting import format_fixed

router = APIRouter(prefix="/presale", tags=["預售屋實價登錄"])


def _require_result() -> PipelineResult:
    result = presale_pipeline.get_result_store().get()
    if result is None:
        raise HTTPException(status_code=404, detail="尚未載入資料，請先上傳 CSV 或更新開放資料")
    return result


def _empty_result(result: PipelineResult) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=(
            "篩選後無「預售屋」資料。請檢查偵測到的第一筆資料格式是否正確（是否有亂碼？）：\n"
            f"{result.describe_first_record()}"
        ),
    )


def _accept(result: PipelineResult) -> schemas.ProcessResponse:
    """過濾後無資料時回報第一筆原始資料，否則更新目前結果."""
    if result.is_empty:
        raise _empty_result(result)

    presale_pipeline.get_result_store().set(result)
    return _to_process_response(result)


def _to_process_response(result: PipelineResult) -> schemas.ProcessResponse:
    stats = result.stats
    return schemas.ProcessResponse(
        stats=schemas.DatasetStats(
            total_raw=stats.total_raw,
            presale=stats.presale,
            filtered=stats.filtered,
            reasons={reason.value: count for reason, count in stats.reasons.items()},
        ),
        project_count=len(result.result.projects),
        transaction_count=len(result.result.transactions),
        encoding=result.encoding,
        processed_at=result.processed_at,
    )


def _to_project_model(project: ProjectSummary) -> schemas.ProjectSummary:
    return schemas.ProjectSummary(
        name=project.name,
        district=project.district,
        address=project.address,
        transaction_count=project.transaction_count,
        price_range=project.price_range,
        avg_price_num=project.avg_price_num,
        total_amount=project.total_amount,
        raw_total_amount=project.raw_total_amount,
        area_range=project.area_range,
        total_price_range=project.total_price_range,
        room_types={
            room_type: schemas.RoomTypeStat(
                count=stat.count,
                area_range=stat.area_range,
                total_range=stat.total_range,
                unit_price_range=stat.unit_price_range,
            )
            for room_type, stat in project.room_types.items()
        },
        date_range=project.date_range,
        last_date=project.last_date,
        parking=schemas.ParkingInfo(
            count=project.parking.count,
            avg=project.parking.avg,
            range=project.parking.range,
        ),
        special=schemas.SpecialInfo(count=project.special.count, desc=project.special.desc),
    )


def _bad_data(exc: PresaleDataError) -> HTTPException:
    detail = str(exc)
    if exc.diagnostic:
        detail = f"{detail}\n{exc.diagnostic}"
    return HTTPException(status_code=400, detail=detail)


@router.post("/upload", response_model=schemas.ProcessResponse, summary="上傳 CSV 檔案")
async def upload_csv(file: UploadFile = File(...)):
    """
    上傳實價登錄 CSV 檔案

    自動判斷 UTF-8 / Big5 編碼，解析後依建案彙整。
    """
    content = await file.read()
    try:
        result = presale_pipeline.process_bytes(content)
    except PresaleDataError as exc:
        raise _bad_data(exc)
    return _accept(result)


@router.post("/text", response_model=schemas.ProcessResponse, summary="貼上 CSV 文字")
async def upload_text(request: schemas.TextUploadRequest):
    """解析貼上的 CSV 文字並依建案彙整"""
    if not request.csv_text.strip():
        raise HTTPException(status_code=400, detail="CSV 文字不可為空")
    try:
        result = presale_pipeline.process_text(request.csv_text)
    except PresaleDataError as exc:
        raise _bad_data(exc)
    return _accept(result)


@router.post("/refresh", response_model=schemas.ProcessResponse, summary="更新開放資料")
async def refresh():
    """從臺北市資料開放平台抓取最新預售屋實價登錄資料"""
    try:
        result = await open_data_fetcher.refresh_from_open_data()
    except open_data_fetcher.OpenDataFetchError as exc:
        raise HTTPException(
            status_code=502,
            detail=f"自動更新失敗：{exc}\n建議：請改用上傳 CSV 功能載入資料。",
        )
    except PresaleDataError as exc:
        raise _bad_data(exc)

    # refresh_from_open_data 只在有建案時更新結果
    if result.is_empty:
        raise _empty_result(result)
    return _to_process_response(result)


@router.get("/projects", response_model=List[schemas.ProjectSummary], summary="建案統計列表")
async def get_projects(
    district: Optional[str] = Query(None, description="篩選行政區"),
    keyword: Optional[str] = Query(None, description="建案名稱、行政區或地址關鍵字"),
):
    """
    查詢建案統計列表

    依成交筆數（其次為總銷金額）由多到少排序。
    """
    projects = _require_result().result.projects

    if district:
        projects = [p for p in projects if p.district == district]
    if keyword:
        projects = [
            p for p in projects
            if keyword in p.name or keyword in p.district or keyword in p.address
        ]

    return [_to_project_model(p) for p in projects]


@router.get("/transactions", response_model=List[schemas.Transaction], summary="最新成交列表")
async def get_transactions(
    keyword: Optional[str] = Query(None, description="建案名稱或行政區關鍵字"),
    limit: int = Query(100, ge=1, le=5000, description="筆數上限"),
):
    """依交易日期由新到舊列出成交明細，無日期者排在最後"""
    transactions = _require_result().result.transactions
    if keyword:
        transactions = [
            t for t in transactions if keyword in t.project_name or keyword in t.district
        ]
    transactions = transactions[:limit]
    return [
        schemas.Transaction(
            district=t.district,
            project_name=t.project_name,
            date_raw=t.transaction_date_raw,
            transaction_date=t.transaction_date,
            unit_price=format_fixed(t.unit_price, 1),
            total_price=format_fixed(t.total_price, 0),
            area=format_fixed(t.net_area, 2),
            room_type=t.room_type.value,
            floor=t.floor,
            is_special_unit=t.is_special_unit,
            case_object=t.case_object,
        )
        for t in transactions
    ]


@router.get("/stats", response_model=schemas.ProcessResponse, summary="資料統計")
async def get_stats():
    """目前載入資料的筆數統計"""
    return _to_process_response(_require_result())


@router.get("/analysis", response_model=schemas.MarketAnalysis, summary="市場分析摘要")
async def get_analysis():
    """產生市場分析所需的區域行情、排行與提示文字"""
    projects = _require_result().result.projects
    try:
        overview = market_analysis.build_market_overview(projects)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    return schemas.MarketAnalysis(
        project_count=overview.project_count,
        total_transactions=overview.total_transactions,
        avg_price_overall=overview.avg_price_overall,
        districts=[
            schemas.DistrictStat(
                district=d.district,
                avg_price=d.avg_price,
                transactions=d.transactions,
                project_count=d.project_count,
            )
            for d in overview.districts
        ],
        top_expensive=[p.name for p in overview.top_expensive],
        top_volume=[p.name for p in overview.top_volume],
        prompt=market_analysis.build_analysis_prompt(overview),
    )
