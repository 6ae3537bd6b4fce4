"""Presale Tracker Web API - FastAPI application."""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from src.config import load_config
from web_api.routers import presale

config = load_config()

# 設定日誌
logging.basicConfig(
    level=config.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """應用程式生命週期管理"""
    logger.info(f"🚀 Presale Tracker Web API 啟動中... | resource={config.resource_id}")

    yield

    logger.info("👋 Presale Tracker Web API 關閉")


# 創建 FastAPI 應用
app = FastAPI(
    title="Presale Tracker Web API",
    description="臺北市預售屋實價登錄彙整 Web API",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

# CORS 設定（允許前端跨域請求）
origins = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]
if config.frontend_url:
    origins.append(config.frontend_url)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# 全域異常處理
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"全域異常：{exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "detail": "伺服器內部錯誤",
            "success": False
        }
    )


# 註冊路由
app.include_router(presale.router, prefix="/api")


@app.get("/health", tags=["健康檢查"])
async def health_check():
    """健康檢查端點（用於部署監控）"""
    return {
        "status": "healthy",
        "service": "Presale Tracker Web API",
        "version": "1.0.0"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "web_api.main:app",
        host="0.0.0.0",
        port=config.port,
        reload=True
    )
