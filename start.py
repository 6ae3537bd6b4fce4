"""
Presale Tracker 啟動腳本

啟動 Web API；設定 REFRESH_ON_START=true 時會先抓取一次開放資料。
"""
import asyncio
import os
import sys
import logging

from src.config import load_config

config = load_config()

logging.basicConfig(
    level=config.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def refresh_open_data() -> None:
    """啟動前先抓取開放資料（失敗時仍繼續啟動，可改用上傳 CSV）"""
    from src.services import open_data_fetcher

    try:
        result = asyncio.run(open_data_fetcher.refresh_from_open_data(config))
        logger.info(
            f"✅ 開放資料已載入 | 建案數={len(result.result.projects)} | "
            f"預售={result.stats.presale} | 過濾={result.stats.filtered}"
        )
    except Exception as e:
        logger.warning(f"⚠️ 開放資料載入失敗: {e}")


def run_web_api():
    """運行 Web API"""
    logger.info("🌐 啟動 Web API...")
    try:
        import uvicorn
        from web_api.main import app

        uvicorn.run(
            app,
            host="0.0.0.0",
            port=config.port,
            log_level=config.log_level.lower()
        )
    except Exception as e:
        logger.error(f"❌ Web API 啟動失敗: {e}")
        sys.exit(1)


if __name__ == "__main__":
    logger.info("=" * 60)
    logger.info("🚀 Presale Tracker 啟動中...")
    logger.info("=" * 60)

    if os.getenv("REFRESH_ON_START", "false").lower() in ("true", "1", "yes"):
        refresh_open_data()

    logger.info(f"📖 API 文檔：http://localhost:{config.port}/api/docs")
    run_web_api()
