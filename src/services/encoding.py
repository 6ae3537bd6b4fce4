"""實價登錄 CSV 編碼判斷.

政府開放資料有時以 UTF-8 提供，有時仍是 Big5（Windows 上常見為 CP950）。
先以 UTF-8 解碼並檢查是否出現已知的欄位或地名字樣，沒有的話才改用舊編碼。
"""

import logging
from dataclasses import dataclass
from typing import Tuple

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"

# 依序嘗試的舊編碼
LEGACY_ENCODINGS: Tuple[str, ...] = ("big5", "cp950")

# 出現任一字樣即視為 UTF-8 解碼正確
DOMAIN_MARKERS: Tuple[str, ...] = ("預售屋", "建案", "臺北市", "行政區")


@dataclass(frozen=True)
class DecodedText:
    """解碼結果."""
    text: str
    encoding: str
    fallback: bool = False  # 舊編碼皆失敗，退回 UTF-8 結果


def _has_domain_marker(text: str) -> bool:
    return any(marker in text for marker in DOMAIN_MARKERS)


def resolve_encoding(buffer: bytes) -> DecodedText:
    """
    判斷位元組內容的編碼並解碼。

    Args:
        buffer: 原始檔案內容

    Returns:
        DecodedText，此函式不會拋出例外
    """
    text_utf8 = buffer.decode(DEFAULT_ENCODING, errors="replace")

    if _has_domain_marker(text_utf8):
        logger.debug(f"偵測到領域字樣，使用 UTF-8 | size={len(buffer)}")
        return DecodedText(text=text_utf8, encoding=DEFAULT_ENCODING)

    for encoding in LEGACY_ENCODINGS:
        try:
            text = buffer.decode(encoding)
        except UnicodeDecodeError as exc:
            logger.warning(f"舊編碼解碼失敗 | encoding={encoding} | error={exc.reason}")
            continue
        logger.info(f"檢測到編碼 | encoding={encoding}")
        return DecodedText(text=text, encoding=encoding)

    logger.warning("無法以舊編碼解碼，使用 UTF-8 結果")
    return DecodedText(text=text_utf8, encoding=DEFAULT_ENCODING, fallback=True)


def decode_content(buffer: bytes) -> str:
    """將位元組內容解碼為文字（便捷函式）."""
    return resolve_encoding(buffer).text
