"""實價登錄 CSV 解析.

資料來源的 CSV 並不完全符合 RFC 4180：欄位內可能夾帶逗號、引號，
而且常有 BOM 與零寬字元。這裡以逐字元掃描的方式切欄位，
引號切換「是否在引號內」的狀態，引號內的兩個連續引號視為字面引號。
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

_LEADING_BOM = re.compile(r"^\ufeff")
_ZERO_WIDTH = re.compile(r"[\u200b-\u200d\ufeff]")
_LINE_BREAK = re.compile(r"\r\n|\n")


class PresaleDataError(ValueError):
    """資料無法解析或處理時拋出，附帶第一筆原始資料以便除錯."""

    def __init__(self, message: str, first_record: Optional["RawRecord"] = None):
        super().__init__(message)
        self.first_record = first_record

    @property
    def diagnostic(self) -> Optional[str]:
        if self.first_record is None:
            return None
        return describe_record(self.first_record)


@dataclass
class RawRecord:
    """
    單行原始資料。

    以 (欄位名稱, 值) 的有序列表保存，重複的欄位名稱不會被合併；
    以欄位名稱取值時以第一個出現者為準。
    """
    pairs: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def headers(self) -> List[str]:
        return [header for header, _ in self.pairs]

    def get(self, header: str, default: Optional[str] = None) -> Optional[str]:
        for key, value in self.pairs:
            if key == header:
                return value
        return default

    def to_dict(self) -> Dict[str, str]:
        result: Dict[str, str] = {}
        for key, value in self.pairs:
            result.setdefault(key, value)
        return result

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)


def describe_record(record: RawRecord) -> str:
    """將原始資料格式化為 JSON 文字（錯誤訊息用）."""
    return json.dumps(record.to_dict(), ensure_ascii=False, indent=2)


def clean_text(text: str) -> str:
    """移除開頭 BOM 與所有零寬字元."""
    return _ZERO_WIDTH.sub("", _LEADING_BOM.sub("", text))


def parse_header(line: str) -> List[str]:
    """解析標題列：以逗號切開、去空白、去掉頭尾各一個引號."""
    headers = []
    for raw in line.split(","):
        header = raw.strip()
        if header.startswith('"'):
            header = header[1:]
        if header.endswith('"'):
            header = header[:-1]
        headers.append(_ZERO_WIDTH.sub("", header))
    return headers


def split_fields(line: str) -> List[str]:
    """
    逐字元切割一行資料。

    引號切換「引號內」狀態，引號內的逗號不切欄位；
    引號內連續兩個引號視為一個字面引號。

    Examples:
        'A,"B,C",D' -> ["A", "B,C", "D"]
    """
    fields: List[str] = []
    current: List[str] = []
    inside_quote = False
    index = 0
    length = len(line)

    while index < length:
        char = line[index]
        if char == '"':
            if inside_quote and index + 1 < length and line[index + 1] == '"':
                current.append('"')
                index += 2
                continue
            inside_quote = not inside_quote
        elif char == "," and not inside_quote:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        index += 1

    fields.append("".join(current))
    return fields


def parse_csv(text: str) -> List[RawRecord]:
    """
    將 CSV 文字解析為原始資料列表。

    Args:
        text: 已解碼的 CSV 文字

    Returns:
        RawRecord 列表；沒有資料列時回傳空列表
    """
    lines = _LINE_BREAK.split(clean_text(text))
    if len(lines) < 2:
        return []

    headers = parse_header(lines[0])
    records: List[RawRecord] = []

    for raw_line in lines[1:]:
        line = raw_line.strip()
        if not line:
            continue

        values = split_fields(line)
        pairs = [
            (header, values[index].strip() if index < len(values) else "")
            for index, header in enumerate(headers)
        ]
        records.append(RawRecord(pairs=pairs))

    logger.debug(f"CSV 解析完成 | headers={len(headers)} | rows={len(records)}")
    return records


def parse_csv_strict(text: str) -> List[RawRecord]:
    """同 parse_csv，但內容完全沒有逗號時視為非 CSV 並拋出 PresaleDataError."""
    if not text or "," not in text:
        raise PresaleDataError("回傳資料格式錯誤（非 CSV）")
    return parse_csv(text)
