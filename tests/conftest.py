"""
Shared pytest fixtures for all tests.
"""

from typing import Callable, Dict

import pytest

from src.services.csv_parser import RawRecord


# ============================================================
# Sample Data Fixtures
# ============================================================


PRESALE_HEADER = (
    "行政區,建案名稱,土地區段位置建物區段門牌,CASE_T,交易標的,交易年月日,"
    "單價元坪,總價元,建物移轉總面積坪,車位總價元,車位移轉總面積坪,交易樓層,"
    "建物現況格局-房,備註"
)


@pytest.fixture
def presale_csv_text() -> str:
    """Chinese-header CSV with two projects, one completed-house row and one unnamed row."""
    rows = [
        PRESALE_HEADER,
        '大安區,測試建案,"大安區仁愛路四段1~30號",預售屋,房地(土地+建物)+車位,1121015,'
        "1200000,45000000,40.5,2500000,10.5,五層,3,",
        "大安區,測試建案,大安區仁愛路四段1~30號,預售屋,房地(土地+建物),1120601,"
        "1100000,30000000,27.3,0,0,一層,2,含露台",
        "信義區,信義天廈,信義區松仁路1~50號,預售屋,房地(土地+建物),1120301,"
        "950000,20000000,21.0,0,0,十層,1,",
        "中山區,成屋案,中山區南京東路,成屋,房地(土地+建物),1120301,"
        "800000,16000000,20.0,0,0,五層,2,",
        "中山區,,中山區南京東路,預售屋,房地(土地+建物),1120301,"
        "800000,16000000,20.0,0,0,五層,2,",
    ]
    return "\r\n".join(rows) + "\r\n"


@pytest.fixture
def code_header_csv_text() -> str:
    """CSV using the machine-code column names of the secondary dataset variant."""
    rows = [
        "district,build_name,location,case_t,case_f,sdate,uprice,tprice,farea,pprice,parea,tbuild,build_r,rmnote",
        "松山區,敦北新案,松山區敦化北路,預售屋,房地(土地+建物),1130105,85,1700,20,0,0,八層,0,",
    ]
    return "\n".join(rows)


@pytest.fixture
def make_record() -> Callable[..., RawRecord]:
    """Build a RawRecord from a dict, filled with a valid presale row by default."""

    def _make(overrides: Dict[str, str] = None) -> RawRecord:
        values = {
            "行政區": "大安區",
            "建案名稱": "測試建案",
            "土地區段位置建物區段門牌": "大安區仁愛路四段1~30號",
            "CASE_T": "預售屋",
            "交易標的": "房地(土地+建物)",
            "交易年月日": "1121015",
            "單價元坪": "150000",
            "總價元": "30000000",
            "建物移轉總面積坪": "30",
            "車位總價元": "0",
            "車位移轉總面積坪": "0",
            "交易樓層": "五層",
            "建物現況格局-房": "2",
            "備註": "",
        }
        values.update(overrides or {})
        return RawRecord(pairs=list(values.items()))

    return _make
