"""
Unit tests for src/services/normalizer.py
"""

from datetime import date

import pytest

from src.services.csv_parser import parse_csv
from src.services.normalizer import (
    RejectReason,
    RoomType,
    classify_room_type,
    fix_unit_scale,
    is_presale,
    is_special_unit,
    normalize_record,
    normalize_records,
)


# ============================================================
# helper tests
# ============================================================


class TestClassifyRoomType:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("0", RoomType.OPEN_PLAN),
            ("", RoomType.OPEN_PLAN),
            (None, RoomType.OPEN_PLAN),
            ("1", RoomType.ONE_ROOM),
            ("2", RoomType.TWO_ROOM),
            ("3", RoomType.THREE_ROOM),
            ("4", RoomType.FOUR_PLUS_ROOM),
            ("6", RoomType.FOUR_PLUS_ROOM),
        ],
    )
    def test_classification(self, value, expected):
        assert classify_room_type(value) is expected

    def test_labels(self):
        assert RoomType.OPEN_PLAN.value == "開放式格局"
        assert RoomType.FOUR_PLUS_ROOM.value == "4房"


class TestIsSpecialUnit:
    def test_first_floor_chinese(self):
        assert is_special_unit("一層", "")

    def test_first_floor_digit(self):
        assert is_special_unit("1", "")

    def test_terrace_note(self):
        assert is_special_unit("五層", "含露台")

    def test_special_note(self):
        assert is_special_unit("五層", "特殊交易")

    def test_regular_unit(self):
        assert not is_special_unit("五層", "")

    def test_floor_eleven_is_not_digit_one(self):
        assert not is_special_unit("11", "")


class TestFixUnitScale:
    def test_unit_price_in_yuan(self):
        assert fix_unit_scale(120000, 10000) == 12

    def test_total_price_in_yuan(self):
        assert fix_unit_scale(5000000, 1000000) == 500

    def test_already_in_ten_thousands(self):
        assert fix_unit_scale(8000, 10000) == 8000

    def test_threshold_not_converted(self):
        assert fix_unit_scale(10000, 10000) == 10000


class TestIsPresale:
    def test_presale(self):
        assert is_presale("預售屋")

    def test_completed_house(self):
        assert not is_presale("成屋")

    def test_missing_case_type(self):
        assert is_presale(None)
        assert is_presale("")


# ============================================================
# normalize_record tests
# ============================================================


class TestNormalizeRecord:
    """Tests for normalize_record function."""

    def test_valid_record(self, make_record):
        row, reason = normalize_record(make_record())
        assert reason is None
        transaction = row.transaction
        assert transaction.project_name == "測試建案"
        assert transaction.district == "大安區"
        assert transaction.unit_price == 15
        assert transaction.total_price == 3000
        assert transaction.net_area == 30
        assert transaction.transaction_date == date(2023, 10, 15)
        assert transaction.room_type is RoomType.TWO_ROOM
        assert transaction.is_special_unit is False

    def test_unit_conversion(self, make_record):
        row, _ = normalize_record(make_record({"單價元坪": "120000", "總價元": "5000000"}))
        assert row.transaction.unit_price == 12
        assert row.transaction.total_price == 500

    def test_values_in_ten_thousands_unchanged(self, make_record):
        row, _ = normalize_record(make_record({"單價元坪": "8000", "總價元": "8000"}))
        assert row.transaction.unit_price == 8000
        assert row.transaction.total_price == 8000

    def test_completed_house_rejected(self, make_record):
        row, reason = normalize_record(make_record({"CASE_T": "成屋"}))
        assert row is None
        assert reason is RejectReason.NOT_PRESALE

    def test_missing_name_rejected(self, make_record):
        row, reason = normalize_record(make_record({"建案名稱": ""}))
        assert row is None
        assert reason is RejectReason.MISSING_NAME

    def test_zero_price_keeps_parking(self, make_record):
        record = make_record({"單價元坪": "0", "總價元": "0", "車位總價元": "2000000"})
        row, reason = normalize_record(record)
        assert reason is RejectReason.NO_PRICE
        assert row.transaction is None
        assert row.parking_price == 200

    def test_net_area_floored_at_zero(self, make_record):
        row, _ = normalize_record(make_record({"建物移轉總面積坪": "5", "車位移轉總面積坪": "10"}))
        assert row.transaction.net_area == 0

    def test_net_area_subtracts_parking(self, make_record):
        row, _ = normalize_record(make_record({"建物移轉總面積坪": "40.5", "車位移轉總面積坪": "10.5"}))
        assert row.transaction.net_area == 30

    def test_invalid_date_kept_raw(self, make_record):
        row, _ = normalize_record(make_record({"交易年月日": "1121399"}))
        assert row.transaction.transaction_date is None
        assert row.transaction.transaction_date_raw == "1121399"

    def test_missing_case_type_column(self, make_record):
        record = make_record()
        record.pairs = [pair for pair in record.pairs if pair[0] != "CASE_T"]
        _, reason = normalize_record(record)
        assert reason is None

    def test_code_headers(self, code_header_csv_text):
        records = parse_csv(code_header_csv_text)
        row, reason = normalize_record(records[0])
        assert reason is None
        transaction = row.transaction
        assert transaction.project_name == "敦北新案"
        assert transaction.district == "松山區"
        assert transaction.unit_price == 85
        assert transaction.total_price == 1700
        assert transaction.net_area == 20
        assert transaction.room_type is RoomType.OPEN_PLAN
        assert transaction.transaction_date == date(2024, 1, 5)


class TestNormalizeRecords:
    def test_stats(self, presale_csv_text):
        result = normalize_records(parse_csv(presale_csv_text))
        stats = result.stats
        assert stats.total_raw == 5
        assert stats.presale == 3
        assert stats.filtered == 2
        assert stats.presale + stats.filtered == stats.total_raw
        assert stats.reasons == {
            RejectReason.NOT_PRESALE: 1,
            RejectReason.MISSING_NAME: 1,
        }

    def test_zero_price_counts_as_filtered(self, make_record):
        records = [make_record(), make_record({"單價元坪": "0", "總價元": "0"})]
        result = normalize_records(records)
        assert result.stats.presale == 1
        assert result.stats.filtered == 1
        assert len(result.rows) == 2
        assert len(result.transactions) == 1

    def test_keeps_input_order(self, presale_csv_text):
        result = normalize_records(parse_csv(presale_csv_text))
        assert [t.project_name for t in result.transactions] == ["測試建案", "測試建案", "信義天廈"]

    def test_empty_input(self):
        result = normalize_records([])
        assert result.rows == []
        assert result.stats.total_raw == 0
