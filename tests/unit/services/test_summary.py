"""
Unit tests for src/services/summary.py
"""

from dataclasses import replace
from datetime import date

from src.services.aggregator import aggregate
from src.services.csv_parser import parse_csv
from src.services.normalizer import (
    NormalizedRow,
    NormalizedTransaction,
    RoomType,
    normalize_records,
)
from src.services.summary import (
    build_result,
    format_total_amount,
    rank_projects,
    sort_transactions,
    summarize_project,
)


def _transaction(**overrides) -> NormalizedTransaction:
    values = dict(
        district="大安區",
        project_name="測試建案",
        address="大安區仁愛路",
        transaction_date_raw="1121015",
        transaction_date=date(2023, 10, 15),
        unit_price=15.0,
        total_price=1500.0,
        net_area=30.0,
        floor="五層",
        room_type=RoomType.TWO_ROOM,
        is_special_unit=False,
        notes="",
        case_object="房地(土地+建物)",
    )
    values.update(overrides)
    return NormalizedTransaction(**values)


def _project(*transactions, parking=()):
    rows = [
        NormalizedRow(project_name=t.project_name, transaction=t, parking_price=0.0)
        for t in transactions
    ]
    rows.extend(
        NormalizedRow(project_name="測試建案", transaction=None, parking_price=price)
        for price in parking
    )
    return aggregate(rows)["測試建案"]


# ============================================================
# format helpers
# ============================================================


class TestFormatTotalAmount:
    def test_hundred_millions(self):
        assert format_total_amount(123456) == "12億3456萬"

    def test_under_hundred_million(self):
        assert format_total_amount(7500) == "0億7500萬"

    def test_remainder_rounded(self):
        assert format_total_amount(10000.6) == "1億1萬"

    def test_remainder_carries_into_hundred_millions(self):
        assert format_total_amount(9999.6) == "1億0萬"
        assert format_total_amount(19999.5) == "2億0萬"


# ============================================================
# summarize_project tests
# ============================================================


class TestSummarizeProject:
    """Tests for summarize_project function."""

    def test_fixture_project(self, presale_csv_text):
        normalized = normalize_records(parse_csv(presale_csv_text))
        project = aggregate(normalized.rows)["測試建案"]
        summary = summarize_project(project)

        assert summary.transaction_count == 2
        assert summary.price_range == "110.0 - 120.0"
        assert summary.avg_price_num == 115.0
        assert summary.total_amount == "0億7500萬"
        assert summary.raw_total_amount == 7500
        assert summary.area_range == "27.30 - 30.00"
        assert summary.total_price_range == "3000 - 4500"
        assert summary.date_range == "112/06/01 - 112/10/15"
        assert summary.last_date == "112/10/15"
        assert summary.parking.count == 1
        assert summary.parking.avg == "250"
        assert summary.parking.range == "250"
        assert summary.special.count == 1
        assert summary.special.desc == "1戶"

        three_room = summary.room_types["3房"]
        assert three_room.count == 1
        assert three_room.area_range == "30.0坪"
        assert three_room.total_range == "4500萬"
        assert three_room.unit_price_range == "120.0萬"

        two_room = summary.room_types["2房"]
        assert two_room.area_range == "27.3坪"
        assert two_room.total_range == "3000萬"
        assert two_room.unit_price_range == "110.0萬"

    def test_price_range(self):
        summary = summarize_project(_project(
            _transaction(unit_price=15.0),
            _transaction(unit_price=20.0),
        ))
        assert summary.price_range == "15.0 - 20.0"
        assert summary.avg_price_num == 17.5

    def test_single_price_collapses(self):
        summary = summarize_project(_project(_transaction(unit_price=15.0)))
        assert summary.price_range == "15.0"

    def test_no_valid_unit_price(self):
        summary = summarize_project(_project(_transaction(unit_price=5.0)))
        assert summary.price_range == "0"
        assert summary.avg_price_num == 0.0
        assert summary.room_types["2房"].unit_price_range == "0.0萬"

    def test_room_type_ranges(self):
        summary = summarize_project(_project(
            _transaction(net_area=25.3, total_price=1500.0, unit_price=60.5),
            _transaction(net_area=30.1, total_price=1800.0, unit_price=62.0),
        ))
        stat = summary.room_types["2房"]
        assert stat.count == 2
        assert stat.area_range == "25.3-30.1坪"
        assert stat.total_range == "1500-1800萬"
        assert stat.unit_price_range == "60.5-62.0萬"

    def test_date_fallback_to_raw_strings(self):
        summary = summarize_project(_project(
            _transaction(transaction_date_raw="abd", transaction_date=None),
            _transaction(transaction_date_raw="abc", transaction_date=None),
        ))
        assert summary.date_range == "abc - abd"
        assert summary.last_date == "-"

    def test_no_dates(self):
        summary = summarize_project(_project(
            _transaction(transaction_date_raw="", transaction_date=None),
        ))
        assert summary.date_range == "-"
        assert summary.last_date == "-"

    def test_parking_summary(self):
        summary = summarize_project(_project(_transaction(), parking=(200.0, 280.0)))
        assert summary.parking.count == 2
        assert summary.parking.avg == "240"
        assert summary.parking.range == "200-280"

    def test_no_parking_or_special(self):
        summary = summarize_project(_project(_transaction()))
        assert summary.parking.avg == "-"
        assert summary.parking.range == "-"
        assert summary.special.desc == "-"

    def test_idempotent(self):
        project = _project(_transaction(), _transaction(unit_price=20.0))
        assert summarize_project(project) == summarize_project(project)

    def test_tiny_sample_counted_but_not_in_range(self):
        summary = summarize_project(_project(
            _transaction(unit_price=15.0),
            _transaction(unit_price=20.0),
            _transaction(unit_price=15.0),
            _transaction(unit_price=5.0),
        ))
        assert summary.price_range == "15.0 - 20.0"
        assert summary.transaction_count == 4

    def test_average_tie_rounds_up(self):
        summary = summarize_project(_project(
            _transaction(unit_price=17.2),
            _transaction(unit_price=17.3),
        ))
        assert summary.avg_price_num == 17.3

    def test_range_ties_round_up(self, make_record):
        record = make_record({"總價元": "15005000", "建物移轉總面積坪": "30.125"})
        normalized = normalize_records([record])
        summary = summarize_project(aggregate(normalized.rows)["測試建案"])

        assert summary.total_price_range == "1501"
        assert summary.area_range == "30.13"
        assert summary.total_amount == "0億1501萬"
        assert summary.room_types["2房"].total_range == "1501萬"


# ============================================================
# sorting tests
# ============================================================


class TestRankProjects:
    def test_count_then_total(self):
        base = summarize_project(_project(_transaction()))
        a = replace(base, name="A", transaction_count=10, raw_total_amount=100.0)
        b = replace(base, name="B", transaction_count=10, raw_total_amount=200.0)
        c = replace(base, name="C", transaction_count=5, raw_total_amount=50.0)

        ranked = rank_projects([c, a, b])
        assert [p.name for p in ranked] == ["B", "A", "C"]


class TestSortTransactions:
    def test_newest_first_undated_last(self):
        transactions = [
            _transaction(transaction_date=date(2023, 1, 1)),
            _transaction(transaction_date=None),
            _transaction(transaction_date=date(2023, 6, 1)),
        ]
        ordered = sort_transactions(transactions)
        assert [t.transaction_date for t in ordered] == [
            date(2023, 6, 1),
            date(2023, 1, 1),
            None,
        ]


class TestBuildResult:
    def test_fixture_result(self, presale_csv_text):
        normalized = normalize_records(parse_csv(presale_csv_text))
        result = build_result(aggregate(normalized.rows), normalized.transactions)

        assert [p.name for p in result.projects] == ["測試建案", "信義天廈"]
        assert len(result.transactions) == 3
        assert result.transactions[0].transaction_date == date(2023, 10, 15)
        assert result.transactions[-1].transaction_date == date(2023, 3, 1)
