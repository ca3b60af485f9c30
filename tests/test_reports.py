from datetime import date, datetime

from stoper.constants import REASONS, ToolModel, ToolType
from stoper.schemas import Granularity, HistoryPeriod, ToolRead, WithdrawalRead
from stoper.services import reports


def _tool(tid, model, type_, quantity=10, min_threshold=3):
    return ToolRead(id=tid, model=model, type=type_, quantity=quantity, min_threshold=min_threshold)


INVENTORY = [
    _tool("t51-haste", ToolModel.T51, ToolType.HASTE, 20, 8),
    _tool("t50-punho", ToolModel.T50, ToolType.PUNHO, 3, 3),
    _tool("t45-bit35", ToolModel.T45, ToolType.BIT_35, 22, 8),
]

_seq = iter(range(1, 10_000))


def _w(when, tool_id="t51-haste", quantity=1, reason="Desgaste", **kw):
    names = {t.id: t.display_name for t in INVENTORY}
    return WithdrawalRead(
        id=f"w{next(_seq)}",
        date=when,
        tool_id=tool_id,
        tool_name=names.get(tool_id, tool_id),
        quantity=quantity,
        reason=reason,
        **kw,
    )


def test_filter_by_date_range_includes_whole_days():
    ws = [
        _w(datetime(2026, 10, 9, 23, 59)),
        _w(datetime(2026, 10, 10, 0, 0)),
        _w(datetime(2026, 10, 12, 23, 59, 59, 500000)),
        _w(datetime(2026, 10, 13, 0, 0)),
    ]
    out = reports.filter_by_date_range(ws, date(2026, 10, 10), date(2026, 10, 12))
    assert [w.id for w in out] == [ws[1].id, ws[2].id]


def test_filter_by_date_range_open_bounds():
    ws = [_w(datetime(2026, 1, 1)), _w(datetime(2026, 6, 1))]
    assert len(reports.filter_by_date_range(ws)) == 2
    assert len(reports.filter_by_date_range(ws, start=date(2026, 3, 1))) == 1
    assert len(reports.filter_by_date_range(ws, end=date(2026, 3, 1))) == 1


def test_filter_by_period():
    today = date(2026, 10, 19)
    ws = [
        _w(datetime(2026, 10, 19, 7)),
        _w(datetime(2026, 10, 14)),
        _w(datetime(2026, 9, 25)),
        _w(datetime(2026, 8, 1)),
    ]
    assert len(reports.filter_by_period(ws, HistoryPeriod.all, today)) == 4
    assert len(reports.filter_by_period(ws, HistoryPeriod.today, today)) == 1
    assert len(reports.filter_by_period(ws, HistoryPeriod.week, today)) == 2
    assert len(reports.filter_by_period(ws, HistoryPeriod.month, today)) == 3


def test_search_withdrawals_matches_any_field():
    ws = [
        _w(datetime(2026, 10, 1), supervisor="Leandro", rig_tag="PH14", team="Turma A"),
        _w(datetime(2026, 10, 1), tool_id="t50-punho", operator="Carlos", rig_tag="PH22", team="Turma B"),
    ]
    assert len(reports.search_withdrawals(ws, "leandro")) == 1
    assert len(reports.search_withdrawals(ws, "ph22")) == 1
    assert len(reports.search_withdrawals(ws, "punho")) == 1
    assert len(reports.search_withdrawals(ws, "turma")) == 2
    assert len(reports.search_withdrawals(ws, "  ")) == 2


def test_consumption_by_tool_sorted_and_positive_only():
    ws = [
        _w(datetime(2026, 10, 1), quantity=2),
        _w(datetime(2026, 10, 2), tool_id="t45-bit35", quantity=5),
        _w(datetime(2026, 10, 3), quantity=1),
    ]
    rows = reports.consumption_by_tool(ws, INVENTORY)
    assert [(r.tool_id, r.total) for r in rows] == [("t45-bit35", 5), ("t51-haste", 3)]
    assert rows[0].name == "Bit 3,5'' T45"


def test_consumption_by_reason_empty_keeps_every_reason():
    rows = reports.consumption_by_reason([])
    assert [r.reason for r in rows] == REASONS
    assert all(r.total == 0 for r in rows)


def test_consumption_by_reason_sorted():
    ws = [
        _w(datetime(2026, 10, 1), quantity=3, reason="Trinca"),
        _w(datetime(2026, 10, 1), quantity=1, reason="Desgaste"),
        _w(datetime(2026, 10, 2), quantity=2, reason="Trinca"),
    ]
    rows = reports.consumption_by_reason(ws)
    assert rows[0].reason == "Trinca" and rows[0].total == 5
    assert rows[1].reason == "Desgaste" and rows[1].total == 1
    assert len(rows) == len(REASONS)


def test_count_today():
    today = date(2026, 10, 19)
    ws = [_w(datetime(2026, 10, 19, 0, 1)), _w(datetime(2026, 10, 19, 23, 59)), _w(datetime(2026, 10, 18, 23, 59))]
    assert reports.count_today(ws, today) == 2


def test_evolution_daily_fills_gaps():
    ws = [
        _w(datetime(2026, 10, 15, 8), quantity=2),
        _w(datetime(2026, 10, 17, 14), quantity=3),
        _w(datetime(2026, 10, 18, 9), quantity=1),
    ]
    series = reports.evolution_series(ws, Granularity.daily, today=date(2026, 10, 19))
    assert [p.label for p in series] == ["15/10", "16/10", "17/10", "18/10", "19/10"]
    assert [p.total for p in series] == [2, 0, 3, 1, 0]


def test_evolution_weekly_starts_on_monday():
    # 2026-10-18 is a Sunday, it belongs to the week of Monday 12/10
    ws = [
        _w(datetime(2026, 10, 18, 10), quantity=4),
        _w(datetime(2026, 10, 19, 10), quantity=1),
    ]
    series = reports.evolution_series(ws, Granularity.weekly, today=date(2026, 10, 21))
    assert [p.period_start for p in series] == [date(2026, 10, 12), date(2026, 10, 19)]
    assert [p.label for p in series] == ["Sem. 12/10", "Sem. 19/10"]
    assert [p.total for p in series] == [4, 1]


def test_evolution_monthly_spans_year_boundary():
    ws = [_w(datetime(2025, 11, 30), quantity=6), _w(datetime(2026, 2, 1), quantity=2)]
    series = reports.evolution_series(ws, Granularity.monthly, today=date(2026, 2, 10))
    assert [p.label for p in series] == ["nov/25", "dez/25", "jan/26", "fev/26"]
    assert [p.total for p in series] == [6, 0, 0, 2]


def test_evolution_empty_ledger():
    assert reports.evolution_series([], Granularity.daily) == []


def test_dashboard_stats():
    today = date(2026, 10, 19)
    ws = [
        _w(datetime(2026, 10, 19, 8), tool_id="t45-bit35", quantity=4),
        _w(datetime(2026, 10, 10), quantity=3),
    ]
    stats = reports.dashboard_stats(INVENTORY, ws, today)
    assert stats.total_tools == 45
    assert stats.low_stock_count == 1
    assert stats.low_stock[0].id == "t50-punho"
    assert stats.withdrawals_today == 1
    assert stats.most_used_model == "T45"


def test_most_used_model_without_withdrawals():
    assert reports.most_used_model([], INVENTORY) == "N/A"
