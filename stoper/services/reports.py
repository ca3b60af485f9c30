"""
Aggregation engine: read-only views over the withdrawal ledger.

All functions take plain sequences and return new lists; nothing here touches
the database. Dates are local naive datetimes, "today" can be injected for
tests.
"""
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from typing import Iterable, Sequence

from stoper.constants import REASONS
from stoper.schemas import (
    DashboardStats,
    EvolutionPoint,
    Granularity,
    HistoryPeriod,
    ReasonConsumption,
    ToolConsumption,
    ToolRead,
    WithdrawalRead,
)
from stoper.services.validation import is_critical

# pt-BR short month names, as the dashboard prints them
_MONTHS_PT = ["jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez"]

END_OF_DAY = time(23, 59, 59, 999000)


def filter_by_date_range(
    withdrawals: Iterable[WithdrawalRead],
    start: date | None = None,
    end: date | None = None,
) -> list[WithdrawalRead]:
    start_dt = datetime.combine(start, time.min) if start else None
    end_dt = datetime.combine(end, END_OF_DAY) if end else None

    out = []
    for w in withdrawals:
        if start_dt is not None and w.date < start_dt:
            continue
        if end_dt is not None and w.date > end_dt:
            continue
        out.append(w)
    return out


def filter_by_period(
    withdrawals: Iterable[WithdrawalRead],
    period: HistoryPeriod,
    today: date | None = None,
) -> list[WithdrawalRead]:
    if period == HistoryPeriod.all:
        return list(withdrawals)

    today = today or date.today()
    if period == HistoryPeriod.today:
        since = today
    elif period == HistoryPeriod.week:
        since = today - timedelta(days=7)
    else:
        since = _shift_month(today, -1)
    return filter_by_date_range(withdrawals, start=since)


def search_withdrawals(withdrawals: Iterable[WithdrawalRead], term: str | None) -> list[WithdrawalRead]:
    needle = (term or "").strip().lower()
    if not needle:
        return list(withdrawals)

    def hit(w: WithdrawalRead) -> bool:
        fields = (w.tool_name, w.supervisor, w.operator, w.rig_tag, w.team)
        return any(needle in (f or "").lower() for f in fields)

    return [w for w in withdrawals if hit(w)]


def consumption_by_tool(
    withdrawals: Iterable[WithdrawalRead],
    inventory: Sequence[ToolRead],
) -> list[ToolConsumption]:
    totals: dict[str, int] = defaultdict(int)
    for w in withdrawals:
        totals[w.tool_id] += w.quantity

    rows = [
        ToolConsumption(
            tool_id=t.id,
            name=t.display_name,
            model=t.model,
            type=t.type,
            total=totals[t.id],
        )
        for t in inventory
        if totals.get(t.id, 0) > 0
    ]
    rows.sort(key=lambda r: r.total, reverse=True)
    return rows


def consumption_by_reason(
    withdrawals: Iterable[WithdrawalRead],
    reasons: Sequence[str] = REASONS,
) -> list[ReasonConsumption]:
    totals: dict[str, int] = defaultdict(int)
    for w in withdrawals:
        totals[w.reason] += w.quantity

    rows = [ReasonConsumption(reason=r, total=totals.get(r, 0)) for r in reasons]
    # sort is stable: ties keep enumeration order
    rows.sort(key=lambda r: r.total, reverse=True)
    return rows


def count_today(withdrawals: Iterable[WithdrawalRead], today: date | None = None) -> int:
    today = today or date.today()
    return sum(1 for w in withdrawals if w.date.date() == today)


def low_stock(inventory: Iterable[ToolRead]) -> list[ToolRead]:
    return [t for t in inventory if is_critical(t)]


def most_used_model(withdrawals: Iterable[WithdrawalRead], inventory: Sequence[ToolRead]) -> str:
    model_of = {t.id: t.model.value for t in inventory}
    totals: dict[str, int] = defaultdict(int)
    for w in withdrawals:
        model = model_of.get(w.tool_id)
        if model:
            totals[model] += w.quantity

    if not totals:
        return "N/A"
    return max(totals.items(), key=lambda kv: kv[1])[0]


def dashboard_stats(
    inventory: Sequence[ToolRead],
    withdrawals: Sequence[WithdrawalRead],
    today: date | None = None,
) -> DashboardStats:
    critical = low_stock(inventory)
    return DashboardStats(
        total_tools=sum(t.quantity for t in inventory),
        low_stock_count=len(critical),
        withdrawals_today=count_today(withdrawals, today),
        most_used_model=most_used_model(withdrawals, inventory),
        low_stock=critical,
    )


def _shift_month(d: date, months: int) -> date:
    idx = d.year * 12 + (d.month - 1) + months
    year, month = divmod(idx, 12)
    month += 1
    # clamp the day for short months (31/03 - 1 month -> 28/02)
    for day in (d.day, 30, 29, 28):
        try:
            return date(year, month, day)
        except ValueError:
            continue
    raise ValueError(f"cannot shift {d} by {months} months")


def _period_start(d: date, granularity: Granularity) -> date:
    if granularity == Granularity.daily:
        return d
    if granularity == Granularity.weekly:
        return d - timedelta(days=d.weekday())  # Monday
    return d.replace(day=1)


def _next_period(d: date, granularity: Granularity) -> date:
    if granularity == Granularity.daily:
        return d + timedelta(days=1)
    if granularity == Granularity.weekly:
        return d + timedelta(days=7)
    return _shift_month(d, 1)


def period_label(start: date, granularity: Granularity) -> str:
    if granularity == Granularity.daily:
        return start.strftime("%d/%m")
    if granularity == Granularity.weekly:
        return f"Sem. {start.strftime('%d/%m')}"
    return f"{_MONTHS_PT[start.month - 1]}/{start.strftime('%y')}"


def evolution_series(
    withdrawals: Sequence[WithdrawalRead],
    granularity: Granularity,
    today: date | None = None,
) -> list[EvolutionPoint]:
    """
    Total withdrawn quantity per period, from the earliest withdrawal's period
    up to and including today's period. Periods without activity are kept with
    total 0.
    """
    if not withdrawals:
        return []

    today = today or date.today()
    earliest = min(w.date.date() for w in withdrawals)

    totals: dict[date, int] = defaultdict(int)
    for w in withdrawals:
        totals[_period_start(w.date.date(), granularity)] += w.quantity

    last = _period_start(today, granularity)
    current = _period_start(earliest, granularity)

    series = []
    while current <= last:
        series.append(
            EvolutionPoint(
                period_start=current,
                label=period_label(current, granularity),
                total=totals.get(current, 0),
            )
        )
        current = _next_period(current, granularity)
    return series
