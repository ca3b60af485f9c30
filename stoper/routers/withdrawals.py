from datetime import date
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from stoper.deps import require_user, get_inventory
from stoper.error import abort
from stoper.models import User
from stoper.schemas import (
    HistoryPeriod,
    ReversalResult,
    WithdrawalCreate,
    WithdrawalRead,
    WithdrawalResult,
)
from stoper.services.export import export_filename, export_to_csv, export_to_xlsx
from stoper.services.inventory import InventoryService
from stoper.services.reports import filter_by_date_range, filter_by_period, search_withdrawals

router = APIRouter(prefix="/withdrawals", tags=["withdrawals"])


def _history(
    inventory: InventoryService,
    q: Optional[str],
    period: HistoryPeriod,
    start: Optional[date],
    end: Optional[date],
) -> list[WithdrawalRead]:
    if start is not None and end is not None and start > end:
        abort(400, "BAD_REQUEST", "start deve ser anterior ou igual a end")

    items = inventory.list_withdrawals()
    items = search_withdrawals(items, q)
    items = filter_by_period(items, period)
    if start is not None or end is not None:
        items = filter_by_date_range(items, start, end)
    return items


def _download_headers(filename: str) -> dict:
    return {"Content-Disposition": f"attachment; filename=\"{filename}\"; filename*=UTF-8''{quote(filename)}"}


@router.post("", response_model=WithdrawalResult)
def create_withdrawal(
    data: WithdrawalCreate,
    inventory: InventoryService = Depends(get_inventory),
    _user: User = Depends(require_user),
):
    return inventory.record_withdrawal(data)


@router.get("", response_model=list[WithdrawalRead])
def list_withdrawals(
    q: Optional[str] = Query(None, description="Busca por ferramenta, supervisor, operador, TAG ou turma"),
    period: HistoryPeriod = Query(HistoryPeriod.all, description="all/today/week/month"),
    start: Optional[date] = Query(None, description="Data inicial (inclusiva), ex.: 2026-10-01"),
    end: Optional[date] = Query(None, description="Data final (inclusiva, dia inteiro)"),
    inventory: InventoryService = Depends(get_inventory),
    _user: User = Depends(require_user),
):
    return _history(inventory, q, period, start, end)


@router.get("/export.csv")
def export_withdrawals_csv(
    q: Optional[str] = None,
    period: HistoryPeriod = HistoryPeriod.all,
    start: Optional[date] = None,
    end: Optional[date] = None,
    inventory: InventoryService = Depends(get_inventory),
    _user: User = Depends(require_user),
):
    content = export_to_csv(_history(inventory, q, period, start, end))
    if content is None:
        return Response(status_code=204)

    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers=_download_headers(export_filename("csv")),
    )


@router.get("/export.xlsx")
def export_withdrawals_xlsx(
    q: Optional[str] = None,
    period: HistoryPeriod = HistoryPeriod.all,
    start: Optional[date] = None,
    end: Optional[date] = None,
    inventory: InventoryService = Depends(get_inventory),
    _user: User = Depends(require_user),
):
    content = export_to_xlsx(_history(inventory, q, period, start, end))
    return Response(
        content=content,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=_download_headers(export_filename("xlsx")),
    )


@router.delete("/{withdrawal_id}", response_model=ReversalResult)
def reverse_withdrawal(
    withdrawal_id: str,
    inventory: InventoryService = Depends(get_inventory),
    _user: User = Depends(require_user),
):
    return inventory.reverse_withdrawal(withdrawal_id)
