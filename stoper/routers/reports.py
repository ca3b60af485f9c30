from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query

from stoper.deps import require_user, get_inventory, get_insight_client
from stoper.error import abort
from stoper.models import User
from stoper.schemas import (
    DashboardStats,
    EvolutionPoint,
    Granularity,
    InsightsResponse,
    ReasonConsumption,
    ToolConsumption,
)
from stoper.services import reports
from stoper.services.insights import InsightClient
from stoper.services.inventory import InventoryService

router = APIRouter(prefix="/reports", tags=["reports"])


def _ranged(inventory: InventoryService, start: Optional[date], end: Optional[date]):
    if start is not None and end is not None and start > end:
        abort(400, "BAD_REQUEST", "start deve ser anterior ou igual a end")
    return reports.filter_by_date_range(inventory.list_withdrawals(), start, end)


@router.get("/dashboard", response_model=DashboardStats)
def dashboard(
    inventory: InventoryService = Depends(get_inventory),
    _user: User = Depends(require_user),
):
    return reports.dashboard_stats(inventory.list_tools(), inventory.list_withdrawals())


@router.get("/by-tool", response_model=list[ToolConsumption])
def by_tool(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    inventory: InventoryService = Depends(get_inventory),
    _user: User = Depends(require_user),
):
    return reports.consumption_by_tool(_ranged(inventory, start, end), inventory.list_tools())


@router.get("/by-reason", response_model=list[ReasonConsumption])
def by_reason(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    inventory: InventoryService = Depends(get_inventory),
    _user: User = Depends(require_user),
):
    return reports.consumption_by_reason(_ranged(inventory, start, end))


@router.get("/evolution", response_model=list[EvolutionPoint])
def evolution(
    granularity: Granularity = Query(Granularity.daily, description="daily/weekly/monthly"),
    inventory: InventoryService = Depends(get_inventory),
    _user: User = Depends(require_user),
):
    # the evolution chart ignores the dashboard date filter
    return reports.evolution_series(inventory.list_withdrawals(), granularity)


@router.get("/insights", response_model=InsightsResponse)
def insights(
    inventory: InventoryService = Depends(get_inventory),
    client: InsightClient = Depends(get_insight_client),
    _user: User = Depends(require_user),
):
    text = client.generate(inventory.list_tools(), inventory.list_withdrawals())
    return {"text": text}
