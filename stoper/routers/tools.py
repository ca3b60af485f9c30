from typing import Optional
from fastapi import APIRouter, Depends, Query

from stoper.constants import ToolModel, ToolType
from stoper.deps import require_user, get_inventory
from stoper.models import User
from stoper.schemas import ToolRead, StockUpdate, ThresholdUpdate, ToolUpdateResult
from stoper.services.inventory import InventoryService
from stoper.services.validation import is_critical

router = APIRouter(prefix="/tools", tags=["tools"])


@router.get("", response_model=list[ToolRead])
def list_tools(
    model: Optional[ToolModel] = Query(None, description="Filtrar por modelo"),
    type: Optional[ToolType] = Query(None, description="Filtrar por tipo"),
    q: Optional[str] = Query(None, description="Busca por nome, ex.: 'Haste T51'"),
    critical_only: bool = Query(False, description="Somente itens em nível crítico"),
    inventory: InventoryService = Depends(get_inventory),
    _user: User = Depends(require_user),
):
    tools = inventory.list_tools()

    if model is not None:
        tools = [t for t in tools if t.model == model]
    if type is not None:
        tools = [t for t in tools if t.type == type]
    if q and q.strip():
        needle = q.strip().lower()
        tools = [t for t in tools if needle in t.display_name.lower() or needle in t.id]
    if critical_only:
        tools = [t for t in tools if is_critical(t)]
    return tools


@router.get("/{tool_id}", response_model=ToolRead)
def get_tool(
    tool_id: str,
    inventory: InventoryService = Depends(get_inventory),
    _user: User = Depends(require_user),
):
    return inventory.get_tool(tool_id)


@router.patch("/{tool_id}/quantity", response_model=ToolUpdateResult)
def update_tool_quantity(
    tool_id: str,
    body: StockUpdate,
    inventory: InventoryService = Depends(get_inventory),
    _user: User = Depends(require_user),
):
    return inventory.update_stock(tool_id, body.quantity)


@router.patch("/{tool_id}/threshold", response_model=ToolUpdateResult)
def update_tool_threshold(
    tool_id: str,
    body: ThresholdUpdate,
    inventory: InventoryService = Depends(get_inventory),
    _user: User = Depends(require_user),
):
    return inventory.update_threshold(tool_id, body.min_threshold)
