"""
Reconciliation engine.

Every stock change is computed here and paired with the ledger record that
explains it. The functions are pure: they take immutable snapshots and return
new ones, leaving persistence to the caller (see services.inventory).
"""
from dataclasses import dataclass
from datetime import datetime
from uuid import uuid4

from stoper.error import ReconciliationMismatchError
from stoper.schemas import ToolRead, WithdrawalCreate, WithdrawalRead
from stoper.services.validation import validate_withdrawal_request


@dataclass(frozen=True)
class WithdrawalOutcome:
    tool: ToolRead
    withdrawal: WithdrawalRead
    critical: bool            # CriticalStockReached advisory


@dataclass(frozen=True)
class ReversalOutcome:
    tool: ToolRead
    withdrawal_id: str        # ledger row to delete


@dataclass(frozen=True)
class StockOutcome:
    tool: ToolRead
    critical: bool


def new_withdrawal_id() -> str:
    return uuid4().hex


def apply_withdrawal(
    tool: ToolRead,
    request: WithdrawalCreate,
    now: datetime | None = None,
) -> WithdrawalOutcome:
    validate_withdrawal_request(tool, request.quantity)

    new_qty = tool.quantity - request.quantity
    stamp = now or datetime.now()

    withdrawal = WithdrawalRead(
        id=new_withdrawal_id(),
        date=stamp,
        tool_id=tool.id,
        tool_name=tool.display_name,  # point-in-time snapshot, never recomputed
        quantity=request.quantity,
        reason=request.reason.value,
        supervisor=request.supervisor,
        operator=request.operator,
        rig_tag=request.rig_tag,
        team=request.team.value,
    )
    updated = tool.model_copy(update={"quantity": new_qty, "updated_at": stamp})
    return WithdrawalOutcome(
        tool=updated,
        withdrawal=withdrawal,
        critical=new_qty <= tool.min_threshold,
    )


def reverse_withdrawal(tool: ToolRead, withdrawal: WithdrawalRead) -> ReversalOutcome:
    if withdrawal.tool_id != tool.id:
        raise ReconciliationMismatchError(
            f"Retirada {withdrawal.id} pertence a {withdrawal.tool_id}, não a {tool.id}"
        )

    # recomputed from current stock, not replayed from the ledger; no ceiling
    restored = tool.quantity + withdrawal.quantity
    updated = tool.model_copy(update={"quantity": restored, "updated_at": datetime.now()})
    return ReversalOutcome(tool=updated, withdrawal_id=withdrawal.id)


def adjust_stock(tool: ToolRead, new_quantity: int) -> StockOutcome:
    clamped = max(0, new_quantity)
    updated = tool.model_copy(update={"quantity": clamped, "updated_at": datetime.now()})
    # only a decrease into the critical zone alerts
    critical = clamped <= tool.min_threshold and clamped < tool.quantity
    return StockOutcome(tool=updated, critical=critical)


def adjust_threshold(tool: ToolRead, new_threshold: int) -> ToolRead:
    return tool.model_copy(
        update={"min_threshold": max(0, new_threshold), "updated_at": datetime.now()}
    )


def critical_message(tool: ToolRead) -> str:
    return f"ALERTA: {tool.display_name} atingiu nível crítico ({tool.quantity} un.)"


def low_stock_message(tool: ToolRead) -> str:
    return f"Estoque de {tool.display_name} está baixo!"
