"""
Integrates the reconciliation engine with the persistence gateway.

The engine computes; this module performs the paired writes and compensates
when the second write fails, since the gateway offers no cross-call
transaction.
"""
import logging
from datetime import datetime

from stoper.constants import INITIAL_INVENTORY
from stoper.error import PartialReconciliationError
from stoper.result import Err, Result
from stoper.schemas import (
    ReversalResult,
    ToolRead,
    ToolUpdateResult,
    WithdrawalCreate,
    WithdrawalRead,
    WithdrawalResult,
)
from stoper.services import ledger
from stoper.services.gateway import SqlGateway

logger = logging.getLogger(__name__)


def unwrap(result: Result):
    if isinstance(result, Err):
        raise result.error
    return result.value


def seed_catalog() -> list[ToolRead]:
    return [
        ToolRead(id=tid, model=model, type=type_, quantity=qty, min_threshold=min_qty)
        for tid, model, type_, qty, min_qty in INITIAL_INVENTORY
    ]


class InventoryService:
    def __init__(self, gateway: SqlGateway):
        self.gateway = gateway

    def ensure_catalog(self) -> bool:
        tools = unwrap(self.gateway.list_tools())
        if tools:
            return False
        unwrap(self.gateway.seed_tools(seed_catalog()))
        logger.info("seeded tool catalog with %d items", len(INITIAL_INVENTORY))
        return True

    def list_tools(self) -> list[ToolRead]:
        return unwrap(self.gateway.list_tools())

    def get_tool(self, tool_id: str) -> ToolRead:
        return unwrap(self.gateway.get_tool(tool_id))

    def list_withdrawals(self) -> list[WithdrawalRead]:
        return unwrap(self.gateway.list_withdrawals())

    def record_withdrawal(self, request: WithdrawalCreate, now: datetime | None = None) -> WithdrawalResult:
        tool = self.get_tool(request.tool_id)
        # raises before any write when the request is invalid
        outcome = ledger.apply_withdrawal(tool, request, now=now)

        saved = unwrap(self.gateway.insert_withdrawal(outcome.withdrawal))

        updated = self.gateway.update_tool_quantity(
            tool.id, outcome.tool.quantity, updated_at=outcome.tool.updated_at
        )
        if isinstance(updated, Err):
            self._rollback_insert(saved, updated.error)
            raise updated.error

        new_tool = updated.value
        logger.info(
            "withdrawal %s: %s -%d (%d->%d) reason=%s",
            saved.id, saved.tool_name, saved.quantity, tool.quantity, new_tool.quantity, saved.reason,
        )

        alert = None
        if outcome.critical:
            alert = ledger.critical_message(new_tool)
            logger.warning(alert)
        return WithdrawalResult(withdrawal=saved, tool=new_tool, alert=alert)

    def _rollback_insert(self, saved: WithdrawalRead, cause: Exception) -> None:
        undo = self.gateway.delete_withdrawal(saved.id)
        if isinstance(undo, Err):
            logger.error("orphan withdrawal %s left in ledger: %s", saved.id, undo.error)
            raise PartialReconciliationError(
                f"Retirada {saved.id} gravada mas o estoque de {saved.tool_id} não foi atualizado",
                withdrawal_id=saved.id,
                tool_id=saved.tool_id,
            ) from cause
        logger.warning("withdrawal %s rolled back after stock update failure", saved.id)

    def reverse_withdrawal(self, withdrawal_id: str) -> ReversalResult:
        withdrawal = unwrap(self.gateway.get_withdrawal(withdrawal_id))
        tool = self.get_tool(withdrawal.tool_id)
        outcome = ledger.reverse_withdrawal(tool, withdrawal)

        new_tool = unwrap(self.gateway.update_tool_quantity(
            tool.id, outcome.tool.quantity, updated_at=outcome.tool.updated_at
        ))

        deleted = self.gateway.delete_withdrawal(outcome.withdrawal_id)
        if isinstance(deleted, Err):
            restore = self.gateway.update_tool_quantity(tool.id, tool.quantity)
            if isinstance(restore, Err):
                logger.error("stock of %s restored but withdrawal %s still in ledger", tool.id, withdrawal.id)
                raise PartialReconciliationError(
                    f"Estoque de {tool.id} restaurado mas a retirada {withdrawal.id} não foi removida",
                    withdrawal_id=withdrawal.id,
                    tool_id=tool.id,
                ) from deleted.error
            raise deleted.error

        logger.info(
            "reversed withdrawal %s: %s +%d (%d->%d)",
            withdrawal.id, withdrawal.tool_name, withdrawal.quantity, tool.quantity, new_tool.quantity,
        )
        return ReversalResult(withdrawal_id=withdrawal.id, tool=new_tool)

    def update_stock(self, tool_id: str, quantity: int) -> ToolUpdateResult:
        tool = self.get_tool(tool_id)
        outcome = ledger.adjust_stock(tool, quantity)
        new_tool = unwrap(self.gateway.update_tool_quantity(
            tool.id, outcome.tool.quantity, updated_at=outcome.tool.updated_at
        ))
        logger.info("stock of %s set %d->%d", tool.id, tool.quantity, new_tool.quantity)

        alert = None
        if outcome.critical:
            alert = ledger.low_stock_message(new_tool)
            logger.warning(alert)
        return ToolUpdateResult(tool=new_tool, alert=alert)

    def update_threshold(self, tool_id: str, threshold: int) -> ToolUpdateResult:
        tool = self.get_tool(tool_id)
        adjusted = ledger.adjust_threshold(tool, threshold)
        new_tool = unwrap(self.gateway.update_tool_threshold(
            tool.id, adjusted.min_threshold, updated_at=adjusted.updated_at
        ))
        logger.info("threshold of %s set %d->%d", tool.id, tool.min_threshold, new_tool.min_threshold)
        return ToolUpdateResult(tool=new_tool)
