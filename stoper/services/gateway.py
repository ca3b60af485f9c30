"""
Persistence gateway over SQLModel.

Each call commits on its own; there is no transaction spanning two calls, so
callers that pair writes must compensate themselves (see services.inventory).
Failures come back as Err(GatewayError) rather than raising.
"""
import logging
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from stoper.error import GatewayError, SchemaMissingError
from stoper.models import Tool, Withdrawal
from stoper.result import Err, Ok, Result
from stoper.schemas import ToolRead, WithdrawalRead

logger = logging.getLogger(__name__)

# SQLSTATE undefined_table / undefined_column
UNDEFINED_SCHEMA_CODES = {"42P01", "42703"}
# sqlite has no SQLSTATE; these are its messages for the same conditions
SQLITE_SCHEMA_MARKERS = ("no such table", "no such column", "has no column named")

# sqlite raises a bare OverflowError for integers beyond 64 bits
DB_ERRORS = (SQLAlchemyError, OverflowError)


def classify_db_error(exc: Exception) -> GatewayError:
    orig = getattr(exc, "orig", None)
    if isinstance(exc, OverflowError) or isinstance(orig, OverflowError):
        return GatewayError(str(orig or exc), code="VALUE_OUT_OF_RANGE")

    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    message = str(orig if orig is not None else exc)

    if sqlstate in UNDEFINED_SCHEMA_CODES:
        return SchemaMissingError(message)
    if any(marker in message.lower() for marker in SQLITE_SCHEMA_MARKERS):
        return SchemaMissingError(message)
    return GatewayError(message)


def _not_found(kind: str, key: str) -> Err[GatewayError]:
    return Err(GatewayError(f"{kind} not found: {key}", code="NOT_FOUND"))


class SqlGateway:
    def __init__(self, session: Session):
        self.session = session

    def _fail(self, op: str, exc: Exception) -> Err[GatewayError]:
        self.session.rollback()
        err = classify_db_error(exc)
        logger.error("gateway %s failed (%s): %s", op, err.code, err.message)
        return Err(err)

    # ---- tools ----

    def list_tools(self) -> Result[list[ToolRead], GatewayError]:
        try:
            rows = self.session.exec(select(Tool).order_by(Tool.model.desc(), Tool.id)).all()
        except DB_ERRORS as e:
            return self._fail("list_tools", e)
        return Ok([ToolRead.model_validate(r) for r in rows])

    def get_tool(self, tool_id: str) -> Result[ToolRead, GatewayError]:
        try:
            row = self.session.get(Tool, tool_id)
        except DB_ERRORS as e:
            return self._fail("get_tool", e)
        if row is None:
            return _not_found("Tool", tool_id)
        return Ok(ToolRead.model_validate(row))

    def seed_tools(self, initial: Sequence[ToolRead]) -> Result[None, GatewayError]:
        try:
            for t in initial:
                self.session.add(Tool(
                    id=t.id,
                    model=t.model.value,
                    type=t.type.value,
                    quantity=t.quantity,
                    min_threshold=t.min_threshold,
                ))
            self.session.commit()
        except DB_ERRORS as e:
            return self._fail("seed_tools", e)
        return Ok(None)

    def _update_tool(self, op: str, tool_id: str, **fields) -> Result[ToolRead, GatewayError]:
        try:
            row = self.session.get(Tool, tool_id)
            if row is None:
                return _not_found("Tool", tool_id)
            for k, v in fields.items():
                setattr(row, k, v)
            self.session.add(row)
            self.session.commit()
            self.session.refresh(row)
        except DB_ERRORS as e:
            return self._fail(op, e)
        return Ok(ToolRead.model_validate(row))

    def update_tool_quantity(self, tool_id: str, quantity: int, updated_at=None) -> Result[ToolRead, GatewayError]:
        fields = {"quantity": quantity}
        if updated_at is not None:
            fields["updated_at"] = updated_at
        return self._update_tool("update_tool_quantity", tool_id, **fields)

    def update_tool_threshold(self, tool_id: str, threshold: int, updated_at=None) -> Result[ToolRead, GatewayError]:
        fields = {"min_threshold": threshold}
        if updated_at is not None:
            fields["updated_at"] = updated_at
        return self._update_tool("update_tool_threshold", tool_id, **fields)

    # ---- withdrawals ----

    def list_withdrawals(self) -> Result[list[WithdrawalRead], GatewayError]:
        try:
            rows = self.session.exec(
                select(Withdrawal).order_by(Withdrawal.date.desc(), Withdrawal.id.desc())
            ).all()
        except DB_ERRORS as e:
            return self._fail("list_withdrawals", e)
        return Ok([WithdrawalRead.model_validate(r) for r in rows])

    def get_withdrawal(self, withdrawal_id: str) -> Result[WithdrawalRead, GatewayError]:
        try:
            row = self.session.get(Withdrawal, withdrawal_id)
        except DB_ERRORS as e:
            return self._fail("get_withdrawal", e)
        if row is None:
            return _not_found("Withdrawal", withdrawal_id)
        return Ok(WithdrawalRead.model_validate(row))

    def insert_withdrawal(self, record: WithdrawalRead) -> Result[WithdrawalRead, GatewayError]:
        row = Withdrawal(**record.model_dump())
        try:
            self.session.add(row)
            self.session.commit()
            self.session.refresh(row)
        except DB_ERRORS as e:
            return self._fail("insert_withdrawal", e)
        return Ok(WithdrawalRead.model_validate(row))

    def delete_withdrawal(self, withdrawal_id: str) -> Result[None, GatewayError]:
        try:
            row = self.session.get(Withdrawal, withdrawal_id)
            if row is None:
                return _not_found("Withdrawal", withdrawal_id)
            self.session.delete(row)
            self.session.commit()
        except DB_ERRORS as e:
            return self._fail("delete_withdrawal", e)
        return Ok(None)
