from fastapi import HTTPException


def abort(status_code: int, code: str, message: str) -> None:
    raise HTTPException(status_code=status_code, detail={"code": code, "message": message})


def _auth_401(code: str, message: str) -> HTTPException:
    # keep WWW-Authenticate so Bearer clients recognise the challenge
    return HTTPException(
        status_code=401,
        detail={"code": code, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


class StoperError(Exception):
    code = "ERROR"
    status_code = 500

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_detail(self) -> dict:
        return {"code": self.code, "message": self.message}


class InvalidQuantityError(StoperError):
    code = "INVALID_QUANTITY"
    status_code = 400

    def __init__(self, requested: int):
        super().__init__(f"Quantidade inválida: {requested} (deve ser > 0)")
        self.requested = requested


class InsufficientStockError(StoperError):
    code = "INSUFFICIENT_STOCK"
    status_code = 400

    def __init__(self, tool_name: str, available: int, requested: int):
        super().__init__(
            f"Quantidade insuficiente de {tool_name}! (estoque {available}, pedido {requested})"
        )
        self.tool_name = tool_name
        self.available = available
        self.requested = requested


class ReconciliationMismatchError(StoperError):
    code = "TOOL_MISMATCH"
    status_code = 409


class GatewayError(StoperError):
    code = "GATEWAY_ERROR"
    status_code = 502

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message, code=code)
        if self.code == "NOT_FOUND":
            self.status_code = 404
        elif self.code == "VALUE_OUT_OF_RANGE":
            self.status_code = 400


class SchemaMissingError(GatewayError):
    code = "SCHEMA_MISSING"
    status_code = 503

    def to_detail(self) -> dict:
        detail = super().to_detail()
        # the client shows its setup guide instead of a generic toast
        detail["setup_required"] = True
        return detail


class PartialReconciliationError(StoperError):
    code = "PARTIAL_RECONCILIATION"
    status_code = 500

    def __init__(self, message: str, *, withdrawal_id: str, tool_id: str):
        super().__init__(message)
        self.withdrawal_id = withdrawal_id
        self.tool_id = tool_id

    def to_detail(self) -> dict:
        detail = super().to_detail()
        detail["withdrawal_id"] = self.withdrawal_id
        detail["tool_id"] = self.tool_id
        return detail
