from stoper.error import InvalidQuantityError, InsufficientStockError
from stoper.schemas import ToolRead


def is_critical(tool: ToolRead) -> bool:
    return tool.quantity <= tool.min_threshold


def validate_withdrawal_request(tool: ToolRead, requested_quantity: int) -> None:
    # quantity sign first: a 0 request on an empty tool is INVALID, not INSUFFICIENT
    if requested_quantity <= 0:
        raise InvalidQuantityError(requested_quantity)

    if requested_quantity > tool.quantity:
        raise InsufficientStockError(tool.display_name, tool.quantity, requested_quantity)
