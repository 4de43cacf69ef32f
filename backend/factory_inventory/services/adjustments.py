from factory_inventory.domain import AdjustOperation
from factory_inventory.errors import ValidationError

QUICK_ADJUST_AMOUNTS = (1, 10)


def apply_adjustment(stock: int, amount: int, operation: AdjustOperation) -> int:
    """New stock after adding or removing `amount`; removals clamp at zero"""
    if operation is AdjustOperation.ADD:
        return stock + amount
    if operation is AdjustOperation.REMOVE:
        return max(0, stock - amount)
    raise ValidationError(f"Unknown adjustment operation: {operation!r}")


def parse_custom_amount(raw) -> int:
    """Validate a user-entered adjustment amount; must be a positive whole number"""
    if isinstance(raw, bool):
        raise ValidationError("Amount must be a whole number")

    if isinstance(raw, str):
        raw = raw.strip()
        if not raw.lstrip("-").isdigit():
            raise ValidationError("Amount must be a whole number")
        amount = int(raw)
    elif isinstance(raw, int):
        amount = raw
    elif isinstance(raw, float) and raw.is_integer():
        amount = int(raw)
    else:
        raise ValidationError("Amount must be a whole number")

    if amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    return amount


def check_quick_amount(amount: int) -> int:
    if amount not in QUICK_ADJUST_AMOUNTS:
        raise ValidationError(f"Quick adjustments are limited to {', '.join(map(str, QUICK_ADJUST_AMOUNTS))}")
    return amount
