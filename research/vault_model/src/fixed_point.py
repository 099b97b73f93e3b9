"""Checked unsigned arithmetic, uint256 semantics"""
from .constants import UINT256_MAX
from .errors import ArithmeticOverflowError

def _check_unsigned(*values: int) -> None:
    if any(v < 0 for v in values):
        raise ArithmeticOverflowError(f"Negative operand in unsigned arithmetic: {values}")

def checked_add(a: int, b: int) -> int:
    """Add with overflow checking"""
    _check_unsigned(a, b)
    result = a + b
    if result > UINT256_MAX:
        raise ArithmeticOverflowError("Arithmetic overflow in addition")
    return result

def checked_sub(a: int, b: int) -> int:
    """Subtract with underflow checking"""
    _check_unsigned(a, b)
    if b > a:
        raise ArithmeticOverflowError("Arithmetic underflow in subtraction")
    return a - b

def checked_mul(a: int, b: int) -> int:
    """Multiply with overflow checking"""
    _check_unsigned(a, b)
    result = a * b
    if result > UINT256_MAX:
        raise ArithmeticOverflowError("Arithmetic overflow in multiplication")
    return result

def checked_div(a: int, b: int) -> int:
    """Floor division with zero checking"""
    _check_unsigned(a, b)
    if b == 0:
        raise ArithmeticOverflowError("Division by zero")
    return a // b

def checked_div_up(a: int, b: int) -> int:
    """Ceiling division with zero checking"""
    _check_unsigned(a, b)
    if b == 0:
        raise ArithmeticOverflowError("Division by zero")
    if a == 0:
        return 0
    return (a - 1) // b + 1

def mul_div(a: int, b: int, denominator: int) -> int:
    """a * b / denominator, multiplying first"""
    return checked_div(checked_mul(a, b), denominator)
