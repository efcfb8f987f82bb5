"""
Numeric type utilities for Decimal precision.

Helper functions for safe conversion between types while maintaining
financial-grade precision.
"""

from typing import Any, Optional
from decimal import Decimal, InvalidOperation
import logging

logger = logging.getLogger(__name__)


def to_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """
    Safely convert any value to Decimal.

    Floats go through ``str()`` so the shortest round-tripping repr is used
    instead of the exact binary expansion.

    Args:
        value: Value to convert (str, int, float, Decimal, None)
        default: Default value if conversion fails (default: None)

    Returns:
        Decimal or default if conversion fails

    Examples:
        >>> to_decimal("0.65")
        Decimal('0.65')
        >>> to_decimal(100.50)
        Decimal('100.5')
        >>> to_decimal(None, Decimal("0"))
        Decimal('0')
    """
    if value is None:
        return default

    try:
        if isinstance(value, Decimal):
            return value
        elif isinstance(value, bool):
            logger.warning(f"Refusing to convert bool to Decimal: {value}")
            return default
        elif isinstance(value, str):
            return Decimal(value.strip())
        elif isinstance(value, (int, float)):
            return Decimal(str(value))
        else:
            logger.warning(f"Cannot convert {type(value)} to Decimal: {value}")
            return default
    except (ValueError, InvalidOperation) as e:
        logger.warning(f"Failed to convert {value} to Decimal: {e}")
        return default


def parse_decimal(value: Any, field_name: str = "value") -> Decimal:
    """
    Parse a numeric value that must be present and finite.

    Args:
        value: Value to parse (str, int, float, Decimal)
        field_name: Field name for error messages

    Returns:
        Decimal value

    Raises:
        ValueError: If value is missing, not numeric, or not finite

    Examples:
        >>> parse_decimal("0.65")
        Decimal('0.65')
        >>> parse_decimal(None, "price")
        Traceback (most recent call last):
        ...
        ValueError: Missing required field: price
    """
    if value is None:
        raise ValueError(f"Missing required field: {field_name}")

    result = to_decimal(value)
    if result is None or not result.is_finite():
        raise ValueError(f"Invalid numeric value for {field_name}: {value}")

    return result


def decimal_to_str(value: Decimal) -> str:
    """
    Render a Decimal in plain notation without trailing zeros.

    Examples:
        >>> decimal_to_str(Decimal("100.50"))
        '100.5'
        >>> decimal_to_str(Decimal("1E-6"))
        '0.000001'
    """
    s = format(value, "f")
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s or "0"
