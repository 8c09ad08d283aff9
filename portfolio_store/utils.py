"""
Portfolio Store Utilities

Small helpers shared by the codec and the read/write APIs:
- Timestamp handling (UTC-only, ISO-8601 strings in storage)
- Value conversion between Python and DynamoDB attribute types
- Slug generation and rate formatting
- Update expression building
"""

import logging
import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)


# =============================================================================
# Timestamp Utilities
# =============================================================================

def to_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Convert datetime to UTC.

    Naive datetimes are assumed to already be in UTC.

    Examples:
        >>> to_utc(datetime(2024, 1, 1, 10, 0))
        datetime.datetime(2024, 1, 1, 10, 0, tzinfo=datetime.timezone.utc)
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """Render a timestamp the way it is stored.

    Fixed microsecond precision keeps every stored timestamp the same
    length, so index sort keys built from them order correctly as strings.
    """
    return to_utc(dt).isoformat(timespec='microseconds')


def date_part(dt: datetime) -> str:
    """Return the YYYY-MM-DD portion used in project sort keys."""
    return format_timestamp(dt).split('T')[0]


# =============================================================================
# DynamoDB Value Conversion
# =============================================================================

def to_dynamodb_value(obj: Any) -> Any:
    """Recursively convert Python values into types boto3 can serialize.

    - datetime → ISO string
    - float → Decimal (boto3 rejects float)
    - set/frozenset → sorted list
    - Enum → its value
    """
    if isinstance(obj, dict):
        return {k: to_dynamodb_value(v) for k, v in obj.items()}
    elif isinstance(obj, (set, frozenset)):
        return [to_dynamodb_value(v) for v in sorted(obj)]
    elif isinstance(obj, (list, tuple)):
        return [to_dynamodb_value(v) for v in obj]
    elif isinstance(obj, datetime):
        return format_timestamp(obj)
    elif isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, bool):
        return obj
    elif isinstance(obj, float):
        return Decimal(str(obj))
    return obj


def from_dynamodb_value(obj: Any) -> Any:
    """Recursively convert boto3 output back into plain Python values.

    DynamoDB returns every number as Decimal; integral values become int and
    the rest float.
    """
    if isinstance(obj, dict):
        return {k: from_dynamodb_value(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [from_dynamodb_value(v) for v in obj]
    elif isinstance(obj, set):
        return {from_dynamodb_value(v) for v in obj}
    elif isinstance(obj, Decimal):
        return int(obj) if obj == obj.to_integral_value() else float(obj)
    return obj


# =============================================================================
# Identity and Formatting
# =============================================================================

_SLUG_INVALID = re.compile(r'[^a-z0-9]')


def slugify(title: str) -> str:
    """Derive a project id from its title.

    Lowercases and replaces every character outside [a-z0-9] with '-'.

    Example:
        >>> slugify("Mountain Series")
        'mountain-series'
    """
    return _SLUG_INVALID.sub('-', title.lower())


def format_rate(numerator: int, denominator: int) -> str:
    """Percentage with two decimals, "0.00" when the denominator is zero."""
    if not denominator:
        return "0.00"
    rate = Decimal(numerator * 100) / Decimal(denominator)
    return str(rate.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


# =============================================================================
# Expression Building
# =============================================================================

def build_update_expression(
    set_values: Dict[str, Any],
    remove_fields: Iterable[str] = (),
    add_values: Optional[Dict[str, Any]] = None
) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
    """Build an UpdateExpression with placeholder names and values.

    Every attribute goes through ``#name`` placeholders so reserved words
    (Status, Position, Format, Location...) are safe.

    Args:
        set_values: Attributes to SET (already in storage form)
        remove_fields: Attributes to REMOVE
        add_values: Numeric attributes to ADD

    Returns:
        Tuple of (UpdateExpression, ExpressionAttributeNames, ExpressionAttributeValues)

    Example:
        >>> build_update_expression({'Title': 'New'}, ['PublishedAt'], {'ImageCount': 1})
        ('SET #Title = :Title REMOVE #PublishedAt ADD #ImageCount :ImageCount', {...}, {...})
    """
    names: Dict[str, str] = {}
    values: Dict[str, Any] = {}
    clauses = []

    set_parts = []
    for attr, value in set_values.items():
        names[f"#{attr}"] = attr
        values[f":{attr}"] = value
        set_parts.append(f"#{attr} = :{attr}")
    if set_parts:
        clauses.append("SET " + ", ".join(set_parts))

    remove_parts = []
    for attr in remove_fields:
        names[f"#{attr}"] = attr
        remove_parts.append(f"#{attr}")
    if remove_parts:
        clauses.append("REMOVE " + ", ".join(remove_parts))

    add_parts = []
    for attr, value in (add_values or {}).items():
        names[f"#{attr}"] = attr
        values[f":{attr}"] = value
        add_parts.append(f"#{attr} :{attr}")
    if add_parts:
        clauses.append("ADD " + ", ".join(add_parts))

    if not clauses:
        raise ValueError("Update expression needs at least one SET, REMOVE or ADD clause")

    return " ".join(clauses), names, values


__all__ = [
    "to_utc",
    "utc_now",
    "format_timestamp",
    "date_part",
    "to_dynamodb_value",
    "from_dynamodb_value",
    "slugify",
    "format_rate",
    "build_update_expression",
]
