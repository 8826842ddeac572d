from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class ColumnValue:
    """
    Operand of an equality query.

    With a tolerance, FLOAT/DOUBLE/REAL columns match any value within
    [value - tolerance, value + tolerance].
    """
    value: Any
    tolerance: Optional[float] = None
