# Typed feature tables, rows, cursors and DAOs
from .column import FeatureColumn
from .cursor import CursorState, FeatureCursor
from .dao import FeatureDao
from .row import FeatureRow
from .table import FeatureTable, FeatureTableReader
from .value import ColumnValue

__all__ = [
    "ColumnValue",
    "CursorState",
    "FeatureColumn",
    "FeatureCursor",
    "FeatureDao",
    "FeatureRow",
    "FeatureTable",
    "FeatureTableReader",
]
