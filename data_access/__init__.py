"""
Data Access Layer - spreadsheet rows, categories and session state
"""

from .models import Row, FilteredDataset, REQUIRED_COLUMNS
from .excel_reader import ExcelReader
from .category_index import list_categories, filter_by_categories, count_rows_per_category
from .dataset import prepare_dataset, serialize_rows
from .state_store import DialogueStep, SessionState, SessionStateStore

__all__ = [
    "Row",
    "FilteredDataset",
    "REQUIRED_COLUMNS",
    "ExcelReader",
    "list_categories",
    "filter_by_categories",
    "count_rows_per_category",
    "prepare_dataset",
    "serialize_rows",
    "DialogueStep",
    "SessionState",
    "SessionStateStore",
]
