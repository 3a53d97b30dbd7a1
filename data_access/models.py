"""
Data models shared by the data access layer and the report pipeline
"""
from dataclasses import dataclass, field
from typing import List, Optional, Union

Number = Union[int, float]

# Колонки Excel-файла (и заголовок TSV для LLM)
COLUMN_FEATURE = "Фича"
COLUMN_YEAR = "Год"
COLUMN_METRIC = "Показатель"
COLUMN_VALUE = "Значение"
COLUMN_RANK = "Ранг"
COLUMN_PROJECT = "Проект"
COLUMN_PRODUCT = "Продукт"
COLUMN_CATEGORY = "Категория"

REQUIRED_COLUMNS = [
    COLUMN_FEATURE,
    COLUMN_YEAR,
    COLUMN_METRIC,
    COLUMN_VALUE,
    COLUMN_RANK,
    COLUMN_PROJECT,
    COLUMN_PRODUCT,
]


@dataclass
class Row:
    """One normalized fact record from the spreadsheet"""
    feature: str
    year: Union[int, str]
    metric: str
    value: Union[str, Number]
    rank: Union[str, Number]
    project: str
    product: Optional[str] = None
    category: Optional[str] = None

    @property
    def category_label(self) -> Optional[str]:
        """Категория строки, а если ее нет - продукт"""
        return self.category or self.product


@dataclass
class FilteredDataset:
    """Rows narrowed to a category selection plus summary attributes"""
    rows: List[Row] = field(default_factory=list)
    projects: List[str] = field(default_factory=list)
    years: List[int] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows
