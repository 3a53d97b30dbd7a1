"""
Dataset preparation - фильтрация и сериализация строк для LLM
"""

import logging
from typing import List, Sequence

from .category_index import filter_by_categories
from .excel_reader import format_number
from .models import (
    COLUMN_CATEGORY,
    COLUMN_FEATURE,
    COLUMN_METRIC,
    COLUMN_PRODUCT,
    COLUMN_PROJECT,
    COLUMN_RANK,
    COLUMN_VALUE,
    COLUMN_YEAR,
    FilteredDataset,
    Row,
)

logger = logging.getLogger(__name__)

BASE_COLUMNS = [
    (COLUMN_FEATURE, "feature"),
    (COLUMN_YEAR, "year"),
    (COLUMN_METRIC, "metric"),
    (COLUMN_VALUE, "value"),
    (COLUMN_RANK, "rank"),
    (COLUMN_PROJECT, "project"),
]


def prepare_dataset(rows: Sequence[Row], selected_categories: Sequence[str]) -> FilteredDataset:
    """Отфильтровать строки и собрать уникальные проекты и годы"""
    filtered = filter_by_categories(rows, selected_categories)

    if not filtered:
        logger.warning(f"No data found for selected categories: {list(selected_categories)}")
        return FilteredDataset()

    projects = sorted({row.project for row in filtered if row.project})
    years = sorted({row.year for row in filtered if isinstance(row.year, int)})

    logger.info(
        f"Data prepared for LLM: rows={len(filtered)}, "
        f"projects={len(projects)}, years={len(years)}"
    )
    return FilteredDataset(rows=filtered, projects=projects, years=years)


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        text = format_number(value)
    else:
        text = str(value)
    return text.replace("\n", " ").replace("\t", " ")


def serialize_rows(rows: Sequence[Row]) -> str:
    """
    Компактный TSV для промпта: одна запись - одна строка

    Колонки продукта и категории добавляются только если хоть одна строка их содержит.
    Переводы строк и табы внутри значений заменяются пробелом.
    """
    if not rows:
        return ""

    columns = list(BASE_COLUMNS)
    if any(row.product for row in rows):
        columns.append((COLUMN_PRODUCT, "product"))
    if any(row.category for row in rows):
        columns.append((COLUMN_CATEGORY, "category"))

    lines: List[str] = ["\t".join(title for title, _ in columns)]
    for row in rows:
        lines.append("\t".join(_cell(getattr(row, attr)) for _, attr in columns))

    return "\n".join(lines)
