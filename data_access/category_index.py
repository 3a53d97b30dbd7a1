"""
Category Index - список категорий и фильтрация строк по выбору пользователя

Категория строки берется из колонки "Категория", а если ее нет - из "Продукт".
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Sequence

from .models import Row

logger = logging.getLogger(__name__)


def _uses_category_column(rows: Sequence[Row]) -> bool:
    return any(row.category and row.category.strip() for row in rows)


def list_categories(rows: Sequence[Row]) -> List[str]:
    """
    Уникальные категории, отсортированные по алфавиту

    Если ни одна строка не содержит непустой категории,
    используется колонка продукта.
    """
    if _uses_category_column(rows):
        categories = {row.category.strip() for row in rows if row.category and row.category.strip()}
        logger.info(f"Categories extracted from category column: {len(categories)}")
    else:
        categories = {row.product.strip() for row in rows if row.product and row.product.strip()}
        logger.info(f"Categories extracted from product column (fallback): {len(categories)}")

    return sorted(categories)


def filter_by_categories(rows: Sequence[Row], selected_categories: Iterable[str]) -> List[Row]:
    """
    Строки, чья категория (или продукт) входит в выбор

    Пустой выбор - фильтр не применяется, возвращаются все строки.
    """
    selection = set(selected_categories)
    if not selection:
        return list(rows)

    filtered = []
    for row in rows:
        label = row.category_label
        if label and label.strip() in selection:
            filtered.append(row)

    logger.info(
        f"Data filtered by categories: selected={len(selection)}, "
        f"total={len(rows)}, filtered={len(filtered)}"
    )
    return filtered


def count_rows_per_category(rows: Sequence[Row]) -> Dict[str, int]:
    """
    Количество строк на категорию, ключи отсортированы

    Колонка выбирается так же, как в list_categories: продукт
    учитывается, только если ни у одной строки нет категории.
    """
    use_category = _uses_category_column(rows)
    counts = Counter()
    for row in rows:
        value = row.category if use_category else row.product
        if value and value.strip():
            counts[value.strip()] += 1
    return dict(sorted(counts.items()))
