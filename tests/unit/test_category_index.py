"""
Unit Tests: Category Index

Тестирует:
- list_categories (категория, fallback на продукт)
- filter_by_categories (пустой выбор = все строки)
- count_rows_per_category
"""

from data_access.category_index import (
    count_rows_per_category,
    filter_by_categories,
    list_categories,
)
from tests.factories import make_row


def test_list_categories_sorted_and_distinct():
    """
    Тест: Уникальные категории по алфавиту, пробелы обрезаны
    """
    rows = [
        make_row(category="Wellbeing"),
        make_row(category=" Audio "),
        make_row(category="Wellbeing"),
        make_row(category=None, product="Phone"),
    ]

    assert list_categories(rows) == ["Audio", "Wellbeing"]


def test_list_categories_falls_back_to_product():
    """
    Тест: Ни у одной строки нет категории → берем продукт
    """
    rows = [
        make_row(category=None, product="Колонка"),
        make_row(category=None, product="Часы"),
        make_row(category=None, product="Колонка"),
    ]

    assert list_categories(rows) == ["Колонка", "Часы"]


def test_list_categories_empty():
    """
    Тест: Нет ни категорий, ни продуктов → пустой список
    """
    assert list_categories([make_row(category=None, product=None)]) == []
    assert list_categories([]) == []


def test_filter_empty_selection_returns_all_rows():
    """
    Тест: Пустой выбор - фильтр не применяется
    """
    rows = [make_row(category="Wellbeing"), make_row(category="Audio")]

    assert filter_by_categories(rows, []) == rows


def test_filter_by_category_with_product_fallback():
    """
    Тест: Строка проходит, если категория (или продукт) в выборе
    """
    wellbeing = make_row(category="Wellbeing")
    audio = make_row(category="Audio")
    speaker = make_row(category=None, product="Колонка")

    result = filter_by_categories([wellbeing, audio, speaker], ["Wellbeing", "Колонка"])

    assert result == [wellbeing, speaker]


def test_filter_unknown_category_returns_nothing():
    """
    Тест: Категории нет в данных → пустой результат
    """
    rows = [make_row(category="Wellbeing")]

    assert filter_by_categories(rows, ["Smart Home"]) == []


def test_count_rows_per_category():
    """
    Тест: Подсчет строк по категориям, ключи отсортированы
    """
    rows = [
        make_row(category="Wellbeing"),
        make_row(category="Audio"),
        make_row(category="Wellbeing"),
    ]

    counts = count_rows_per_category(rows)

    assert counts == {"Audio": 1, "Wellbeing": 2}
    assert list(counts) == ["Audio", "Wellbeing"]


def test_count_rows_matches_listed_categories():
    """
    Тест: Часть строк без категории → продукт не попадает в подсчет
    """
    rows = [
        make_row(category="Wellbeing"),
        make_row(category=None, product="Колонка"),
        make_row(category=None, product=None),
    ]

    counts = count_rows_per_category(rows)

    assert counts == {"Wellbeing": 1}
    assert list(counts) == list_categories(rows)


def test_count_rows_falls_back_to_product():
    rows = [
        make_row(category=None, product="Колонка"),
        make_row(category=None, product="Часы"),
        make_row(category=" ", product="Колонка"),
    ]

    assert count_rows_per_category(rows) == {"Колонка": 2, "Часы": 1}
