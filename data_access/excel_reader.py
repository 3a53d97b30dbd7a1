"""
Excel Reader - загрузка и нормализация строк из xlsx файла

Читает первый лист, проверяет обязательные колонки, нормализует типы.
Результат кешируется до clear_cache().
"""

import asyncio
import logging
import re
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from core.errors import DataSourceError, ErrorCode

from .models import (
    COLUMN_CATEGORY,
    COLUMN_FEATURE,
    COLUMN_METRIC,
    COLUMN_PRODUCT,
    COLUMN_PROJECT,
    COLUMN_RANK,
    COLUMN_VALUE,
    COLUMN_YEAR,
    REQUIRED_COLUMNS,
    Number,
    Row,
)

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def format_number(value: Number) -> str:
    """Целые float выводятся без '.0' (3.0 → '3')"""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_year(value: Any) -> Union[int, str]:
    """
    Год - целое число, если оно читается из начала значения, иначе строка

    2023, 2023.0, "2023", "2023 H1" → 2023; "н/д" → "н/д"; None → ""
    """
    if _is_number(value):
        return int(value) if float(value).is_integer() else format_number(value)
    if value is None:
        return ""
    text = str(value).strip()
    match = _LEADING_INT.match(text)
    if match:
        return int(match.group(1))
    return text


def normalize_rank(value: Any) -> Union[Number, str]:
    """
    Ранг остается числом только если строка однозначно им является

    "3" → 3, "2.5" → 2.5, "1.0" → "1.0", "3+" → "3+"
    """
    if _is_number(value):
        return value
    if value is None:
        return ""
    text = str(value).strip()
    try:
        parsed = float(text)
    except ValueError:
        return text
    if format_number(parsed) != text:
        return text
    return int(parsed) if parsed.is_integer() else parsed


def _clean_optional(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = format_number(value) if _is_number(value) else str(value).strip()
    return text or None


def normalize_record(record: Dict[str, Any]) -> Optional[Row]:
    """Собрать Row из сырой строки; None если нет фичи или проекта"""
    feature = _clean_optional(record.get(COLUMN_FEATURE))
    project = _clean_optional(record.get(COLUMN_PROJECT))
    if not feature or not project:
        return None

    value = record.get(COLUMN_VALUE)
    metric = record.get(COLUMN_METRIC)

    return Row(
        feature=feature,
        year=normalize_year(record.get(COLUMN_YEAR)),
        metric=str(metric).strip() if metric is not None else "",
        value=value if value is not None else "",
        rank=normalize_rank(record.get(COLUMN_RANK)),
        project=project,
        product=_clean_optional(record.get(COLUMN_PRODUCT)),
        category=_clean_optional(record.get(COLUMN_CATEGORY)),
    )


class ExcelReader:
    """
    Tabular data provider backed by an xlsx workbook

    Args:
        file_path: Путь к Excel файлу
    """

    def __init__(self, file_path: Union[str, Path]):
        self.file_path = Path(file_path)
        self._rows: Optional[List[Row]] = None
        self._lock = asyncio.Lock()

    async def get_rows(self) -> List[Row]:
        """
        Все нормализованные строки (загружает файл при первом вызове)

        Raises:
            DataSourceError: файл не найден, не читается, пуст или без нужных колонок
        """
        if self._rows is not None:
            return self._rows

        async with self._lock:
            if self._rows is None:
                self._rows = await asyncio.to_thread(self.load)
        return self._rows

    def clear_cache(self):
        """Сбросить кеш - следующий get_rows() перечитает файл"""
        self._rows = None
        logger.info(f"🔄 Excel cache cleared: {self.file_path}")

    def load(self) -> List[Row]:
        """Синхронная загрузка и нормализация файла"""
        logger.info(f"📥 Loading Excel file: {self.file_path}")

        records = self._read_records()
        logger.info(f"📄 Excel file loaded: {len(records)} raw rows")

        rows = []
        for record in records:
            row = normalize_record(record)
            if row is not None:
                rows.append(row)

        dropped = len(records) - len(rows)
        logger.info(f"✅ Excel data normalized: {len(rows)} rows ({dropped} dropped)")
        return rows

    def _read_records(self) -> List[Dict[str, Any]]:
        if not self.file_path.exists():
            raise DataSourceError(
                f"Excel file not found: {self.file_path}",
                error_code=ErrorCode.DATA_FILE_NOT_FOUND,
                context={"path": str(self.file_path)}
            )

        try:
            workbook = load_workbook(self.file_path, read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError, ValueError) as e:
            raise DataSourceError(
                f"Cannot read Excel file {self.file_path}: {e}",
                error_code=ErrorCode.DATA_FILE_UNREADABLE,
                context={"path": str(self.file_path)}
            ) from e

        try:
            worksheet = workbook.worksheets[0] if workbook.worksheets else None
            if worksheet is None:
                raise DataSourceError(
                    f"No sheets in Excel file {self.file_path}",
                    error_code=ErrorCode.DATA_FILE_EMPTY
                )

            values = worksheet.iter_rows(values_only=True)
            header_row = next(values, None)
            header = [str(cell).strip() if cell is not None else "" for cell in (header_row or ())]

            records = []
            for raw in values:
                if raw is None or all(cell is None or cell == "" for cell in raw):
                    continue
                records.append({
                    column: raw[index] if index < len(raw) else None
                    for index, column in enumerate(header)
                    if column
                })
        finally:
            workbook.close()

        if not records:
            raise DataSourceError(
                f"Excel file is empty: {self.file_path}",
                error_code=ErrorCode.DATA_FILE_EMPTY,
                context={"path": str(self.file_path)}
            )

        missing = [column for column in REQUIRED_COLUMNS if column not in header]
        if missing:
            raise DataSourceError(
                f"Missing required columns: {', '.join(missing)}. "
                f"Found columns: {', '.join(c for c in header if c)}",
                error_code=ErrorCode.DATA_MISSING_COLUMNS,
                context={"missing": missing}
            )

        return records
