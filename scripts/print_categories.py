#!/usr/bin/env python3
"""
Print Categories - список категорий и количество строк в Excel файле

Использование:
    python scripts/print_categories.py
    python scripts/print_categories.py --excel data/results.xlsx
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.errors import DataSourceError
from core.logging import setup_logging
from data_access.category_index import count_rows_per_category, list_categories
from data_access.excel_reader import ExcelReader

logger = logging.getLogger(__name__)


async def print_categories(excel_path: str) -> int:
    logger.info(f"📂 Loading Excel file: {excel_path}")

    reader = ExcelReader(excel_path)
    try:
        rows = await reader.get_rows()
    except DataSourceError as e:
        logger.error(f"❌ Failed to print categories: [{e.error_code.value}] {e}")
        return 1

    logger.info(f"✅ Excel loaded: {len(rows)} rows")

    categories = list_categories(rows)
    print("\n=== Categories ===")
    print(f"Total categories: {len(categories)}\n")
    for index, category in enumerate(categories, 1):
        print(f"{index}. {category}")

    print("\n=== Rows per category ===")
    for category, count in count_rows_per_category(rows).items():
        print(f"{category}: {count} rows")

    return 0


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="Print categories found in the results workbook")
    parser.add_argument("--excel", default=os.getenv("EXCEL_PATH"), help="Path to .xlsx (default: EXCEL_PATH)")
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "INFO"))
    args = parser.parse_args()

    setup_logging(level=args.log_level)

    if not args.excel:
        parser.error("EXCEL_PATH is not set and --excel was not given")

    sys.exit(asyncio.run(print_categories(args.excel)))


if __name__ == "__main__":
    main()
