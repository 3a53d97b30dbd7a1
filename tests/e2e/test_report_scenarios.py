"""
E2E Tests: Report generation scenarios

Полный путь: xlsx (openpyxl) → ExcelReader → ReportPipeline →
CompletionClient → mock AsyncOpenAI.

Сценарии:
- A: 10 строк, 2 проекта → один запрос к модели
- B: 800 строк, 25 проектов → запросы по чанкам + один на агрегацию
- C: категория без данных → NoDataError, ни одного запроса
- D: сетевой сбой → повтор и успешный отчет
"""

import pytest
from unittest.mock import AsyncMock

import httpx
import openai
from openpyxl import Workbook

from core.errors import NoDataError
from data_access.excel_reader import ExcelReader
from data_access.models import REQUIRED_COLUMNS
from services.completion_client import CompletionClient
from services.prompt_templates import PromptTemplateLoader
from services.report_pipeline import ReportPipeline
from tests.factories import PROMPTS_DIR, VALID_REPORT, completion_response

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def write_results(path, projects: int, rows_per_project: int, category: str = "Wellbeing"):
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(REQUIRED_COLUMNS + ["Категория"])
    for project_index in range(projects):
        for row_index in range(rows_per_project):
            sheet.append([
                f"Фича {row_index}",
                2023 + row_index % 2,
                "NPS",
                40 + row_index,
                row_index + 1,
                f"Проект {project_index:02d}",
                "Колонка",
                category,
            ])
    workbook.save(path)
    return path


def build_pipeline(openai_client, fake_sleep) -> ReportPipeline:
    client = CompletionClient(client=openai_client, sleep=fake_sleep)
    return ReportPipeline(
        completion_client=client,
        templates=PromptTemplateLoader(PROMPTS_DIR),
        max_rows_per_request=500,
        max_projects_per_request=20
    )


def sent_user_prompts(openai_client):
    return [
        call.kwargs["messages"][1]["content"]
        for call in openai_client.chat.completions.create.await_args_list
    ]


@pytest.mark.asyncio
async def test_scenario_a_small_dataset_single_call(tmp_path, openai_client, fake_sleep):
    """
    Сценарий A: 10 строк, 2 проекта → 1 запрос, отчет без изменений
    """
    reader = ExcelReader(write_results(tmp_path / "a.xlsx", projects=2, rows_per_project=5))
    pipeline = build_pipeline(openai_client, fake_sleep)

    rows = await reader.get_rows()
    result = await pipeline.generate_report("Качество звука", ["Wellbeing"], rows)

    assert len(rows) == 10
    assert result.used_chunking is False
    assert result.content == VALID_REPORT
    assert openai_client.chat.completions.create.await_count == 1

    prompt = sent_user_prompts(openai_client)[0]
    assert "Качество звука" in prompt
    assert prompt.count("Проект 00") == 5
    assert prompt.count("Проект 01") == 5


@pytest.mark.asyncio
async def test_scenario_b_large_dataset_chunked(tmp_path, openai_client, fake_sleep):
    """
    Сценарий B: 800 строк, 25 проектов по 32 строки →
    чанки 15 + 10 проектов (480 + 320 строк) и агрегация
    """
    reader = ExcelReader(write_results(tmp_path / "b.xlsx", projects=25, rows_per_project=32))
    pipeline = build_pipeline(openai_client, fake_sleep)

    rows = await reader.get_rows()
    result = await pipeline.generate_report("Wellbeing", ["Wellbeing"], rows)

    assert len(rows) == 800
    assert result.used_chunking is True
    assert result.chunk_count == 2
    assert openai_client.chat.completions.create.await_count == 3

    prompts = sent_user_prompts(openai_client)
    chunk_prompts = [p for p in prompts if "Промежуточные саммари" not in p]
    aggregation_prompts = [p for p in prompts if "Промежуточные саммари" in p]

    assert len(chunk_prompts) == 2
    assert len(aggregation_prompts) == 1
    assert sorted(p.count("\tПроект ") for p in chunk_prompts) == [320, 480]
    assert "=== Чанк 2 ===" in aggregation_prompts[0]


@pytest.mark.asyncio
async def test_scenario_c_unknown_category(tmp_path, openai_client, fake_sleep):
    """
    Сценарий C: "Smart Home" нет в данных → NoDataError, ноль запросов
    """
    reader = ExcelReader(write_results(tmp_path / "c.xlsx", projects=2, rows_per_project=5))
    pipeline = build_pipeline(openai_client, fake_sleep)

    rows = await reader.get_rows()

    with pytest.raises(NoDataError):
        await pipeline.generate_report("Умный дом", ["Smart Home"], rows)

    openai_client.chat.completions.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_scenario_d_network_failure_recovered(tmp_path, openai_client, fake_sleep):
    """
    Сценарий D: первый запрос падает по сети → повтор через 1s и успех
    """
    openai_client.chat.completions.create = AsyncMock(side_effect=[
        openai.APIConnectionError(request=REQUEST),
        completion_response(VALID_REPORT),
    ])
    reader = ExcelReader(write_results(tmp_path / "d.xlsx", projects=1, rows_per_project=3))
    pipeline = build_pipeline(openai_client, fake_sleep)

    result = await pipeline.generate_report("Звук", ["Wellbeing"], await reader.get_rows())

    assert result.content == VALID_REPORT
    assert fake_sleep.delays == [1.0]
