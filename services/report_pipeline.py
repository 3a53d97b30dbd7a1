"""
Report Pipeline - генерация аналитического отчета по строкам Excel

START → FILTER → {SINGLE | CHUNKED} → VALIDATE → (REPAIR)? → DONE | FAILED

- FILTER: строки по выбранным категориям; пусто → NoDataError до любых вызовов LLM
- SINGLE: весь датасет одним запросом
- CHUNKED: если строк или проектов больше лимита - чанки по проектам,
  саммари на каждый чанк, затем один запрос на агрегацию
- VALIDATE/REPAIR: эвристическая проверка структуры; при провале - запрос
  на исправление, а если и он упал - исходный текст с примечанием
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from core.errors import CompletionError, NoDataError, TemplateNotFoundError
from data_access.dataset import prepare_dataset, serialize_rows
from data_access.models import FilteredDataset, Row

from .completion_client import CompletionClient, generate_request_id
from .prompt_templates import (
    FEATURE_SUMMARY_TEMPLATE,
    REPAIR_TEMPLATE,
    PromptTemplateLoader,
    fill_template,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROWS_PER_REQUEST = 500
DEFAULT_MAX_PROJECTS_PER_REQUEST = 20

REPAIR_CAVEAT = (
    "\n\n[Примечание: формат ответа может не полностью соответствовать требуемой структуре]"
)

ANALYST_SYSTEM_PROMPT = """Ты — аналитик, который анализирует результаты тестов фичей по данным из Excel-таблицы.

Правила:
- Используй только предоставленные данные, без внешних знаний
- Каждый вывод должен опираться на строки таблицы
- Ранги и значения передавай точно так, как они указаны в данных"""

AGGREGATION_SYSTEM_PROMPT = """Ты — аналитик, который объединяет промежуточные саммари в единый отчет.

Правила:
- Используй только информацию из промежуточных саммари
- Не добавляй внешние знания и предположения
- Структура: сначала выводы, затем детальное саммари"""

REPAIR_SYSTEM_PROMPT = "Ты помогаешь исправить формат ответа, чтобы он соответствовал требуемой структуре."

AGGREGATION_PROMPT = """Ниже промежуточные саммари по разным частям данных. Объедини их в единый отчет.

Тема: {topic}
Категории: {categories}

Промежуточные саммари:
{summaries}

Сформируй финальный отчет:
1. Агрегированные выводы (3–5 буллитов) на основе всех промежуточных саммари
2. Детальное саммари, объединяющее информацию из всех чанков

Важно: используй только информацию из промежуточных саммари, не добавляй внешние знания."""

_BULLET_LINE_RE = re.compile(r"^\s*[-*]\s", re.MULTILINE)


@dataclass
class ReportResult:
    """Результат генерации отчета"""
    request_id: str
    content: str
    used_chunking: bool
    chunk_count: int = 1
    repaired: bool = False


def partition_into_chunks(rows: Sequence[Row], max_rows: int) -> List[List[Row]]:
    """
    Разбить строки на чанки целыми проектами

    Группы проектов берутся в порядке первого появления и жадно складываются
    в текущий чанк; новый чанк начинается, когда следующая группа не влезает.
    Проект никогда не делится: проект больше лимита - отдельный большой чанк.
    """
    groups: Dict[str, List[Row]] = {}
    for row in rows:
        groups.setdefault(row.project, []).append(row)

    chunks: List[List[Row]] = []
    current: List[Row] = []
    for project_rows in groups.values():
        if current and len(current) + len(project_rows) > max_rows:
            chunks.append(current)
            current = []
        current.extend(project_rows)

    if current:
        chunks.append(current)
    return chunks


def has_bullets(text: str) -> bool:
    return "•" in text or bool(_BULLET_LINE_RE.search(text))


def has_row_structure(text: str) -> bool:
    return "Год:" in text or "Проект:" in text


def validate_report_structure(text: str) -> bool:
    """Отчет валиден, если есть буллиты И упоминания "Год:" или "Проект:" """
    return has_bullets(text) and has_row_structure(text)


def needs_chunking(dataset: FilteredDataset, max_rows: int, max_projects: int) -> bool:
    return dataset.total_rows > max_rows or len(dataset.projects) > max_projects


class ReportPipeline:
    """
    Оркестрация генерации отчета

    Args:
        completion_client: Клиент LLM
        templates: Загрузчик промптов
        max_rows_per_request: Лимит строк на один запрос
        max_projects_per_request: Лимит проектов на один запрос
        max_parallel_chunks: Сколько чанков обрабатывается одновременно (1 = последовательно)
    """

    def __init__(
        self,
        completion_client: CompletionClient,
        templates: PromptTemplateLoader,
        max_rows_per_request: int = DEFAULT_MAX_ROWS_PER_REQUEST,
        max_projects_per_request: int = DEFAULT_MAX_PROJECTS_PER_REQUEST,
        max_parallel_chunks: int = 4
    ):
        self.completion_client = completion_client
        self.templates = templates
        self.max_rows_per_request = max_rows_per_request
        self.max_projects_per_request = max_projects_per_request
        self.max_parallel_chunks = max(1, max_parallel_chunks)

    @classmethod
    def from_settings(cls, settings, completion_client: CompletionClient) -> "ReportPipeline":
        return cls(
            completion_client=completion_client,
            templates=PromptTemplateLoader(settings.prompts_dir),
            max_rows_per_request=settings.max_rows_per_request,
            max_projects_per_request=settings.max_projects_per_request,
            max_parallel_chunks=settings.max_parallel_chunks,
        )

    async def generate_report(
        self,
        topic: str,
        selected_categories: Sequence[str],
        rows: Sequence[Row],
        request_id: Optional[str] = None
    ) -> ReportResult:
        """
        Сгенерировать отчет

        Raises:
            NoDataError: по выбранным категориям нет строк
            CompletionError: LLM недоступна после всех повторов
            TemplateNotFoundError: нет шаблона основного промпта
        """
        request_id = request_id or generate_request_id()
        categories = list(selected_categories)

        logger.info(
            f"📊 Starting report generation: request_id={request_id}, topic='{topic}', "
            f"categories={len(categories)}, total_rows={len(rows)}"
        )

        dataset = prepare_dataset(rows, categories)
        if dataset.is_empty:
            raise NoDataError(
                "No data found for selected categories",
                context={"request_id": request_id, "categories": categories}
            )

        if needs_chunking(dataset, self.max_rows_per_request, self.max_projects_per_request):
            logger.info(
                f"✂️ Chunking required: request_id={request_id}, "
                f"rows={dataset.total_rows}, projects={len(dataset.projects)}"
            )
            result = await self._generate_chunked(topic, categories, dataset, request_id)
        else:
            result = await self._generate_single(topic, categories, dataset, request_id)

        logger.info(
            f"✅ Report generated: request_id={request_id}, chunked={result.used_chunking}, "
            f"chunks={result.chunk_count}, repaired={result.repaired}, length={len(result.content)}"
        )
        return result

    async def _summarize(
        self,
        topic: str,
        categories: List[str],
        rows: Sequence[Row],
        request_id: str
    ) -> str:
        data_text = serialize_rows(rows)
        user_prompt = fill_template(
            self.templates.load(FEATURE_SUMMARY_TEMPLATE),
            topic=topic,
            selected_categories=", ".join(categories),
            data=data_text
        )
        return await self.completion_client.generate_completion(
            ANALYST_SYSTEM_PROMPT, user_prompt, request_id
        )

    async def _generate_single(
        self,
        topic: str,
        categories: List[str],
        dataset: FilteredDataset,
        request_id: str
    ) -> ReportResult:
        content = await self._summarize(topic, categories, dataset.rows, request_id)
        final, repaired = await self._repair_if_needed(content, serialize_rows(dataset.rows), request_id)
        return ReportResult(
            request_id=request_id,
            content=final,
            used_chunking=False,
            repaired=repaired
        )

    async def _generate_chunked(
        self,
        topic: str,
        categories: List[str],
        dataset: FilteredDataset,
        request_id: str
    ) -> ReportResult:
        chunks = partition_into_chunks(dataset.rows, self.max_rows_per_request)
        logger.info(
            f"Data chunked: request_id={request_id}, chunks={len(chunks)}, "
            f"total_rows={dataset.total_rows}"
        )

        summaries = await self._summarize_chunks(topic, categories, chunks, request_id)

        summaries_text = "\n\n".join(
            f"\n=== Чанк {index} ===\n{summary}"
            for index, summary in enumerate(summaries, start=1)
        )
        aggregation_prompt = AGGREGATION_PROMPT.format(
            topic=topic,
            categories=", ".join(categories),
            summaries=summaries_text
        )

        content = await self.completion_client.generate_completion(
            AGGREGATION_SYSTEM_PROMPT, aggregation_prompt, f"{request_id}_final"
        )
        final, repaired = await self._repair_if_needed(content, summaries_text, request_id)

        return ReportResult(
            request_id=request_id,
            content=final,
            used_chunking=True,
            chunk_count=len(chunks),
            repaired=repaired
        )

    async def _summarize_chunks(
        self,
        topic: str,
        categories: List[str],
        chunks: List[List[Row]],
        request_id: str
    ) -> List[str]:
        """Fan-out по чанкам с ограничением параллелизма, результат в порядке чанков"""
        semaphore = asyncio.Semaphore(self.max_parallel_chunks)

        async def _run(index: int, chunk: List[Row]) -> str:
            async with semaphore:
                logger.debug(f"Chunk {index} started: request_id={request_id}, rows={len(chunk)}")
                return await self._summarize(topic, categories, chunk, f"{request_id}_chunk_{index}")

        tasks = [asyncio.create_task(_run(index, chunk)) for index, chunk in enumerate(chunks)]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _repair_if_needed(self, content: str, data_text: str, request_id: str):
        """
        Returns:
            (текст, был ли выполнен успешный repair)
        """
        if validate_report_structure(content):
            return content, False

        logger.warning(
            f"⚠️ Response structure validation failed, attempting repair: "
            f"request_id={request_id}, has_bullets={has_bullets(content)}, "
            f"has_structure={has_row_structure(content)}"
        )

        try:
            repair_prompt = fill_template(
                self.templates.load(REPAIR_TEMPLATE),
                original_response=content,
                data=data_text
            )
            repaired = await self.completion_client.generate_completion(
                REPAIR_SYSTEM_PROMPT, repair_prompt, f"{request_id}_repair"
            )
        except (CompletionError, TemplateNotFoundError, ValueError) as e:
            logger.error(f"❌ Repair failed, returning original response: request_id={request_id}, error={e}")
            return content + REPAIR_CAVEAT, False

        logger.info(f"🔧 Response repaired: request_id={request_id}")
        return repaired, True
