"""
Prompt Templates - загрузка markdown шаблонов и подстановка плейсхолдеров

Подстановка - простая замена токенов, без шаблонизатора: каждый известный
токен заменяется только при первом вхождении, за один проход, поэтому
порядок аргументов не важен и подставленный текст повторно не разбирается.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Union

from core.errors import TemplateNotFoundError

logger = logging.getLogger(__name__)

FEATURE_SUMMARY_TEMPLATE = "feature_summary_prompt"
REPAIR_TEMPLATE = "repair_prompt"

PLACEHOLDERS = ("topic", "selected_categories", "data", "original_response")

_PLACEHOLDER_RE = re.compile(r"\{(" + "|".join(PLACEHOLDERS) + r")\}")


def fill_template(template: str, **values: str) -> str:
    """
    Подставить значения в шаблон

    Example:
        fill_template("Тема: {topic}", topic="Wellbeing") -> "Тема: Wellbeing"
    """
    unknown = set(values) - set(PLACEHOLDERS)
    if unknown:
        raise ValueError(f"Unknown template placeholders: {sorted(unknown)}")

    used = set()

    def _replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name in used or name not in values:
            return match.group(0)
        used.add(name)
        return values[name]

    return _PLACEHOLDER_RE.sub(_replace, template)


class PromptTemplateLoader:
    """
    Загружает шаблоны `<templates_dir>/<name>.md` с кешированием

    Args:
        templates_dir: Директория с шаблонами промптов
    """

    def __init__(self, templates_dir: Union[str, Path]):
        self.templates_dir = Path(templates_dir)
        self._cache: Dict[str, str] = {}

    def load(self, name: str) -> str:
        """
        Raises:
            TemplateNotFoundError: файла шаблона нет или он не читается
        """
        if name in self._cache:
            return self._cache[name]

        path = self.templates_dir / f"{name}.md"
        try:
            template = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to load prompt template '{name}' from {path}: {e}")
            raise TemplateNotFoundError(
                f"Prompt template not found: {name}",
                context={"path": str(path)}
            ) from e

        self._cache[name] = template
        return template

    def reload(self):
        """Сбросить кеш шаблонов"""
        self._cache.clear()
        logger.info("Prompt templates cache cleared")
