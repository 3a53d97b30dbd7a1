"""
Services Package - LLM completion and report generation
"""

from .completion_client import (
    CompletionClient,
    FailureKind,
    classify_failure,
    generate_request_id,
)
from .prompt_templates import PromptTemplateLoader, fill_template
from .report_pipeline import (
    ReportPipeline,
    ReportResult,
    partition_into_chunks,
    validate_report_structure,
    REPAIR_CAVEAT,
)

__all__ = [
    "CompletionClient",
    "FailureKind",
    "classify_failure",
    "generate_request_id",
    "PromptTemplateLoader",
    "fill_template",
    "ReportPipeline",
    "ReportResult",
    "partition_into_chunks",
    "validate_report_structure",
    "REPAIR_CAVEAT",
]
