from infra.config import OutlineSettings, load_settings, get_settings

from infra.llm import (
    LLMClient,
    Oracle,
    OracleTool,
    OracleError,
    OpenRouterOracle,
)

from infra.logger import (
    PipelineLogger,
    create_logger,
)

from infra.events import EventType, ProgressEvent, EventEmitter
from infra.cancellation import CancellationToken, PipelineCancelled

__all__ = [
    "OutlineSettings",
    "load_settings",
    "get_settings",

    "LLMClient",
    "Oracle",
    "OracleTool",
    "OracleError",
    "OpenRouterOracle",

    "PipelineLogger",
    "create_logger",

    "EventType",
    "ProgressEvent",
    "EventEmitter",
    "CancellationToken",
    "PipelineCancelled",
]
