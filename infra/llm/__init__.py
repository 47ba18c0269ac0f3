"""
LLM subsystem for OpenRouter API integration.

Provides:
- LLMClient: Single LLM calls with retry logic
- AgentClient: Multi-round tool-calling loop
- Oracle: Structured inference against a pydantic contract
"""

from infra.llm.client import LLMClient
from infra.llm.oracle import (
    Oracle,
    OracleTool,
    OracleError,
    OracleTimeoutError,
    OracleOutputError,
    OracleTransportError,
    OpenRouterOracle,
    create_oracle,
)

__all__ = [
    "LLMClient",
    "Oracle",
    "OracleTool",
    "OracleError",
    "OracleTimeoutError",
    "OracleOutputError",
    "OracleTransportError",
    "OpenRouterOracle",
    "create_oracle",
]
