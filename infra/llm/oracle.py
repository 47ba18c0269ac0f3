"""
Text-understanding oracle.

Every pipeline stage asks its questions through Oracle.infer(): a prompt plus a
pydantic contract describing the structured answer, optionally with tools the
oracle may call (multi-round) before submitting that answer.

    answer = oracle.infer(prompt, TocDetectionResult, tools=[read_page], max_rounds=500)

OpenRouterOracle is the production backend. Tests script their own Oracle.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from infra.cancellation import CancellationToken, DeadlineExceeded, check_cancelled, run_with_deadline
from infra.config import ConfigError, LLMSettings
from infra.llm.agent import AgentClient, AgentTools
from infra.llm.client import LLMClient
from infra.llm.openrouter import MalformedResponseError

M = TypeVar('M', bound=BaseModel)

SUBMIT_TOOL_NAME = "submit_result"
DEFAULT_MAX_ROUNDS = 25


class OracleError(Exception):
    """Base class for recoverable oracle failures."""


class OracleTimeoutError(OracleError):
    """The oracle call ran past its deadline."""


class OracleOutputError(OracleError):
    """The oracle never produced output matching the contract."""


class OracleTransportError(OracleError):
    """The backend could not be reached or kept failing."""


@dataclass
class OracleTool:
    """A tool the oracle may call while answering. Arguments are validated by input_model."""
    name: str
    description: str
    input_model: Type[BaseModel]
    handler: Callable[[Any], Any]

    def to_openai(self) -> Dict:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_model.model_json_schema()
            }
        }

    def invoke(self, arguments: Dict) -> str:
        try:
            args = self.input_model.model_validate(arguments)
        except ValidationError as e:
            return json.dumps({"error": f"Invalid arguments for {self.name}: {e.errors(include_url=False)}"}, default=str)
        result = self.handler(args)
        if isinstance(result, str):
            return result
        if isinstance(result, BaseModel):
            return result.model_dump_json()
        return json.dumps(result, default=str)


def contract_response_format(contract: Type[BaseModel]) -> Dict:
    return {
        "type": "json_schema",
        "json_schema": {
            "name": contract.__name__.lower(),
            "strict": True,
            "schema": contract.model_json_schema()
        }
    }


class Oracle(ABC):
    """Structured-inference interface shared by every stage."""

    timeout_seconds: Optional[float] = None
    # How long a timed-out call may keep running before infer() returns. None waits for it.
    drain_timeout_seconds: Optional[float] = None

    def infer(
        self,
        prompt: str,
        contract: Type[M],
        tools: Optional[Sequence[OracleTool]] = None,
        max_rounds: Optional[int] = None,
        cancel: Optional[CancellationToken] = None
    ) -> M:
        """
        Ask the oracle and return an instance of contract.

        Raises:
            OracleTimeoutError / OracleOutputError / OracleTransportError
            PipelineCancelled: If cancel fires before or during the call
        """
        check_cancelled(cancel, "oracle call")
        call_token = CancellationToken(parent=cancel)
        try:
            return run_with_deadline(
                lambda: self._infer(prompt, contract, list(tools or []), max_rounds, call_token),
                self.timeout_seconds,
                on_timeout=lambda: call_token.cancel("oracle call deadline exceeded"),
                drain_seconds=self.drain_timeout_seconds
            )
        except DeadlineExceeded as e:
            raise OracleTimeoutError(str(e)) from e

    @abstractmethod
    def _infer(
        self,
        prompt: str,
        contract: Type[M],
        tools: List[OracleTool],
        max_rounds: Optional[int],
        cancel: Optional[CancellationToken]
    ) -> M:
        pass


class ContractTools(AgentTools):
    """Caller tools plus a submit_result tool whose arguments are the contract."""

    def __init__(self, contract: Type[BaseModel], tools: List[OracleTool]):
        self.contract = contract
        self.tools = {tool.name: tool for tool in tools}
        self.result: Optional[BaseModel] = None
        self.rejected_submissions = 0

    def get_tools(self) -> List[Dict]:
        specs = [tool.to_openai() for tool in self.tools.values()]
        specs.append({
            "type": "function",
            "function": {
                "name": SUBMIT_TOOL_NAME,
                "description": "Submit your final answer. Call exactly once when you are done.",
                "parameters": self.contract.model_json_schema()
            }
        })
        return specs

    def execute_tool(self, name: str, arguments: Dict) -> str:
        if name == SUBMIT_TOOL_NAME:
            try:
                self.result = self.contract.model_validate(arguments)
            except ValidationError as e:
                self.rejected_submissions += 1
                return json.dumps({
                    "error": "Result does not match the required schema; fix it and submit again",
                    "details": e.errors(include_url=False)
                }, default=str)
            return json.dumps({"success": True})

        tool = self.tools.get(name)
        if tool is None:
            return json.dumps({"error": f"Unknown tool: {name}"})
        return tool.invoke(arguments)

    def is_complete(self) -> bool:
        return self.result is not None


class OpenRouterOracle(Oracle):
    """
    Oracle backed by an OpenRouter chat model.

    Without tools the contract is sent as a json_schema response_format. With
    tools the AgentClient loop runs until the model calls submit_result.
    """

    def __init__(
        self,
        settings: LLMSettings,
        log_dir: Optional[Path] = None,
        logger: Optional[logging.Logger] = None,
        llm_client: Optional[LLMClient] = None
    ):
        self.settings = settings
        self.log_dir = Path(log_dir) if log_dir else None
        self.logger = logger or logging.getLogger(__name__)
        self.timeout_seconds = settings.oracle_timeout_seconds
        # A stopped agent loop still finishes its in-flight request, retries included
        self.drain_timeout_seconds = settings.request_timeout_seconds * (settings.max_retries + 1)

        if llm_client is None:
            if settings.provider != "openrouter":
                raise ConfigError(f"Unsupported LLM provider: {settings.provider}")
            api_key = settings.resolved_api_key()
            if not api_key:
                raise ConfigError("No API key configured (set OPENROUTER_API_KEY or llm.api_key)")
            llm_client = LLMClient(
                api_key,
                site_url=settings.site_url,
                site_name=settings.site_name,
                max_retries=settings.max_retries,
                logger=self.logger
            )
        self.llm_client = llm_client
        self._calls = 0

    def _infer(self, prompt, contract, tools, max_rounds, cancel):
        self._calls += 1
        if tools:
            return self._infer_with_tools(prompt, contract, tools, max_rounds, cancel)
        return self._infer_structured(prompt, contract)

    def _infer_structured(self, prompt: str, contract: Type[M]) -> M:
        messages = [{"role": "user", "content": prompt}]
        try:
            content, usage = self.llm_client.call(
                model=self.settings.model,
                messages=messages,
                temperature=self.settings.temperature,
                timeout=self.settings.request_timeout_seconds,
                response_format=contract_response_format(contract)
            )
        except (requests.exceptions.RequestException, MalformedResponseError) as e:
            raise OracleTransportError(f"{type(e).__name__}: {e}") from e

        self.logger.debug(
            f"Structured call for {contract.__name__}: "
            f"prompt_tokens={usage.get('prompt_tokens', 0)}, completion_tokens={usage.get('completion_tokens', 0)}"
        )

        try:
            return contract.model_validate_json(_strip_code_fence(content))
        except ValidationError as e:
            raise OracleOutputError(f"Response does not match {contract.__name__}: {e}") from e

    def _infer_with_tools(self, prompt, contract, tools, max_rounds, cancel):
        contract_tools = ContractTools(contract, tools)
        agent = AgentClient(
            max_iterations=max_rounds or DEFAULT_MAX_ROUNDS,
            log_dir=self.log_dir / "agents" if self.log_dir else None,
            log_filename=f"{contract.__name__.lower()}-{self._calls:03d}.json",
            logger=self.logger,
            cancel=cancel,
            timeout=self.settings.request_timeout_seconds
        )
        instructions = (
            f"{prompt}\n\n"
            f"When you are finished, call the `{SUBMIT_TOOL_NAME}` tool with your final answer."
        )
        result = agent.run(
            llm_client=self.llm_client,
            model=self.settings.model,
            initial_messages=[{"role": "user", "content": instructions}],
            tools=contract_tools.get_tools(),
            execute_tool=contract_tools.execute_tool,
            is_complete=lambda messages: contract_tools.is_complete(),
            temperature=self.settings.temperature
        )

        if contract_tools.result is not None:
            return contract_tools.result

        if result.exception is not None:
            raise OracleTransportError(result.error_message) from result.exception
        raise OracleOutputError(
            f"No valid {contract.__name__} submitted after {result.iterations} rounds "
            f"({contract_tools.rejected_submissions} rejected): {result.error_message}"
        )


def _strip_code_fence(content: str) -> str:
    """Some models wrap JSON in ``` fences even with response_format set."""
    text = content.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def create_oracle(settings: LLMSettings, log_dir: Optional[Path] = None, logger: Optional[logging.Logger] = None) -> Oracle:
    return OpenRouterOracle(settings, log_dir=log_dir, logger=logger)
