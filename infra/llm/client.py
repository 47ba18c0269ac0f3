"""
LLM client for the OpenRouter API.

Orchestrates transport, retry and parsing layers.
"""

import logging
from typing import List, Dict, Tuple, Optional

from infra.llm.openrouter import OpenRouterTransport, ResponseParser, RetryPolicy


class LLMClient:
    """
    Orchestrates OpenRouter API calls with retry and parsing.

    Components:
    - OpenRouterTransport: HTTP requests
    - RetryPolicy: Retry logic with backoff and nonce
    - ResponseParser: Response extraction and malformed handling
    """

    def __init__(
        self,
        api_key: str,
        site_url: Optional[str] = None,
        site_name: Optional[str] = None,
        max_retries: int = 3,
        logger: Optional[logging.Logger] = None
    ):
        self.transport = OpenRouterTransport(api_key, logger=logger, site_url=site_url, site_name=site_name)
        self.retry = RetryPolicy(logger=logger, max_retries=max_retries)
        self.parser = ResponseParser(logger=logger)

    def call(
        self,
        model: str,
        messages: List[Dict],
        temperature: float = 0.0,
        max_tokens: Optional[int] = None,
        timeout: int = 120,
        response_format: Optional[Dict] = None
    ) -> Tuple[str, Dict]:
        """
        Make an LLM API call with automatic retries.

        Args:
            model: OpenRouter model name (e.g., "google/gemini-2.5-flash")
            messages: List of message dicts with 'role' and 'content'
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate (None = no limit)
            timeout: Request timeout in seconds
            response_format: Optional structured output schema.
                Use {"type": "json_schema", "json_schema": {...}} for guaranteed JSON

        Returns:
            Tuple of (response_text, usage_dict)

        Raises:
            requests.exceptions.RequestException: On non-retryable errors
            MalformedResponseError: When every attempt returned an unusable body
        """
        payload = {
            "model": model,
            "messages": [dict(m) for m in messages],
            "temperature": temperature,
        }

        if max_tokens:
            payload["max_tokens"] = max_tokens

        if response_format:
            payload["response_format"] = response_format

        def _make_call():
            result = self.transport.post(payload, timeout)
            return self.parser.parse_chat_completion(result, model)

        parsed = self.retry.execute_with_retry(_make_call, payload)
        return parsed.content, parsed.usage

    def call_with_tools(
        self,
        model: str,
        messages: List[Dict],
        tools: List[Dict],
        temperature: float = 0.0,
        max_tokens: Optional[int] = None,
        timeout: int = 120
    ) -> Tuple[Optional[str], Dict, Optional[List[Dict]]]:
        """
        Make an LLM API call with tool calling support.

        Args:
            tools: Tool definitions in OpenAI function format
                   [{"type": "function", "function": {"name": "...", "parameters": {...}}}]

        Returns:
            Tuple of (response_text, usage_dict, tool_calls)
            - response_text: Can be None if model only calls tools
            - tool_calls: None if no tools called, otherwise list of:
              [{"id": "call_xxx", "type": "function", "function": {"name": "...", "arguments": "..."}}]
        """
        payload = {
            "model": model,
            "messages": [dict(m) for m in messages],
            "temperature": temperature,
            "tools": tools,
        }

        if max_tokens:
            payload["max_tokens"] = max_tokens

        def _make_call():
            result = self.transport.post(payload, timeout)
            return self.parser.parse_tool_completion(result, model)

        parsed = self.retry.execute_with_retry(_make_call, payload)
        return parsed.content, parsed.usage, parsed.tool_calls
