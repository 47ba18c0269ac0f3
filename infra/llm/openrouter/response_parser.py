import logging
from typing import Dict, Any, Optional, List
from dataclasses import dataclass

from .errors import MalformedResponseError


@dataclass
class ParsedResponse:
    content: Optional[str]
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    reasoning_tokens: int
    model_used: str
    tool_calls: Optional[List[Dict]] = None

    @property
    def usage(self) -> Dict[str, int]:
        return {
            'prompt_tokens': self.prompt_tokens,
            'completion_tokens': self.completion_tokens,
            'total_tokens': self.total_tokens,
            'reasoning_tokens': self.reasoning_tokens,
        }


class ResponseParser:
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def parse_chat_completion(self, result: Dict[str, Any], model: str) -> ParsedResponse:
        parsed = self.parse_tool_completion(result, model)
        if parsed.content is None:
            raise MalformedResponseError("Malformed API response from OpenRouter: empty content")
        return parsed

    def parse_tool_completion(self, result: Dict[str, Any], model: str) -> ParsedResponse:
        try:
            message = result['choices'][0]['message']
            content = message.get('content')
            tool_calls = message.get('tool_calls') or None
            usage = result.get('usage') or {}
            details = usage.get('completion_tokens_details') or {}

            parsed = ParsedResponse(
                content=content,
                prompt_tokens=usage.get('prompt_tokens', 0),
                completion_tokens=usage.get('completion_tokens', 0),
                total_tokens=usage.get('total_tokens', 0),
                reasoning_tokens=details.get('reasoning_tokens', 0),
                model_used=result.get('model', model),
                tool_calls=tool_calls
            )

            self.logger.debug(
                f"Parsed completion: model={model}, "
                f"content_length={len(content) if content else 0}, "
                f"num_tool_calls={len(tool_calls) if tool_calls else 0}, "
                f"prompt_tokens={parsed.prompt_tokens}, completion_tokens={parsed.completion_tokens}"
            )
            return parsed

        except (KeyError, IndexError, TypeError, AttributeError) as e:
            response_keys = list(result.keys()) if isinstance(result, dict) else type(result).__name__
            self.logger.error(
                f"Malformed API response from OpenRouter: model={model}, "
                f"error_type={type(e).__name__}, response_keys={response_keys}"
            )
            raise MalformedResponseError(
                f"Malformed API response from OpenRouter: missing '{e.args[0] if e.args else 'expected key'}'"
            ) from e
