"""
OpenRouter API client components.

Clean separation of concerns:
- transport.py: HTTP requests
- response_parser.py: Response parsing
- retry_policy.py: Retry logic
"""

from .errors import MalformedResponseError
from .transport import OpenRouterTransport
from .response_parser import ParsedResponse, ResponseParser
from .retry_policy import RetryPolicy

__all__ = [
    'OpenRouterTransport',
    'ParsedResponse',
    'ResponseParser',
    'MalformedResponseError',
    'RetryPolicy',
]
