import time
import uuid
import random
import logging
import requests
from typing import Callable, Dict, Any, TypeVar, Optional

from .errors import MalformedResponseError

T = TypeVar('T')

RETRYABLE_STATUS = (413, 422, 429)
NONCE_STATUS = (413, 422)


class RetryPolicy:
    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        max_retries: int = 3,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.max_retries = max(1, max_retries)
        self.sleep = sleep

    def _delay(self) -> float:
        return 2.0 + random.uniform(-1.5, 1.5)

    def execute_with_retry(
        self,
        fn: Callable[[], T],
        payload: Dict[str, Any]
    ) -> T:
        model = payload.get('model', 'unknown')

        for attempt in range(self.max_retries):
            final_attempt = attempt == self.max_retries - 1
            try:
                result = fn()

                if attempt > 0:
                    self.logger.debug(f"Request succeeded after {attempt+1} attempts (model={model})")

                return result

            except MalformedResponseError as e:
                if final_attempt:
                    raise
                delay = self._delay()
                self.logger.debug(
                    f"Malformed response, retrying in {delay:.1f}s "
                    f"(model={model}, attempt={attempt+1}/{self.max_retries}): {e}"
                )
                self.sleep(delay)

            except requests.exceptions.HTTPError as e:
                status_code = e.response.status_code if e.response is not None else 0

                if final_attempt or not self._is_retryable(status_code):
                    raise

                if status_code in NONCE_STATUS:
                    self._inject_nonce(payload, attempt)

                delay = self._delay()
                self.logger.debug(
                    f"HTTP {status_code} error, retrying in {delay:.1f}s "
                    f"(model={model}, attempt={attempt+1}/{self.max_retries})"
                )
                self.sleep(delay)

            except requests.exceptions.Timeout:
                if final_attempt:
                    raise
                delay = self._delay()
                self.logger.debug(
                    f"Request timeout, retrying in {delay:.1f}s "
                    f"(model={model}, attempt={attempt+1}/{self.max_retries})"
                )
                self.sleep(delay)

    def _is_retryable(self, status: int) -> bool:
        return status >= 500 or status in RETRYABLE_STATUS

    def _inject_nonce(self, payload: Dict[str, Any], attempt: int):
        """Append a unique marker to the last user message so the provider sees a fresh request."""
        nonce = uuid.uuid4().hex[:16]

        for msg in reversed(payload.get('messages', [])):
            if msg.get('role') != 'user':
                continue
            content = msg.get('content', '')
            if isinstance(content, str):
                msg['content'] = f"{content}\n<!-- retry_{attempt}_id: {nonce} -->"
                self.logger.debug(f"Injected nonce into user message: {nonce}")
            return
