import logging
import requests
from typing import Dict, Any, Optional


class OpenRouterTransport:
    def __init__(
        self,
        api_key: str,
        logger: Optional[logging.Logger] = None,
        site_url: Optional[str] = None,
        site_name: Optional[str] = None,
        base_url: str = "https://openrouter.ai/api/v1/chat/completions"
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.api_key = api_key
        self.site_url = site_url or "https://github.com/outliner"
        self.site_name = site_name or "outliner"
        self.base_url = base_url
        self.session = requests.Session()

    def post(self, payload: Dict[str, Any], timeout: int = 120) -> Dict[str, Any]:
        model = payload.get('model', 'unknown')

        self.logger.debug(
            f"OpenRouter API request: model={model}, timeout={timeout}, "
            f"has_tools={'tools' in payload}, num_messages={len(payload.get('messages', []))}"
        )

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.site_url,
            "X-Title": self.site_name
        }

        response = self.session.post(
            self.base_url,
            headers=headers,
            json=payload,
            timeout=timeout
        )

        self.logger.debug(
            f"OpenRouter API response: model={model}, status_code={response.status_code}"
        )

        if not response.ok:
            try:
                response._error_data_cache = response.json()
            except ValueError:
                response._error_data_cache = None

        response.raise_for_status()

        return response.json()
