class MalformedResponseError(Exception):
    """Raised when an OpenRouter response is missing the expected fields."""
