import requests
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from approvex.core.config import settings


def is_transient(exc: BaseException) -> bool:
    """Connection drops, timeouts and 5xx responses are worth another attempt; 4xx are not."""
    if isinstance(exc, requests.exceptions.HTTPError):
        response = exc.response
        return response is None or response.status_code >= 500
    return isinstance(exc, (requests.exceptions.ConnectionError, requests.exceptions.Timeout))


def retry_transient(func):
    return retry(
        stop=stop_after_attempt(settings.integrations.max_attempts),
        wait=wait_exponential(multiplier=settings.integrations.wait_seconds, max=10),
        retry=retry_if_exception(is_transient),
        reraise=True,
    )(func)
