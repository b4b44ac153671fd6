import json
import logging
from typing import Any, Dict, List, Optional

import requests

from approvex.core.config import settings
from approvex.core.exceptions import IntegrationError
from approvex.core.prompts import DECISION_SUMMARY_SYSTEM, DECISION_SUMMARY_USER_TEMPLATE
from approvex.services.http_retry import retry_transient

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"


@retry_transient
def _call_model(messages: List[Dict[str, str]]) -> str:
    response = requests.post(
        OPENROUTER_URL,
        json={
            "model": settings.ai.model_name,
            "messages": messages,
            "temperature": settings.ai.temperature,
        },
        headers={
            "Authorization": f"Bearer {settings.ai.openrouter_api_key}",
            "Content-Type": "application/json",
        },
        timeout=settings.integrations.timeout_seconds,
    )
    response.raise_for_status()
    return response.json()["choices"][0]["message"]["content"]


def _safe_json(value: Any) -> str:
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return str(value)


def generate_decision_summary(
    request_type: str,
    status: str,
    manager_comment: Optional[str],
    request: Dict[str, Any],
) -> str:
    """
    Ask the LLM for a 1-2 sentence neutral summary of a decision.

    Raises:
        IntegrationError: If AI is disabled, unconfigured or the call fails.
    """
    if settings.ai.kill_switch:
        raise IntegrationError("AI services are currently offline for maintenance.")
    if not settings.ai.openrouter_api_key:
        raise IntegrationError("OPENROUTER_API_KEY is not configured. Set it in the environment.")

    messages = [
        {"role": "system", "content": DECISION_SUMMARY_SYSTEM},
        {
            "role": "user",
            "content": DECISION_SUMMARY_USER_TEMPLATE.format(
                request_type=request_type,
                status=status,
                manager_comment=manager_comment or "(none)",
                request_data=_safe_json(request),
            ),
        },
    ]

    try:
        content = _call_model(messages)
    except (requests.exceptions.RequestException, KeyError, IndexError, ValueError) as e:
        logger.error(f"Decision summary generation failed: {e}")
        raise IntegrationError(f"AI service error: {e}") from e

    summary = (content or "").strip()
    if not summary:
        raise IntegrationError("AI service returned an empty summary")
    return summary
