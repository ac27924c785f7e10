# flowchart/services/gemini.py
import logging
from typing import Optional

import requests
from django.conf import settings

from ..exceptions import EmptyResponseError, ProviderError

logger = logging.getLogger("flowchart")


def _endpoint(model_id: str) -> str:
    return f"{settings.GEMINI_API_URL.rstrip('/')}/models/{model_id}:generateContent"


UNEXPECTED_PAYLOAD = "Gemini returned an unexpected payload"


def _response_text(data: dict) -> str:
    candidates = data.get("candidates") or []
    if not isinstance(candidates, list):
        raise ProviderError(UNEXPECTED_PAYLOAD)
    if not candidates:
        feedback = data.get("promptFeedback")
        reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
        raise EmptyResponseError(f"Gemini returned no candidates (block reason: {reason})")

    # candidates[0].content.parts[*].text — любая другая форма считается битым ответом
    candidate = candidates[0]
    if not isinstance(candidate, dict):
        raise ProviderError(UNEXPECTED_PAYLOAD)
    content = candidate.get("content") or {}
    if not isinstance(content, dict):
        raise ProviderError(UNEXPECTED_PAYLOAD)
    parts = content.get("parts") or []
    if not isinstance(parts, list) or not all(isinstance(part, dict) for part in parts):
        raise ProviderError(UNEXPECTED_PAYLOAD)
    texts = [part.get("text", "") for part in parts]
    if not all(isinstance(text, str) for text in texts):
        raise ProviderError(UNEXPECTED_PAYLOAD)
    return "".join(texts)


def query_gemini(
    prompt: str,
    model_id: Optional[str] = None,
    temperature: Optional[float] = None,
) -> str:
    """
    Один запрос к Gemini generateContent, без ретраев и стриминга.
    Любой сбой превращается в ProviderError; решение о запасной диаграмме принимает вызывающий.
    """
    api_key = settings.GEMINI_API_KEY
    if not api_key:
        raise ProviderError("GEMINI_API_KEY is not configured")

    model_id = model_id or settings.GEMINI_MODEL
    payload = {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": {
            "temperature": settings.GEMINI_TEMPERATURE if temperature is None else temperature,
        },
    }
    headers = {"x-goog-api-key": api_key, "Content-Type": "application/json"}

    try:
        response = requests.post(
            _endpoint(model_id), headers=headers, json=payload, timeout=settings.GEMINI_TIMEOUT
        )
    except requests.RequestException as e:
        raise ProviderError(f"Gemini request failed: {e}") from e

    logger.info("[gemini] model=%s status=%s", model_id, response.status_code)
    if response.status_code >= 400:
        # квота, неверный ключ и т.п. — покажем начало тела в логах
        logger.warning("[gemini] error body: %s", response.text[:400])
        raise ProviderError(f"Gemini responded with HTTP {response.status_code}")

    try:
        data = response.json()
    except ValueError as e:
        raise ProviderError("Gemini returned a non-JSON body") from e
    if not isinstance(data, dict):
        raise ProviderError(UNEXPECTED_PAYLOAD)

    text = _response_text(data)
    if not text.strip():
        raise EmptyResponseError("Gemini returned an empty text")
    return text
