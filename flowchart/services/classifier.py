# flowchart/services/classifier.py
import re
import logging
from typing import Iterable, Optional

from ..exceptions import ValidationError
from ..prompt_presets import ALGORITHM_KEYWORDS, EMPTY_INPUT_MESSAGE, NOT_ALGORITHM_MESSAGE

logger = logging.getLogger("flowchart")

STEP_CUES = re.compile(
    r"\bstep\s*\d+|\b(?:first|second|third|then|next|finally|lastly)\b",
    re.IGNORECASE,
)
LONG_DESCRIPTION_WORDS = 15


def classify(text: str, keywords: Optional[Iterable[str]] = None) -> bool:
    """
    Грубая эвристика «похоже ли на алгоритм»:
    ключевое слово, шаги (step 1 / first / then ...) или просто длинный текст.
    Ложные срабатывания допустимы: это лишь фильтр перед платным вызовом модели.
    """
    lower = (text or "").lower()
    vocabulary = ALGORITHM_KEYWORDS if keywords is None else keywords

    hit = next((k for k in vocabulary if k.lower() in lower), None)
    if hit:
        logger.debug("classify: keyword %r", hit)
        return True
    if STEP_CUES.search(lower):
        logger.debug("classify: step cue")
        return True
    if len(lower.split()) > LONG_DESCRIPTION_WORDS:
        logger.debug("classify: long description")
        return True
    return False


def validate_algorithm_text(text: str, keywords: Optional[Iterable[str]] = None) -> str:
    """Возвращает обрезанный текст или бросает ValidationError с сообщением для пользователя."""
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValidationError(EMPTY_INPUT_MESSAGE)
    if not classify(cleaned, keywords):
        logger.info("classifier rejected input (%d chars)", len(cleaned))
        raise ValidationError(NOT_ALGORITHM_MESSAGE)
    return cleaned
