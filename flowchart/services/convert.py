# flowchart/services/convert.py
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ..exceptions import EmptyResponseError, ProviderError
from ..prompt_presets import FALLBACK_DIAGRAM, IO_FALLBACK_DIAGRAM, build_prompt
from .gemini import query_gemini
from .normalize import extract_diagram, looks_like_flowchart
from .repair import repair

logger = logging.getLogger("flowchart")


@dataclass(frozen=True)
class Conversion:
    mermaid_code: str
    full_response: Optional[str] = None
    fallback: bool = False

    def as_payload(self) -> dict:
        if self.fallback:
            return {"mermaidCode": self.mermaid_code, "fallback": True}
        return {"mermaidCode": self.mermaid_code, "fullResponse": self.full_response}


def _has_body(code: str) -> bool:
    # только голова `flowchart TD` — рисовать нечего
    return len(code.splitlines()) > 1


def convert_algorithm(text: str, generate: Optional[Callable[[str], str]] = None) -> Conversion:
    """
    Промпт → модель → извлечение → repair.
    Ошибки провайдера не пробрасываем: пользователь получает запасную диаграмму.
    """
    generate = generate or query_gemini
    prompt = build_prompt(text)

    try:
        full_response = generate(prompt)
    except EmptyResponseError as e:
        logger.warning("generation returned nothing, using IO fallback: %s", e)
        return Conversion(repair(IO_FALLBACK_DIAGRAM), fallback=True)
    except ProviderError as e:
        logger.warning("generation failed, using fallback: %s", e)
        return Conversion(repair(FALLBACK_DIAGRAM), fallback=True)

    logger.debug("=== FULL RESPONSE ===\n%s", full_response)
    candidate = extract_diagram(full_response)
    if not looks_like_flowchart(candidate):
        logger.info("model answer has no flowchart root, repair will add one")
    code = repair(candidate)
    logger.debug("=== REPAIRED CODE ===\n%s", code)

    if not _has_body(code):
        logger.warning("repaired diagram has no nodes, using IO fallback")
        return Conversion(repair(IO_FALLBACK_DIAGRAM), full_response=full_response, fallback=True)
    return Conversion(code, full_response=full_response)
