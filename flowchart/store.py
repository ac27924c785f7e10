# flowchart/store.py
"""
Состояние запроса «текст → flowchart»: idle → loading → ready | failed, плюс clear.

Переходы — чистые редьюсеры, возвращающие новое состояние.
Store применяет их под локом и раздаёт подписчикам.
Каждый submit получает свой token: результат устаревшего запроса
(например, после regenerate или clear) просто отбрасывается.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Iterable, List, Optional

from django.conf import settings

from .exceptions import ValidationError
from .prompt_presets import FALLBACK_DIAGRAM
from .services.classifier import validate_algorithm_text
from .services.convert import Conversion, convert_algorithm
from .services.repair import repair

logger = logging.getLogger("flowchart")


class Status(Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class RequestState:
    status: Status = Status.IDLE
    algorithm_text: str = ""
    diagram_source: str = ""
    error: Optional[str] = None
    fallback: bool = False
    token: int = 0

    @property
    def is_loading(self) -> bool:
        return self.status is Status.LOADING


# --- редьюсеры ---

def edit_text(state: RequestState, text: str) -> RequestState:
    # пока идёт генерация, текст не меняем
    if state.is_loading:
        return state
    return replace(state, algorithm_text=text)


def start_loading(state: RequestState, text: str) -> RequestState:
    return RequestState(status=Status.LOADING, algorithm_text=text, token=state.token + 1)


def reject(state: RequestState, text: str, reason: str) -> RequestState:
    return RequestState(status=Status.FAILED, algorithm_text=text, error=reason, token=state.token)


def resolve(state: RequestState, token: int, conversion: Conversion) -> RequestState:
    if token != state.token or not state.is_loading:
        return state
    return replace(
        state,
        status=Status.READY,
        diagram_source=conversion.mermaid_code,
        fallback=conversion.fallback,
        error=None,
    )


def render_failed(state: RequestState, message: str) -> RequestState:
    if state.status is not Status.READY:
        return state
    return RequestState(
        status=Status.FAILED,
        algorithm_text=state.algorithm_text,
        error=message or "The diagram could not be rendered.",
        token=state.token,
    )


def cleared(state: RequestState) -> RequestState:
    # новый token инвалидирует запрос, который ещё в полёте
    return RequestState(token=state.token + 1)


class FlowchartStore:
    def __init__(
        self,
        generate: Optional[Callable[[str], str]] = None,
        keywords: Optional[Iterable[str]] = None,
    ):
        self._generate = generate
        self._keywords = keywords
        self._state = RequestState()
        self._lock = threading.Lock()
        self._listeners: List[Callable[[RequestState], None]] = []

    @property
    def state(self) -> RequestState:
        return self._state

    def subscribe(self, listener: Callable[[RequestState], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _apply(self, reducer, *args) -> RequestState:
        with self._lock:
            new = reducer(self._state, *args)
            changed = new is not self._state
            self._state = new
        if changed:
            for listener in list(self._listeners):
                listener(new)
        return new

    def set_algorithm_text(self, text: str) -> RequestState:
        return self._apply(edit_text, text or "")

    def submit(self, text: Optional[str] = None) -> RequestState:
        text = self._state.algorithm_text if text is None else text
        try:
            validate_algorithm_text(text, self._keywords)
        except ValidationError as e:
            return self._apply(reject, text, str(e))

        loading = self._apply(start_loading, text)
        try:
            conversion = convert_algorithm(text, generate=self._generate)
        except Exception:
            # из loading выходим всегда
            logger.exception("conversion crashed, serving fallback diagram")
            conversion = Conversion(repair(FALLBACK_DIAGRAM), fallback=True)
        state = self._apply(resolve, loading.token, conversion)
        if state.token != loading.token:
            logger.info("dropped stale result for token %s", loading.token)
        return state

    def regenerate(self) -> RequestState:
        text = self._state.algorithm_text
        self.clear()
        return self.submit(text)

    def clear(self) -> RequestState:
        return self._apply(cleared)

    def report_render_error(self, error) -> RequestState:
        """error — RenderError или просто текст от рендерера."""
        logger.info("renderer reported an error: %s", error)
        return self._apply(render_failed, str(error))


_store: Optional[FlowchartStore] = None
_store_lock = threading.Lock()


def get_store() -> FlowchartStore:
    """Один store на процесс: одна активная сессия."""
    global _store
    with _store_lock:
        if _store is None:
            _store = FlowchartStore(keywords=getattr(settings, "FLOWCHART_ALGORITHM_KEYWORDS", None))
        return _store
