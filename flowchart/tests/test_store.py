# flowchart/tests/test_store.py
import pytest

from flowchart import store as store_module
from flowchart.exceptions import ProviderError, RenderError
from flowchart.prompt_presets import EMPTY_INPUT_MESSAGE, FALLBACK_DIAGRAM, NOT_ALGORITHM_MESSAGE
from flowchart.services.convert import Conversion
from flowchart.services.gemini import query_gemini
from flowchart.store import (
    FlowchartStore,
    RequestState,
    Status,
    cleared,
    edit_text,
    get_store,
    render_failed,
    resolve,
    start_loading,
)

ALGORITHM = "Sort the list with bubble sort"
DIAGRAM = "flowchart TD\nA[Start] --> B[End]"


class FakeModel:
    def __init__(self, answer=DIAGRAM, error=None, during=None):
        self.answer = answer
        self.error = error
        self.during = during  # что сделать, пока «идёт генерация»
        self.calls = 0

    def __call__(self, prompt):
        self.calls += 1
        if self.during:
            self.during()
        if self.error:
            raise self.error
        return self.answer


def _traced(store):
    trace = []
    store.subscribe(lambda state: trace.append(state.status))
    return trace


@pytest.mark.parametrize("text, message", [
    ("", EMPTY_INPUT_MESSAGE),
    ("   ", EMPTY_INPUT_MESSAGE),
    ("hi", NOT_ALGORITHM_MESSAGE),
])
def test_invalid_input_fails_without_calling_model(text, message):
    model = FakeModel()
    state = FlowchartStore(generate=model).submit(text)
    assert state.status is Status.FAILED
    assert state.error == message
    assert state.algorithm_text == text
    assert model.calls == 0


def test_submit_goes_through_loading_to_ready():
    model = FakeModel()
    store = FlowchartStore(generate=model)
    trace = _traced(store)

    state = store.submit(ALGORITHM)
    assert trace == [Status.LOADING, Status.READY]
    assert state.diagram_source == DIAGRAM
    assert state.fallback is False
    assert state.error is None
    assert store.state is state
    assert model.calls == 1


def test_submit_uses_stored_text():
    store = FlowchartStore(generate=FakeModel())
    store.set_algorithm_text(ALGORITHM)
    assert store.submit().status is Status.READY


def test_provider_error_still_ends_ready_with_fallback():
    store = FlowchartStore(generate=FakeModel(error=ProviderError("down")))
    state = store.submit(ALGORITHM)
    assert state.status is Status.READY
    assert state.diagram_source == FALLBACK_DIAGRAM
    assert state.fallback is True


def test_regenerate_clears_and_calls_model_once():
    model = FakeModel()
    store = FlowchartStore(generate=model)
    store.submit(ALGORITHM)
    trace = _traced(store)

    state = store.regenerate()
    assert model.calls == 2
    assert trace == [Status.IDLE, Status.LOADING, Status.READY]
    assert state.algorithm_text == ALGORITHM
    assert state.diagram_source == DIAGRAM


def test_clear_resets_everything():
    store = FlowchartStore(generate=FakeModel())
    store.submit(ALGORITHM)
    state = store.clear()
    assert state.status is Status.IDLE
    assert state.algorithm_text == ""
    assert state.diagram_source == ""
    assert state.error is None
    assert state.fallback is False


def test_render_error_only_from_ready():
    store = FlowchartStore(generate=FakeModel())
    trace = _traced(store)
    assert store.report_render_error(RenderError("bad")).status is Status.IDLE
    assert trace == []

    store.submit(ALGORITHM)
    state = store.report_render_error(RenderError("Parse error on line 2"))
    assert state.status is Status.FAILED
    assert state.error == "Parse error on line 2"
    assert state.algorithm_text == ALGORITHM
    assert state.diagram_source == ""


def test_render_error_default_message():
    state = render_failed(RequestState(status=Status.READY, diagram_source=DIAGRAM), "")
    assert state.error == "The diagram could not be rendered."


def test_result_of_cleared_request_is_dropped():
    holder = {}
    model = FakeModel(during=lambda: holder["store"].clear())
    store = holder["store"] = FlowchartStore(generate=model)

    state = store.submit(ALGORITHM)
    assert state.status is Status.IDLE
    assert state.diagram_source == ""


def test_text_edits_ignored_while_loading():
    holder = {}
    model = FakeModel(during=lambda: holder["store"].set_algorithm_text("something else"))
    store = holder["store"] = FlowchartStore(generate=model)

    state = store.submit(ALGORITHM)
    assert state.algorithm_text == ALGORITHM
    assert state.status is Status.READY


def test_unsubscribe():
    store = FlowchartStore(generate=FakeModel())
    trace = []
    unsubscribe = store.subscribe(lambda state: trace.append(state.status))
    unsubscribe()
    store.submit(ALGORITHM)
    assert trace == []


# редьюсеры

def test_reducers_do_not_mutate():
    idle = RequestState(algorithm_text="x")
    loading = start_loading(idle, "x")
    assert idle.status is Status.IDLE and idle.token == 0
    assert loading.status is Status.LOADING and loading.token == 1
    assert loading.is_loading


def test_resolve_ignores_stale_token():
    loading = start_loading(RequestState(), "x")
    assert resolve(loading, loading.token - 1, Conversion(DIAGRAM)) is loading
    assert resolve(cleared(loading), loading.token, Conversion(DIAGRAM)).status is Status.IDLE


def test_edit_text_while_loading_keeps_state():
    loading = start_loading(RequestState(), "x")
    assert edit_text(loading, "y") is loading
    assert edit_text(RequestState(), "y").algorithm_text == "y"


def test_get_store_is_a_singleton(monkeypatch, settings):
    settings.FLOWCHART_ALGORITHM_KEYWORDS = ["coffee"]
    monkeypatch.setattr(store_module, "_store", None)

    first = get_store()
    assert get_store() is first
    assert first._keywords == ["coffee"]


def test_unexpected_error_still_settles_with_fallback():
    store = FlowchartStore(generate=FakeModel(error=KeyError(0)))
    trace = _traced(store)

    state = store.submit(ALGORITHM)
    assert trace == [Status.LOADING, Status.READY]
    assert state.is_loading is False
    assert state.diagram_source == FALLBACK_DIAGRAM
    assert state.fallback is True


class _MalformedResponse:
    status_code = 200
    text = ""

    def __init__(self, data):
        self._data = data

    def json(self):
        return self._data


@pytest.mark.parametrize("data", [
    {"candidates": [None]},
    {"candidates": {"0": {}}},
    {"candidates": [{"content": {"parts": [{"text": 1}]}}]},
])
def test_malformed_gemini_payload_ends_ready(monkeypatch, settings, data):
    settings.GEMINI_API_KEY = "test-key"
    monkeypatch.setattr(
        "flowchart.services.gemini.requests.post",
        lambda url, **kwargs: _MalformedResponse(data),
    )
    state = FlowchartStore(generate=query_gemini).submit("binary search over a sorted array")
    assert state.status is Status.READY
    assert state.diagram_source == FALLBACK_DIAGRAM
    assert state.fallback is True
