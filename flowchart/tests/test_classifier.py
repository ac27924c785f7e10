# flowchart/tests/test_classifier.py
import pytest

from flowchart.exceptions import ValidationError
from flowchart.prompt_presets import (
    EMPTY_INPUT_MESSAGE,
    EXAMPLE_DIAGRAM,
    NOT_ALGORITHM_MESSAGE,
    build_prompt,
)
from flowchart.services.classifier import classify, validate_algorithm_text


@pytest.mark.parametrize("text", [
    "Sort the array using bubble sort, comparing adjacent elements",
    "Use binary search on the sorted array",
    "Wake up. Then brush teeth.",
    "Step 1 open the door",
])
def test_classify_accepts_algorithms(text):
    assert classify(text) is True


def test_classify_rejects_small_talk():
    assert classify("hi") is False
    assert classify("hello there") is False


def test_step_cues_work_without_keywords():
    assert classify("Wake up. Then brush teeth.", keywords=[]) is True
    assert classify("Finally we are done", keywords=[]) is True
    assert classify("Wake up early", keywords=[]) is False


def test_long_descriptions_pass():
    words = ["word"] * 15
    assert classify(" ".join(words), keywords=[]) is False
    assert classify(" ".join(words + ["more"]), keywords=[]) is True


def test_custom_keywords_replace_builtin_list():
    assert classify("brew some coffee", keywords=["coffee"]) is True
    assert classify("bubble sort", keywords=["coffee"]) is False


def test_keyword_match_is_case_insensitive():
    assert classify("BUBBLE SORT please", keywords=["Bubble Sort"]) is True


def test_validate_returns_stripped_text():
    assert validate_algorithm_text("  bubble sort  ") == "bubble sort"


@pytest.mark.parametrize("text, message", [
    ("", EMPTY_INPUT_MESSAGE),
    ("   ", EMPTY_INPUT_MESSAGE),
    (None, EMPTY_INPUT_MESSAGE),
    ("hi", NOT_ALGORITHM_MESSAGE),
])
def test_validate_rejects(text, message):
    with pytest.raises(ValidationError) as exc:
        validate_algorithm_text(text)
    assert str(exc.value) == message


# промпт

def test_prompt_is_deterministic_and_embeds_text():
    text = "Read n, print n squared"
    assert build_prompt(text) == build_prompt(text)
    assert text in build_prompt(text)


def test_prompt_lists_every_shape():
    prompt = build_prompt("x")
    for spelling in ("([Start])", "[/Input Text/]", "[\\Output Text\\]", "[Process Step]", "{Question?}", "[(Database)]"):
        assert spelling in prompt
    assert "flowchart TD" in prompt
    assert EXAMPLE_DIAGRAM in prompt
