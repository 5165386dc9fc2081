"""Tests for AI-assisted generation and its fallbacks (no network)."""

from __future__ import annotations

import json
from typing import Sequence

import pytest

from eduforge.config import Settings
from eduforge.errors import AIRateLimitedError, AIResponseError, AIServiceError
from eduforge.generation.ai import (
    OutlineAIService,
    RequestThrottle,
    ResponseCache,
    build_outline_prompt,
    parse_outline_response,
)
from eduforge.llm.client import ChatMessage
from eduforge.models.outline import Outline, OutlineNode
from eduforge.models.project import EducationalStandard, GenerationParams, ProjectConfig
from eduforge.utils.tags import extract_json_payload

AI_NODES = [
    {
        "title": "Cells",
        "type": "section",
        "estimatedWordCount": 400,
        "taxonomyLevel": "understand",
        "children": [{"title": "Organelles", "type": "topic"}],
    }
]


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class FakeLLM:
    """Returns canned answers or raises canned errors, recording every call."""

    def __init__(self, *answers: str | Exception) -> None:
        self._answers = list(answers)
        self.calls: list[Sequence[ChatMessage]] = []

    def complete(self, messages: Sequence[ChatMessage], *, temperature: float = 0.7) -> str:
        self.calls.append(messages)
        answer = self._answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


def _service(llm: FakeLLM | None, clock: FakeClock) -> OutlineAIService:
    settings = Settings(openai_api_key=None, ai_min_request_interval_s=2.0, ai_cache_ttl_s=60.0)
    return OutlineAIService.from_settings(settings, llm, clock=clock)


def _config() -> ProjectConfig:
    return ProjectConfig(
        name="Biology",
        type="lesson_plan",
        subject="science",
        grade_level="9th",
        learning_objectives=["Describe cell structure"],
        standards=[EducationalStandard(id="BIO.1")],
    )


def test_ai_answer_is_used_then_cached() -> None:
    """A good answer is parsed, and the same prompt is then served from cache."""

    clock = FakeClock()
    llm = FakeLLM(json.dumps(AI_NODES))
    service = _service(llm, clock)

    first = service.generate(_config(), GenerationParams())
    clock.now = 1.0
    second = service.generate(_config(), GenerationParams())

    assert (first.status, first.source) == ("ok", "ai")
    assert first.nodes[0].title == "Cells"
    assert (second.status, second.source) == ("ok", "cache")
    assert len(llm.calls) == 1
    assert llm.calls[0][0].role == "system"


def test_cache_entries_expire() -> None:
    """After the TTL the collaborator is asked again."""

    clock = FakeClock()
    llm = FakeLLM(json.dumps(AI_NODES), json.dumps(AI_NODES))
    service = _service(llm, clock)

    service.generate(_config(), GenerationParams())
    clock.now = 61.0
    result = service.generate(_config(), GenerationParams())

    assert result.source == "ai"
    assert len(llm.calls) == 2


def test_throttle_refuses_back_to_back_requests() -> None:
    """A second request inside the interval falls back with status rate_limited."""

    clock = FakeClock()
    llm = FakeLLM(json.dumps(AI_NODES))
    service = _service(llm, clock)

    service.generate(_config(), GenerationParams())
    clock.now = 1.0
    result = service.generate(_config(), GenerationParams(detail_level="detailed"))

    assert result.status == "rate_limited"
    assert result.used_fallback
    assert result.nodes
    assert len(llm.calls) == 1


@pytest.mark.parametrize(
    ("answer", "status"),
    [
        (AIRateLimitedError("429"), "rate_limited"),
        (AIServiceError("boom"), "service_error"),
        ("I cannot help with that.", "malformed_response"),
        ("[]", "malformed_response"),
    ],
)
def test_failures_fall_back_to_deterministic_nodes(answer: str | Exception, status: str) -> None:
    """Every failure still returns the rule-based outline."""

    result = _service(FakeLLM(answer), FakeClock()).generate(_config(), GenerationParams())

    assert result.status == status
    assert result.source == "fallback"
    assert result.nodes[0].title == "Describe cell structure"


def test_missing_client_is_unavailable() -> None:
    """Without a collaborator the service reports unavailable."""

    service = _service(None, FakeClock())
    result = service.generate(_config(), GenerationParams())

    assert result.status == "unavailable"
    assert service.summarize(Outline(title="x")) is None


def test_generate_outline_wraps_nodes() -> None:
    """generate_outline returns a full outline alongside the result."""

    outline, result = _service(None, FakeClock()).generate_outline(_config(), GenerationParams())

    assert outline.title == "Biology Outline"
    assert outline.root_nodes == result.nodes


def test_parse_accepts_wrapped_and_fenced_answers() -> None:
    """Both a rootNodes object and a fenced array are accepted."""

    fenced = "Here you go:\n```json\n" + json.dumps(AI_NODES) + "\n```"

    assert parse_outline_response(fenced)[0].children[0].title == "Organelles"
    assert parse_outline_response({"rootNodes": AI_NODES})[0].title == "Cells"


def test_parse_fills_defaults_and_drops_bad_levels() -> None:
    """Unknown types become topics; counts default from the type; bad levels are dropped."""

    raw = [{"name": "Lab", "type": "experiment", "estimatedDuration": "12.6", "taxonomyLevel": "memorize"}]

    node = parse_outline_response(raw)[0]

    assert isinstance(node, OutlineNode)
    assert node.title == "Lab"
    assert node.type == "topic"
    assert node.estimated_duration == 13
    assert node.estimated_word_count > 0
    assert node.taxonomy_level is None


def test_parse_rejects_non_objects() -> None:
    """A list of strings is not an outline."""

    with pytest.raises(AIResponseError):
        parse_outline_response(["one", "two"])


def test_summarize_uses_the_collaborator() -> None:
    """The summary is the stripped collaborator answer."""

    service = _service(FakeLLM("  A short summary.  "), FakeClock())

    assert service.summarize(Outline(title="Cells", root_nodes=[OutlineNode(title="Intro")])) == "A short summary."


def test_prompt_mentions_objectives_standards_and_options() -> None:
    """The prompt carries the project context and the generation switches."""

    prompt = build_outline_prompt(
        _config(), GenerationParams(structure_type="modular", include_activities=False, focus_areas=["Mitosis"])
    )

    assert "lesson_plan on science for 9th students" in prompt
    assert "modular format" in prompt
    assert "- Describe cell structure" in prompt
    assert "- BIO.1" in prompt
    assert "- Mitosis" in prompt
    assert "Include assessment points" in prompt
    assert "Include activities" not in prompt


def test_cache_evicts_least_recently_used() -> None:
    """The oldest untouched entry is evicted first."""

    cache = ResponseCache(ttl_s=60, max_entries=2, clock=FakeClock())
    node = [OutlineNode(title="x")]
    cache.put("a", node)
    cache.put("b", node)
    cache.get("a")
    cache.put("c", node)

    assert cache.get("b") is None
    assert cache.get("a") is not None
    assert len(cache) == 2


def test_throttle_reports_retry_after() -> None:
    """The refusal says how long to wait."""

    clock = FakeClock()
    throttle = RequestThrottle(min_interval_s=2.0, clock=clock)
    throttle.acquire()
    clock.now = 0.5

    with pytest.raises(AIRateLimitedError) as excinfo:
        throttle.acquire()
    assert excinfo.value.retry_after_s == pytest.approx(1.5)

    clock.now = 2.5
    throttle.acquire()


def test_extract_json_payload_strategies() -> None:
    """Fenced, bare and embedded payloads are recovered; garbage gives None."""

    assert extract_json_payload('```\n{"a": 1}\n```') == {"a": 1}
    assert extract_json_payload("[1, 2]") == [1, 2]
    assert extract_json_payload('Sure! [{"title": "x"}] Hope that helps.') == [{"title": "x"}]
    assert extract_json_payload("no json here") is None
    assert extract_json_payload("") is None


@pytest.mark.parametrize(
    "answer",
    [
        '[{"title": "A", "type": "section", "estimatedWordCount": 1e400}]',
        "[" * 100000 + "]" * 100000,
    ],
)
def test_pathological_answers_fall_back(answer: str) -> None:
    """Overflowing numbers and absurd nesting are handled as malformed answers."""

    result = _service(FakeLLM(answer), FakeClock()).generate(_config(), GenerationParams())

    assert result.status == "malformed_response"
    assert result.source == "fallback"
    assert result.nodes


def test_non_finite_counts_are_rejected() -> None:
    """An infinite word count makes the answer unusable; a missing one takes the type default."""

    with pytest.raises(AIResponseError):
        parse_outline_response([{"title": "A", "type": "section", "estimatedWordCount": float("inf")}])

    node = parse_outline_response([{"title": "A", "type": "section"}])[0]
    assert node.estimated_word_count == 800


def test_deeply_nested_decoded_nodes_are_rejected() -> None:
    """A decoded answer nested beyond the recursion limit raises AIResponseError."""

    node: dict = {"title": "leaf"}
    for _ in range(5000):
        node = {"title": "wrap", "children": [node]}

    with pytest.raises(AIResponseError):
        parse_outline_response([node])
