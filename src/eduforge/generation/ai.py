"""AI-assisted outline generation with deterministic fallback.

The hosted model is an opaque collaborator: it may be rate limited, fail, or answer with text
that does not contain a node array. `OutlineAIService.generate` always returns a usable tree and
reports which of those situations occurred through `GenerationResult.status`.
"""

from __future__ import annotations

import hashlib
import math
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol, Sequence

from pydantic import ValidationError

from eduforge.config import Settings
from eduforge.errors import AIRateLimitedError, AIResponseError, AIServiceError
from eduforge.generation.generator import (
    BASE_DURATION,
    BASE_WORD_COUNT,
    build_outline,
    generate_nodes,
)
from eduforge.llm.client import ChatMessage
from eduforge.logging import get_logger
from eduforge.models.outline import DIFFICULTY_LEVELS, NODE_TYPES, TAXONOMY_LEVELS, Outline, OutlineNode
from eduforge.models.project import GenerationParams, ProjectConfig
from eduforge.utils.tags import extract_json_payload

logger = get_logger(__name__)

Clock = Callable[[], float]

GenerationStatus = Literal["ok", "rate_limited", "service_error", "malformed_response", "unavailable"]
GenerationSource = Literal["ai", "cache", "fallback"]

SYSTEM_PROMPT = (
    "You are an AI teaching assistant that helps educators create high-quality educational content. "
    "Respond using valid JSON format only, with no explanations or other text outside the JSON."
)

_STATUS_MESSAGES: dict[str, str] = {
    "ok": "Outline generated.",
    "rate_limited": "The AI service is busy. A standard outline was generated instead; try again shortly.",
    "service_error": "The AI service could not be reached. A standard outline was generated instead.",
    "malformed_response": "The AI response could not be read. A standard outline was generated instead.",
    "unavailable": "AI generation is not configured. A standard outline was generated.",
}


class CompletionClient(Protocol):
    """Anything that can complete a chat (normally `LLMClient`)."""

    def complete(self, messages: Sequence[ChatMessage], *, temperature: float = ...) -> str:
        """Return the assistant message content."""


@dataclass
class GenerationResult:
    nodes: list[OutlineNode]
    status: GenerationStatus
    source: GenerationSource
    message: str = ""

    @property
    def used_fallback(self) -> bool:
        return self.source == "fallback"


def build_outline_prompt(config: ProjectConfig, params: GenerationParams) -> str:
    """Construct the natural-language generation prompt for `config`."""

    lines = [
        f"Create a detailed educational outline for a {config.type} on {config.subject} "
        f"for {config.grade_level} students.",
        f"Structure the content in a {params.structure_type} format.",
    ]

    if config.learning_objectives:
        lines.append("")
        lines.append("Learning objectives include:")
        lines.extend(f"- {objective}" for objective in config.learning_objectives)

    if config.standards:
        lines.append("")
        lines.append("Aligns with these educational standards:")
        lines.extend(f"- {standard.id}" for standard in config.standards)

    lines.append("")
    lines.append(f"Provide a {params.detail_level} level of detail in the outline.")
    if params.include_assessments:
        lines.append("Include assessment points throughout the outline.")
    if params.include_activities:
        lines.append("Include activities appropriate for this content.")

    if params.focus_areas:
        lines.append("")
        lines.append("Focus particularly on these areas:")
        lines.extend(f"- {area}" for area in params.focus_areas)

    if params.reference_urls:
        lines.append("")
        lines.append("Incorporate concepts from these reference materials:")
        lines.extend(f"- {url}" for url in params.reference_urls)

    lines.append("")
    lines.append(
        "Return the outline as a JSON array of nodes. Each node has title, description, type "
        "(section|subsection|topic|activity|assessment|resource), estimatedWordCount, "
        "estimatedDuration (minutes), taxonomyLevel, difficultyLevel, standardIds and children."
    )
    return "\n".join(lines)


def _as_int(value: Any) -> int | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        raise AIResponseError(f"numeric field is not finite: {value!r}")
    return int(round(number))


def _normalize_node(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise AIResponseError(f"node is not an object: {type(raw).__name__}")

    data = dict(raw)
    title = data.get("title") or data.get("name") or ""
    data["title"] = str(title)

    node_type = data.get("type")
    if node_type not in NODE_TYPES:
        node_type = "topic"
    data["type"] = node_type

    for wire, snake, table in (
        ("estimatedWordCount", "estimated_word_count", BASE_WORD_COUNT),
        ("estimatedDuration", "estimated_duration", BASE_DURATION),
    ):
        value = _as_int(data.pop(wire, data.pop(snake, None)))
        data[wire] = table[node_type] if value is None else value

    for wire, scale in (("taxonomyLevel", TAXONOMY_LEVELS), ("difficultyLevel", DIFFICULTY_LEVELS)):
        if data.get(wire) not in scale:
            data.pop(wire, None)

    standard_ids = data.get("standardIds", data.get("standard_ids")) or []
    data["standardIds"] = [str(s) for s in standard_ids] if isinstance(standard_ids, list) else []
    data.pop("standard_ids", None)

    if not data.get("id"):
        data.pop("id", None)

    children = data.get("children") or []
    data["children"] = [_normalize_node(child) for child in children] if isinstance(children, list) else []
    return data


def parse_outline_response(raw: Any) -> list[OutlineNode]:
    """Parse a collaborator answer into root nodes.

    Accepts an already decoded array or `{"rootNodes": [...]}` object, or text containing one.

    Raises:
        AIResponseError: No non-empty node array could be extracted, or its nodes are unusable.
    """

    data = extract_json_payload(raw) if isinstance(raw, str) else raw

    if isinstance(data, dict):
        data = data.get("rootNodes", data.get("root_nodes"))
    if not isinstance(data, list) or not data:
        raise AIResponseError("response does not contain a node array")

    try:
        return [OutlineNode.model_validate(_normalize_node(item)) for item in data]
    except ValidationError as exc:
        raise AIResponseError(f"response nodes failed validation: {exc.error_count()} errors") from exc
    except RecursionError as exc:
        raise AIResponseError("response nodes are nested too deeply") from exc


class ResponseCache:
    """LRU cache with per-entry TTL, keyed by prompt."""

    def __init__(self, *, ttl_s: float, max_entries: int, clock: Clock = time.monotonic) -> None:
        self.ttl_s = ttl_s
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[list[OutlineNode], float]] = OrderedDict()

    @staticmethod
    def key_for(prompt: str) -> str:
        return hashlib.sha256(prompt.encode("utf-8")).hexdigest()

    def get(self, key: str) -> list[OutlineNode] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        nodes, expires_at = entry
        if self._clock() > expires_at:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return [node.model_copy(deep=True) for node in nodes]

    def put(self, key: str, nodes: list[OutlineNode]) -> None:
        if key in self._entries:
            self._entries.move_to_end(key)
        elif len(self._entries) >= self.max_entries:
            self._entries.popitem(last=False)
        self._entries[key] = ([node.model_copy(deep=True) for node in nodes], self._clock() + self.ttl_s)

    def __len__(self) -> int:
        return len(self._entries)


class RequestThrottle:
    """Minimum-interval limiter for outbound AI requests.

    It never sleeps: a call inside the window is refused with `AIRateLimitedError` so the caller
    can fall back immediately.
    """

    def __init__(self, *, min_interval_s: float, clock: Clock = time.monotonic) -> None:
        self.min_interval_s = min_interval_s
        self._clock = clock
        self._last_request_at: float | None = None

    def acquire(self) -> None:
        now = self._clock()
        if self._last_request_at is not None:
            elapsed = now - self._last_request_at
            if elapsed < self.min_interval_s:
                raise AIRateLimitedError(
                    "local request throttle",
                    retry_after_s=self.min_interval_s - elapsed,
                )
        self._last_request_at = now


@dataclass
class OutlineAIService:
    """Generation entry point combining the AI collaborator with the deterministic generator."""

    llm: CompletionClient | None
    cache: ResponseCache
    throttle: RequestThrottle
    temperature: float = 0.7
    fallback: Callable[[ProjectConfig, GenerationParams], list[OutlineNode]] = field(default=generate_nodes)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        llm: CompletionClient | None = None,
        *,
        clock: Clock = time.monotonic,
    ) -> "OutlineAIService":
        return cls(
            llm=llm,
            cache=ResponseCache(
                ttl_s=settings.ai_cache_ttl_s,
                max_entries=settings.ai_cache_max_entries,
                clock=clock,
            ),
            throttle=RequestThrottle(min_interval_s=settings.ai_min_request_interval_s, clock=clock),
            temperature=settings.ai_temperature,
        )

    def generate(self, config: ProjectConfig, params: GenerationParams) -> GenerationResult:
        """Generate root nodes, falling back to the deterministic generator on any failure."""

        prompt = build_outline_prompt(config, params)
        key = self.cache.key_for(prompt)

        cached = self.cache.get(key)
        if cached is not None:
            logger.info("Outline served from cache")
            return GenerationResult(nodes=cached, status="ok", source="cache", message=_STATUS_MESSAGES["ok"])

        if self.llm is None:
            return self._fallback(config, params, "unavailable")

        messages = [
            ChatMessage(role="system", content=SYSTEM_PROMPT),
            ChatMessage(role="user", content=prompt),
        ]
        try:
            self.throttle.acquire()
            raw = self.llm.complete(messages, temperature=self.temperature)
            nodes = parse_outline_response(raw)
        except AIRateLimitedError as exc:
            logger.warning("AI generation rate limited; using fallback", extra={"retry_after_s": exc.retry_after_s})
            return self._fallback(config, params, "rate_limited")
        except AIResponseError as exc:
            logger.warning("AI response malformed; using fallback", extra={"reason": str(exc)})
            return self._fallback(config, params, "malformed_response")
        except AIServiceError as exc:
            logger.warning("AI service error; using fallback", extra={"reason": str(exc)})
            return self._fallback(config, params, "service_error")

        self.cache.put(key, nodes)
        logger.info("Outline generated by AI", extra={"roots": len(nodes)})
        return GenerationResult(nodes=nodes, status="ok", source="ai", message=_STATUS_MESSAGES["ok"])

    def generate_outline(self, config: ProjectConfig, params: GenerationParams) -> tuple[Outline, GenerationResult]:
        result = self.generate(config, params)
        return build_outline(config, params, result.nodes), result

    def summarize(self, outline: Outline) -> str | None:
        """Ask the collaborator for a short summary; None when unavailable or failing."""

        if self.llm is None:
            return None

        prompt = "\n".join(
            [
                "Provide a concise summary of this educational outline:",
                "",
                f"Title: {outline.title}",
                f"Description: {outline.description or ''}",
                f"Structure: {outline.structure_type}",
                f"Sections: {', '.join(node.title for node in outline.root_nodes)}",
                "",
                "Include key learning objectives, estimated duration, and the main flow of topics.",
            ]
        )
        try:
            self.throttle.acquire()
            text = self.llm.complete([ChatMessage(role="user", content=prompt)], temperature=self.temperature)
        except AIServiceError as exc:
            logger.warning("Outline summary failed", extra={"reason": str(exc)})
            return None
        return text.strip() or None

    def _fallback(self, config: ProjectConfig, params: GenerationParams, status: GenerationStatus) -> GenerationResult:
        return GenerationResult(
            nodes=self.fallback(config, params),
            status=status,
            source="fallback",
            message=_STATUS_MESSAGES[status],
        )
