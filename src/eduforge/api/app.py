"""FastAPI app exposing generation, validation, analysis and version history."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from eduforge.analysis import analyze_outline
from eduforge.config import Settings, load_settings
from eduforge.errors import VersionNotFoundError
from eduforge.generation.ai import CompletionClient, OutlineAIService
from eduforge.llm.client import LLMClient
from eduforge.logging import configure_logging, get_logger, outline_context
from eduforge.models.outline import Outline, OutlineVersion, VersionDiff
from eduforge.models.project import EducationalStandard, GenerationParams, ProjectConfig
from eduforge.validation.validator import validate_issues
from eduforge.versioning import VersionStore, open_version_store


class GenerateRequest(BaseModel):
    config: ProjectConfig
    params: GenerationParams = Field(default_factory=GenerationParams)


class GenerateResponse(BaseModel):
    outline: dict[str, Any]
    status: str
    source: str
    message: str


class IssueOut(BaseModel):
    rule: str
    message: str
    node_id: str | None = None


class ValidateResponse(BaseModel):
    issues: list[IssueOut]


class AnalyzeRequest(BaseModel):
    outline: Outline
    standards: list[EducationalStandard] = Field(default_factory=list)


class SaveVersionRequest(BaseModel):
    outline: Outline
    message: str | None = None


def create_app(
    settings: Settings | None = None,
    *,
    store: VersionStore | None = None,
    llm: CompletionClient | None = None,
) -> FastAPI:
    """Create FastAPI app.

    Args:
        settings: Defaults to `load_settings()`.
        store: Version store; defaults to the backend selected by `settings`.
        llm: Completion client; defaults to `LLMClient` when an API key is configured.
    """

    settings = settings or load_settings()
    configure_logging(settings.log_level)
    logger = get_logger(__name__)

    versions = store if store is not None else open_version_store(settings)
    if llm is None and settings.openai_api_key:
        llm = LLMClient(settings)
    ai = OutlineAIService.from_settings(settings, llm)

    app = FastAPI(title="EduForge", version="0.1.0")

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/outlines/generate")
    def outlines_generate(req: GenerateRequest) -> GenerateResponse:
        outline, result = ai.generate_outline(req.config, req.params)
        with outline_context(outline_id=outline.id, op="generate"):
            logger.info("API generate finished", extra={"status": result.status, "source": result.source})
        return GenerateResponse(
            outline=outline.to_wire(), status=result.status, source=result.source, message=result.message
        )

    @app.post("/outlines/validate")
    def outlines_validate(outline: Outline) -> ValidateResponse:
        issues = validate_issues(outline)
        return ValidateResponse(
            issues=[IssueOut(rule=i.rule.value, message=i.message, node_id=i.node_id) for i in issues]
        )

    @app.post("/outlines/analyze")
    def outlines_analyze(req: AnalyzeRequest) -> dict[str, Any]:
        return analyze_outline(req.outline, req.standards).model_dump(mode="json")

    @app.post("/outlines/{outline_id}/versions")
    def versions_save(outline_id: str, req: SaveVersionRequest) -> dict[str, Any]:
        if req.outline.id != outline_id:
            raise HTTPException(status_code=400, detail="outline id does not match path")
        version = versions.save(req.outline, req.message)
        return version.to_wire()

    @app.get("/outlines/{outline_id}/versions")
    def versions_list(outline_id: str) -> list[dict[str, Any]]:
        return [v.to_wire() for v in versions.list(outline_id)]

    @app.get("/versions/compare")
    def versions_compare(a: str, b: str) -> VersionDiff:
        for version_id in (a, b):
            if versions.find(version_id) is None:
                raise HTTPException(status_code=404, detail=f"version not found: {version_id}")
        return versions.compare(a, b)

    @app.get("/versions/{version_id}")
    def versions_get(version_id: str) -> dict[str, Any]:
        try:
            version: OutlineVersion = versions.get(version_id)
        except VersionNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return version.to_wire()

    return app
