"""CLI entrypoints for EduForge."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from pydantic import TypeAdapter, ValidationError

from eduforge.analysis import analyze_outline, apply_balance
from eduforge.analysis.wordcount import BalanceStrategy
from eduforge.config import Settings, load_settings
from eduforge.generation.ai import OutlineAIService
from eduforge.llm.client import LLMClient
from eduforge.logging import configure_logging, get_logger, outline_context
from eduforge.models.outline import Outline
from eduforge.models.project import EducationalStandard, GenerationParams, ProjectConfig
from eduforge.validation.validator import validate_issues
from eduforge.versioning import VersionStore, open_version_store

app = typer.Typer(add_completion=False, help="EduForge outline authoring CLI")
versions_app = typer.Typer(add_completion=False, help="Outline version history")
app.add_typer(versions_app, name="versions")

logger = get_logger(__name__)

_STRATEGIES: tuple[str, ...] = ("balance", "relative-depth", "type-based")


def _settings(versions_dir: Path | None = None) -> Settings:
    settings = load_settings()
    if versions_dir is not None:
        settings.versions_dir = versions_dir
    configure_logging(settings.log_level)
    return settings


def _read_outline(path: Path) -> Outline:
    try:
        return Outline.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        raise typer.BadParameter(f"{path} is not a readable outline document: {exc}") from exc


def _read_standards(path: Path | None) -> list[EducationalStandard]:
    if path is None:
        return []
    try:
        return TypeAdapter(list[EducationalStandard]).validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        raise typer.BadParameter(f"{path} is not a readable standards list: {exc}") from exc


def _emit(payload: Any, output: Path | None) -> None:
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if output is None:
        typer.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    typer.echo(str(output))


def _store(versions_dir: Path | None) -> VersionStore:
    return open_version_store(_settings(versions_dir))


@app.command()
def generate(
    config_file: Path = typer.Argument(..., help="Project configuration JSON file"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the outline JSON here"),
    detail_level: str | None = typer.Option(None, "--detail", help="high-level | medium | detailed"),
    structure_type: str | None = typer.Option(
        None, "--structure", help="sequential | hierarchical | modular | spiral"
    ),
    include_assessments: bool = typer.Option(True, "--assessments/--no-assessments"),
    include_activities: bool = typer.Option(True, "--activities/--no-activities"),
    use_ai: bool = typer.Option(True, "--ai/--no-ai", help="Ask the AI service first when configured"),
) -> None:
    """Generate an outline for a project configuration."""

    settings = _settings()
    try:
        config = ProjectConfig.model_validate_json(config_file.read_text(encoding="utf-8"))
        params = GenerationParams(
            detail_level=detail_level or settings.default_detail_level,
            structure_type=structure_type or config.content_structure or settings.default_structure_type,
            include_assessments=include_assessments,
            include_activities=include_activities,
        )
    except (OSError, ValidationError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    llm = LLMClient(settings) if use_ai and settings.openai_api_key else None
    service = OutlineAIService.from_settings(settings, llm)
    outline, result = service.generate_outline(config, params)
    with outline_context(outline_id=outline.id, op="generate"):
        logger.info("CLI generate finished", extra={"status": result.status, "source": result.source})
    if result.used_fallback:
        typer.echo(result.message, err=True)
    _emit(outline.to_wire(), output)


@app.command()
def validate(
    outline_file: Path = typer.Argument(..., help="Outline JSON file"),
    strict: bool = typer.Option(False, "--strict", help="Exit with status 1 when issues are found"),
) -> None:
    """Print validation issues for an outline."""

    _settings()
    outline = _read_outline(outline_file)
    issues = validate_issues(outline)
    if not issues:
        typer.echo("No issues found.")
        return
    for issue in issues:
        typer.echo(f"[{issue.rule.value}] {issue.message}")
    if strict:
        raise typer.Exit(code=1)


@app.command()
def analyze(
    outline_file: Path = typer.Argument(..., help="Outline JSON file"),
    standards_file: Path | None = typer.Option(None, "--standards", help="Standards catalog JSON array"),
    output: Path | None = typer.Option(None, "--output", "-o"),
) -> None:
    """Run every outline analysis and print the combined report as JSON."""

    _settings()
    outline = _read_outline(outline_file)
    report = analyze_outline(outline, _read_standards(standards_file))
    _emit(report.model_dump(mode="json"), output)


@app.command()
def balance(
    outline_file: Path = typer.Argument(..., help="Outline JSON file"),
    strategy: str = typer.Option("balance", "--strategy", help="balance | relative-depth | type-based"),
    output: Path | None = typer.Option(None, "--output", "-o"),
) -> None:
    """Rebalance word counts (and durations) with one of the balance strategies."""

    if strategy not in _STRATEGIES:
        raise typer.BadParameter(f"unknown strategy {strategy!r}; choose one of {', '.join(_STRATEGIES)}")
    _settings()
    outline = _read_outline(outline_file)
    chosen: BalanceStrategy = strategy  # type: ignore[assignment]
    _emit(apply_balance(outline, chosen).to_wire(), output)


@versions_app.command("save")
def versions_save(
    outline_file: Path = typer.Argument(..., help="Outline JSON file"),
    message: str | None = typer.Option(None, "--message", "-m"),
    versions_dir: Path | None = typer.Option(None, "--versions-dir", help="Overrides EDUFORGE_VERSIONS_DIR"),
) -> None:
    """Save the outline as a new version and rewrite the file with its new version number."""

    store = _store(versions_dir)
    outline = _read_outline(outline_file)
    version = store.save(outline, message)
    outline_file.write_text(json.dumps(outline.to_wire(), ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    typer.echo(f"{version.id} v{version.version} {version.message}")


@versions_app.command("list")
def versions_list(
    outline_id: str = typer.Argument(..., help="Outline id"),
    versions_dir: Path | None = typer.Option(None, "--versions-dir"),
) -> None:
    """List saved versions of an outline, newest first."""

    store = _store(versions_dir)
    versions = store.list(outline_id)
    if not versions:
        typer.echo(f"No versions saved for {outline_id}.")
        return
    for version in versions:
        typer.echo(f"{version.id} v{version.version} {version.created_at.isoformat()} {version.message}")


@versions_app.command("restore")
def versions_restore(
    outline_file: Path = typer.Argument(..., help="Current outline JSON file"),
    version_id: str = typer.Argument(..., help="Version to restore"),
    output: Path | None = typer.Option(None, "--output", "-o"),
    versions_dir: Path | None = typer.Option(None, "--versions-dir"),
) -> None:
    """Print (or write) an editable copy of a saved version."""

    store = _store(versions_dir)
    outline = _read_outline(outline_file)
    restored = store.restore(outline, version_id)
    if restored is None:
        raise typer.BadParameter(f"version not found: {version_id}")
    _emit(restored.to_wire(), output)


@versions_app.command("branch")
def versions_branch(
    outline_file: Path = typer.Argument(..., help="Outline JSON file"),
    name: str = typer.Argument(..., help="Branch name"),
    output: Path | None = typer.Option(None, "--output", "-o"),
    versions_dir: Path | None = typer.Option(None, "--versions-dir"),
) -> None:
    """Copy an outline into a new, independent history."""

    store = _store(versions_dir)
    _emit(store.branch(_read_outline(outline_file), name).to_wire(), output)


@versions_app.command("compare")
def versions_compare(
    version_a: str = typer.Argument(...),
    version_b: str = typer.Argument(...),
    versions_dir: Path | None = typer.Option(None, "--versions-dir"),
) -> None:
    """Count nodes added, removed and modified between two versions."""

    store = _store(versions_dir)
    diff = store.compare(version_a, version_b)
    typer.echo(f"added={diff.added} removed={diff.removed} modified={diff.modified}")


if __name__ == "__main__":
    app()
