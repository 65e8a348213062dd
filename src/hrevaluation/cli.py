"""Typer CLI entrypoint for the evaluation pipeline."""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Sequence, TypeVar
from uuid import UUID

import typer
import yaml
from dependency_injector import providers
from pydantic import BaseModel, ValidationError

from .container import EvaluationContainer, create_container
from .db import create_schema
from .errors import EvaluationError, NotFound
from .logging import configure_logging
from .schemas import NewCandidate, NewVacancy
from .schemas.config import load_config

T = TypeVar("T")

app = typer.Typer(help="Candidate resume screening and interview scoring CLI.")


@app.callback()
def main_options(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
    llm_api_key: Optional[str] = typer.Option(None, envvar="HR_LLM_API_KEY", help="LLM API key."),
    llm_folder_id: Optional[str] = typer.Option(None, envvar="HR_LLM_FOLDER_ID", help="LLM folder id."),
    database_url: Optional[str] = typer.Option(None, envvar="HR_DATABASE_URL", help="SQLAlchemy database URL."),
    timeout: Optional[float] = typer.Option(None, min=0.1, help="Overall deadline in seconds."),
) -> None:
    """Load configuration shared by every command."""
    raw: Any = None
    if config:
        with config.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle)
    try:
        app_config = load_config(raw)
    except ValidationError as exc:
        raise typer.BadParameter(f"Invalid config: {exc}", param_name="config") from exc

    if llm_api_key:
        app_config.llm.api_key = llm_api_key
    if llm_folder_id:
        app_config.llm.folder_id = llm_folder_id
    if database_url:
        app_config.database.url = database_url

    configure_logging(log_level)
    ctx.obj = {
        "settings": app_config.to_settings(),
        "audit_log": audit_log,
        "timeout": timeout,
    }


def _container(ctx: typer.Context) -> EvaluationContainer:
    return create_container(settings=ctx.obj["settings"], audit_log=ctx.obj["audit_log"])


def _run(
    ctx: typer.Context,
    action: Callable[[], Awaitable[T]],
    *,
    clients: Sequence[providers.Provider] = (),
) -> T:
    """Run ``action`` under the deadline, then close the ``clients`` it used."""
    timeout = ctx.obj["timeout"]

    async def runner() -> T:
        try:
            if timeout:
                return await asyncio.wait_for(action(), timeout=timeout)
            return await action()
        finally:
            await _close_clients(clients)

    try:
        return asyncio.run(runner())
    except NotFound as exc:
        typer.echo(f"not found: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    except EvaluationError as exc:
        typer.echo(f"evaluation failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    except TimeoutError as exc:
        typer.echo("evaluation failed: deadline exceeded", err=True)
        raise typer.Exit(code=1) from exc


async def _close_clients(clients: Sequence[providers.Provider]) -> None:
    for provider in clients:
        aclose = getattr(provider(), "aclose", None)
        if aclose is not None:
            await aclose()


def _sync(action: Callable[[], T]) -> T:
    try:
        return action()
    except NotFound as exc:
        typer.echo(f"not found: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    except EvaluationError as exc:
        typer.echo(f"evaluation failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Invalid JSON in {path}: {exc}") from exc


@app.command("init-db")
def init_db(ctx: typer.Context) -> None:
    """Create database tables."""
    container = _container(ctx)
    create_schema(container.engine())
    typer.echo("Database schema is up to date.")


@app.command("add-vacancy")
def add_vacancy(
    ctx: typer.Context,
    vacancy: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Vacancy JSON path."),
) -> None:
    """Create a vacancy together with its interview questions."""
    try:
        payload = NewVacancy.model_validate(_load_json(vacancy))
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_name="vacancy") from exc
    container = _container(ctx)
    vacancy_id = _sync(lambda: container.store().create_vacancy(payload))
    typer.echo(str(vacancy_id))


@app.command("add-candidate")
def add_candidate(
    ctx: typer.Context,
    candidate: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Candidate JSON path."),
) -> None:
    """Register a candidate."""
    try:
        payload = NewCandidate.model_validate(_load_json(candidate))
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_name="candidate") from exc
    container = _container(ctx)
    candidate_id = _sync(lambda: container.store().create_candidate(payload))
    typer.echo(str(candidate_id))


@app.command("upload-resume")
def upload_resume(
    ctx: typer.Context,
    candidate_id: int = typer.Option(...),
    vacancy_id: UUID = typer.Option(...),
    file: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Resume PDF path."),
) -> None:
    """Upload a resume document for a candidate and vacancy."""
    container = _container(ctx)
    data = file.read_bytes()
    _sync(lambda: container.documents().put_document(candidate_id, vacancy_id, data))
    typer.echo(f"Uploaded {len(data)} bytes.")

@app.command("score-resume")
def score_resume(
    ctx: typer.Context,
    candidate_id: int = typer.Option(...),
    vacancy_id: UUID = typer.Option(...),
) -> None:
    """Screen the uploaded resume and record the outcome."""
    container = _container(ctx)
    outcome = _run(
        ctx,
        lambda: container.resume_screening().score_resume(candidate_id, vacancy_id),
        clients=(container.scorer, container.extractor),
    )
    typer.echo(json.dumps(asdict(outcome), ensure_ascii=False, default=str))


@app.command("score-answer")
def score_answer(
    ctx: typer.Context,
    candidate_id: int = typer.Option(...),
    question_id: int = typer.Option(...),
    content: str = typer.Option(..., help="Answer text."),
    time_taken: int = typer.Option(0, min=0, help="Seconds spent on the answer."),
) -> None:
    """Score one interview answer and store it."""
    container = _container(ctx)
    answer_id = _run(
        ctx,
        lambda: container.interview_scoring().score_answer(candidate_id, question_id, content, time_taken),
        clients=(container.scorer,),
    )
    typer.echo(str(answer_id))


@app.command("score-interview")
def score_interview(
    ctx: typer.Context,
    candidate_id: int = typer.Option(...),
    vacancy_id: UUID = typer.Option(...),
) -> None:
    """Aggregate the candidate's answers into an interview outcome."""
    container = _container(ctx)
    outcome = _run(
        ctx,
        lambda: container.interview_scoring().score_interview(candidate_id, vacancy_id),
        clients=(container.scorer,),
    )
    typer.echo(json.dumps(asdict(outcome), ensure_ascii=False, default=str))


@app.command("info")
def info(
    ctx: typer.Context,
    candidate_id: int = typer.Option(...),
    vacancy_id: UUID = typer.Option(...),
) -> None:
    """Show the candidate's evaluation state for a vacancy."""
    container = _container(ctx)
    report = _run(
        ctx,
        lambda: container.reports().get_candidate_vacancy_info(candidate_id, vacancy_id),
    )
    typer.echo(report.model_dump_json(indent=2))


@app.command("list-infos")
def list_infos(
    ctx: typer.Context,
    include_archived: bool = typer.Option(True, "--include-archived/--active-only"),
) -> None:
    """Show the evaluation state of every candidate and vacancy pair."""
    container = _container(ctx)
    infos = _sync(lambda: container.store().list_candidate_vacancy_infos(include_archived=include_archived))
    _echo_models(infos)


@app.command("answers")
def answers(
    ctx: typer.Context,
    candidate_id: int = typer.Option(...),
    vacancy_id: UUID = typer.Option(...),
) -> None:
    """Show the candidate's scored answers next to their questions."""
    container = _container(ctx)
    pairs = _sync(lambda: container.store().list_question_answers(candidate_id, vacancy_id))
    _echo_models(pairs)


@app.command("vacancies")
def vacancies(ctx: typer.Context) -> None:
    """List vacancies with their interview questions."""
    container = _container(ctx)
    _echo_models(_sync(lambda: container.store().list_vacancies()))


@app.command("candidate")
def candidate(
    ctx: typer.Context,
    telegram_id: int = typer.Option(..., help="Telegram user id."),
) -> None:
    """Look up a candidate by Telegram id."""
    container = _container(ctx)
    found = _sync(lambda: container.store().get_candidate_by_telegram_id(telegram_id))
    typer.echo(found.model_dump_json(indent=2))


@app.command("archive")
def archive(
    ctx: typer.Context,
    candidate_id: int = typer.Option(...),
    vacancy_id: UUID = typer.Option(...),
    restore: bool = typer.Option(False, "--restore", help="Unarchive instead."),
) -> None:
    """Archive (or restore) a candidate's application to a vacancy."""
    container = _container(ctx)
    _sync(lambda: container.store().archive(candidate_id, vacancy_id, archived=not restore))
    typer.echo("Restored." if restore else "Archived.")


@app.command("delete-candidate")
def delete_candidate(ctx: typer.Context, candidate_id: int = typer.Option(...)) -> None:
    """Delete a candidate together with answers and evaluation state."""
    container = _container(ctx)
    _sync(lambda: container.store().delete_candidate(candidate_id))
    typer.echo(f"Deleted candidate {candidate_id}.")


@app.command("delete-vacancy")
def delete_vacancy(ctx: typer.Context, vacancy_id: UUID = typer.Option(...)) -> None:
    """Delete a vacancy together with its questions and evaluation state."""
    container = _container(ctx)
    _sync(lambda: container.store().delete_vacancy(vacancy_id))
    typer.echo(f"Deleted vacancy {vacancy_id}.")


def _echo_models(items: Sequence[BaseModel]) -> None:
    typer.echo(json.dumps([item.model_dump(mode="json") for item in items], ensure_ascii=False, indent=2))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
