"""Dependency injection container for the evaluation pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import boto3
from dependency_injector import containers, providers

from .adapters import PdfTextExtractor, S3DocumentStore, TikaTextExtractor
from .core import (
    AuditLogger,
    CandidateReportService,
    InterviewScoringOrchestrator,
    ResumeScreeningOrchestrator,
)
from .db import EvaluationStore, build_engine, build_session_factory
from .llm import YandexGPTClient
from .schemas.config import AppConfig


class EvaluationContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    audit_logger = providers.Object(None)

    engine = providers.Singleton(
        build_engine,
        config.database.url,
        echo=config.database.echo,
    )
    session_factory = providers.Singleton(build_session_factory, engine)
    store = providers.Singleton(EvaluationStore, session_factory)

    s3_client = providers.Singleton(
        boto3.client,
        "s3",
        endpoint_url=config.storage.endpoint_url,
        region_name=config.storage.region,
        aws_access_key_id=config.storage.access_key,
        aws_secret_access_key=config.storage.secret_key,
    )
    documents = providers.Singleton(
        S3DocumentStore,
        s3_client,
        config.storage.bucket,
        link_ttl=config.storage.link_ttl,
    )

    extractor = providers.Selector(
        config.extraction.backend,
        tika=providers.Singleton(
            TikaTextExtractor,
            config.extraction.tika_url,
            timeout=config.extraction.timeout,
        ),
        pdf=providers.Singleton(
            PdfTextExtractor,
            exclude_patterns=config.extraction.exclude_patterns,
        ),
    )

    scorer = providers.Singleton(
        YandexGPTClient,
        api_key=config.llm.api_key,
        folder_id=config.llm.folder_id,
        endpoint=config.llm.endpoint,
        model=config.llm.model,
        temperature=config.llm.temperature,
        max_tokens=config.llm.max_tokens,
        call_timeout=config.llm.call_timeout,
        attempts=config.llm.attempts,
        retry_delay=config.llm.retry_delay,
    )

    resume_screening = providers.Factory(
        ResumeScreeningOrchestrator,
        store=store,
        documents=documents,
        extractor=extractor,
        scorer=scorer,
        audit_logger=audit_logger,
    )

    interview_scoring = providers.Factory(
        InterviewScoringOrchestrator,
        store=store,
        scorer=scorer,
        audit_logger=audit_logger,
    )

    reports = providers.Factory(
        CandidateReportService,
        store=store,
        documents=documents,
    )


def create_container(
    *,
    settings: dict[str, Any] | None = None,
    audit_log: Path | None = None,
) -> EvaluationContainer:
    """Instantiate the container; missing settings fall back to ``AppConfig`` defaults."""

    container = EvaluationContainer()
    app_config = AppConfig.model_validate(settings or {})
    container.config.from_dict(app_config.to_settings())

    if audit_log is not None:
        container.audit_logger.override(providers.Singleton(AuditLogger, audit_log))

    return container
