"""Relational persistence for the evaluation pipeline."""

from .session import Base, build_engine, build_session_factory, create_schema, session_scope
from .store import EvaluationStore

__all__ = [
    "Base",
    "EvaluationStore",
    "build_engine",
    "build_session_factory",
    "create_schema",
    "session_scope",
]
