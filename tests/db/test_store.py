from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from hrevaluation.db import EvaluationStore
from hrevaluation.db.models import CandidateVacancyMetaRow, ResumeScreeningRow
from hrevaluation.errors import NotFound, PersistenceFailure
from hrevaluation.schemas import CandidateVacancyStatus, NewCandidate, NewVacancy

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def count_rows(session_factory, model) -> int:
    with session_factory() as session:
        return session.execute(select(func.count()).select_from(model)).scalar_one()


def test_record_screening_outcome_writes_score_and_status(store, candidate_id, vacancy_id):
    store.record_screening_outcome(
        candidate_id, vacancy_id, 82, "Good fit", CandidateVacancyStatus.SCREENING_OK
    )

    screening = store.get_resume_screening(candidate_id, vacancy_id)
    meta = store.get_meta(candidate_id, vacancy_id)

    assert screening.score == 82
    assert screening.feedback == "Good fit"
    assert meta.status is CandidateVacancyStatus.SCREENING_OK
    assert meta.interview_score is None
    assert meta.is_archived is False


def test_record_screening_outcome_is_idempotent(session_factory, candidate_id, vacancy_id):
    store = EvaluationStore(session_factory, clock=lambda: FIXED_NOW)
    args = (candidate_id, vacancy_id, 64, "Lacks SQL", CandidateVacancyStatus.SCREENING_FAILED)

    store.record_screening_outcome(*args)
    first = (store.get_resume_screening(candidate_id, vacancy_id), store.get_meta(candidate_id, vacancy_id))
    store.record_screening_outcome(*args)
    second = (store.get_resume_screening(candidate_id, vacancy_id), store.get_meta(candidate_id, vacancy_id))

    assert first == second
    assert count_rows(session_factory, ResumeScreeningRow) == 1
    assert count_rows(session_factory, CandidateVacancyMetaRow) == 1


def test_rescreening_replaces_previous_result(store, candidate_id, vacancy_id):
    store.record_screening_outcome(candidate_id, vacancy_id, 40, "weak", CandidateVacancyStatus.SCREENING_FAILED)
    store.record_screening_outcome(candidate_id, vacancy_id, 90, "strong", CandidateVacancyStatus.SCREENING_OK)

    assert store.get_resume_screening(candidate_id, vacancy_id).score == 90
    assert store.get_meta(candidate_id, vacancy_id).status is CandidateVacancyStatus.SCREENING_OK


def test_screening_outcome_rolls_back_when_status_write_fails(
    store, session_factory, candidate_id, vacancy_id, monkeypatch
):
    store.record_screening_outcome(candidate_id, vacancy_id, 60, "first", CandidateVacancyStatus.SCREENING_FAILED)

    def broken_status_write(*args, **kwargs):
        raise OperationalError("INSERT INTO candidate_vacancy_meta", {}, Exception("disk I/O error"))

    monkeypatch.setattr(store, "_upsert_meta_status", broken_status_write)

    with pytest.raises(PersistenceFailure):
        store.record_screening_outcome(candidate_id, vacancy_id, 95, "second", CandidateVacancyStatus.SCREENING_OK)

    screening = store.get_resume_screening(candidate_id, vacancy_id)
    assert screening.score == 60
    assert screening.feedback == "first"
    assert store.get_meta(candidate_id, vacancy_id).status is CandidateVacancyStatus.SCREENING_FAILED
    assert count_rows(session_factory, ResumeScreeningRow) == 1


def test_first_screening_rolls_back_completely(store, candidate_id, vacancy_id, monkeypatch):
    def broken_status_write(*args, **kwargs):
        raise OperationalError("INSERT INTO candidate_vacancy_meta", {}, Exception("locked"))

    monkeypatch.setattr(store, "_upsert_meta_status", broken_status_write)

    with pytest.raises(PersistenceFailure):
        store.record_screening_outcome(candidate_id, vacancy_id, 77, "ok", CandidateVacancyStatus.SCREENING_OK)

    with pytest.raises(NotFound):
        store.get_resume_screening(candidate_id, vacancy_id)
    with pytest.raises(NotFound):
        store.get_meta(candidate_id, vacancy_id)


def test_screening_keeps_interview_score(store, candidate_id, vacancy_id):
    store.record_interview_outcome(candidate_id, vacancy_id, 81, CandidateVacancyStatus.INTERVIEW_OK)
    store.record_screening_outcome(candidate_id, vacancy_id, 79, "re-screened", CandidateVacancyStatus.SCREENING_OK)

    meta = store.get_meta(candidate_id, vacancy_id)
    assert meta.interview_score == 81
    assert meta.status is CandidateVacancyStatus.SCREENING_OK


def test_record_interview_outcome_sets_score_and_status(store, candidate_id, vacancy_id):
    store.record_screening_outcome(candidate_id, vacancy_id, 88, "fit", CandidateVacancyStatus.SCREENING_OK)
    store.record_interview_outcome(candidate_id, vacancy_id, 70, CandidateVacancyStatus.INTERVIEW_FAILED)

    meta = store.get_meta(candidate_id, vacancy_id)
    assert meta.interview_score == 70
    assert meta.status is CandidateVacancyStatus.INTERVIEW_FAILED
    assert store.get_resume_screening(candidate_id, vacancy_id).score == 88


def test_outcome_for_unknown_candidate_is_persistence_failure(store, vacancy_id):
    with pytest.raises(PersistenceFailure):
        store.record_screening_outcome(9999, vacancy_id, 50, "x", CandidateVacancyStatus.SCREENING_FAILED)


def test_create_vacancy_orders_questions_by_position(store, vacancy_id):
    vacancy = store.get_vacancy(vacancy_id)
    questions = store.list_questions(vacancy_id)

    assert vacancy.title == "Backend Engineer"
    assert vacancy.key_requirements == ["Python", "SQL", "asyncio"]
    assert [q.position for q in questions] == [1, 2, 3]
    assert questions[0].content == "What is a transaction?"
    assert questions[0].time_limit == 120


def test_list_answers_is_scoped_to_vacancy(store, candidate_id, vacancy_id):
    from hrevaluation.schemas import NewQuestion, NewVacancy

    other_vacancy = store.create_vacancy(
        NewVacancy(title="Data Analyst", questions=[NewQuestion(content="SQL?", reference="Yes")])
    )
    own_question = store.list_questions(vacancy_id)[0]
    other_question = store.list_questions(other_vacancy)[0]

    store.create_answer(candidate_id, own_question.id, "atomic unit", 30, 90)
    store.create_answer(candidate_id, other_question.id, "yes", 10, 40)

    answers = store.list_answers(candidate_id, vacancy_id)
    assert [a.score for a in answers] == [90]
    assert answers[0].question_id == own_question.id


def test_missing_rows_raise_not_found(store):
    with pytest.raises(NotFound):
        store.get_vacancy(uuid.uuid4())
    with pytest.raises(NotFound):
        store.get_question(12345)
    with pytest.raises(NotFound):
        store.get_candidate(12345)


def test_archive_and_delete(store, candidate_id, vacancy_id):
    with pytest.raises(NotFound):
        store.archive(candidate_id, vacancy_id)

    store.record_screening_outcome(candidate_id, vacancy_id, 76, "ok", CandidateVacancyStatus.SCREENING_OK)
    store.archive(candidate_id, vacancy_id)
    assert store.get_meta(candidate_id, vacancy_id).is_archived is True

    store.delete_candidate(candidate_id)
    with pytest.raises(NotFound):
        store.get_candidate(candidate_id)
    with pytest.raises(NotFound):
        store.get_meta(candidate_id, vacancy_id)

    store.delete_vacancy(vacancy_id)
    with pytest.raises(NotFound):
        store.delete_vacancy(vacancy_id)


def test_aborted_screening_outcome_rolls_back(store, candidate_id, vacancy_id):
    abort = threading.Event()
    abort.set()

    with pytest.raises(PersistenceFailure, match="aborted"):
        store.record_screening_outcome(
            candidate_id, vacancy_id, 90, "late", CandidateVacancyStatus.SCREENING_OK, abort=abort
        )

    with pytest.raises(NotFound):
        store.get_meta(candidate_id, vacancy_id)
    with pytest.raises(NotFound):
        store.get_resume_screening(candidate_id, vacancy_id)


def test_aborted_interview_outcome_keeps_screening_status(store, candidate_id, vacancy_id):
    store.record_screening_outcome(candidate_id, vacancy_id, 80, "ok", CandidateVacancyStatus.SCREENING_OK)
    abort = threading.Event()
    abort.set()

    with pytest.raises(PersistenceFailure):
        store.record_interview_outcome(
            candidate_id, vacancy_id, 90, CandidateVacancyStatus.INTERVIEW_OK, abort=abort
        )

    meta = store.get_meta(candidate_id, vacancy_id)
    assert (meta.status, meta.interview_score) == (CandidateVacancyStatus.SCREENING_OK, None)


def test_candidate_lookup_by_telegram_id(store, candidate_id):
    assert store.get_candidate_by_telegram_id(1001).id == candidate_id
    with pytest.raises(NotFound):
        store.get_candidate_by_telegram_id(999)


def test_list_vacancies_with_questions(store, vacancy_id):
    empty_id = store.create_vacancy(NewVacancy(title="Office Manager"))

    listed = {item.vacancy.id: item for item in store.list_vacancies()}

    assert set(listed) == {vacancy_id, empty_id}
    assert [q.position for q in listed[vacancy_id].questions] == [1, 2, 3]
    assert listed[empty_id].questions == []


def test_list_question_answers_pairs_answers_with_questions(store, candidate_id, vacancy_id):
    first, second, _ = store.list_questions(vacancy_id)
    store.create_answer(candidate_id, second.id, "serialises bytecode", 30, 70)
    store.create_answer(candidate_id, first.id, "all or nothing", 20, 90)

    pairs = store.list_question_answers(candidate_id, vacancy_id)

    assert [(p.question.position, p.answer.content) for p in pairs] == [
        (1, "all or nothing"),
        (2, "serialises bytecode"),
    ]


def test_list_candidate_vacancy_infos(store, candidate_id, vacancy_id):
    other = store.create_candidate(NewCandidate(telegram_id=2002, full_name="John Roe"))
    store.record_screening_outcome(candidate_id, vacancy_id, 81, "fit", CandidateVacancyStatus.SCREENING_OK)
    store.record_interview_outcome(other, vacancy_id, 60, CandidateVacancyStatus.INTERVIEW_FAILED)
    store.archive(other, vacancy_id)

    infos = {info.candidate.id: info for info in store.list_candidate_vacancy_infos()}

    assert set(infos) == {candidate_id, other}
    assert infos[candidate_id].resume_screening.score == 81
    assert infos[candidate_id].resume_link is None
    assert len(infos[candidate_id].questions) == 3
    assert infos[other].resume_screening is None
    assert infos[other].meta.interview_score == 60

    active = store.list_candidate_vacancy_infos(include_archived=False)
    assert [info.candidate.id for info in active] == [candidate_id]
