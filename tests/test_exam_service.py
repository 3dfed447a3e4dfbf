"""Exam Service 테스트"""
import json

import pytest
from unittest.mock import AsyncMock, patch
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.crud import exam_result as exam_result_crud
from app.exceptions import (
    GradingFailedError,
    InvalidAttemptStateError,
    InvalidRequestError,
    QuestionNotFoundError,
    ResultNotFoundError,
    RetestAssignmentNotFoundError,
)
from app.models.exam_result import ExamResult
from app.models.question import QUESTION_TYPE_MULTIPLE_CHOICE, QUESTION_TYPE_SUBJECTIVE, Question
from app.models.retest_assignment import RETEST_COMPLETED, RETEST_PENDING, RetestAssignment
from app.models.subjective_answer import STATUS_AI_GRADED, STATUS_PENDING, SubjectiveAnswer
from app.schemas import exam as exam_schema
from app.schemas.ai import AIGradingResponse
from app.services import exam_service
from app.services.attempt_session import SAVE_ERROR_MESSAGE


@pytest.fixture
async def catalog(test_db_session):
    """객관식 3문제 + 주관식 1문제"""
    questions = [
        Question(
            category="고객_응대",
            question=f"객관식 {i}",
            question_type=QUESTION_TYPE_MULTIPLE_CHOICE,
            options=["A", "B", "C", "D"],
            correct_answer=[i % 4],
            max_score=10,
        )
        for i in range(3)
    ]
    questions.append(
        Question(
            category="고객_응대",
            question="불만 고객에게 어떻게 응대하시겠습니까?",
            question_type=QUESTION_TYPE_SUBJECTIVE,
            grading_criteria="공감 표현, 해결책 제시",
            model_answer="먼저 공감하고 해결책을 안내한다",
            max_score=20,
        )
    )
    test_db_session.add_all(questions)
    await test_db_session.commit()
    return questions


def full_marks_request(catalog, **kwargs) -> exam_schema.ExamSubmitRequest:
    answers = [{"question_id": q.id, "selected": q.correct_answer} for q in catalog[:3]]
    answers.append({"question_id": catalog[3].id, "answer_text": "먼저 공감하고 환불 절차를 안내합니다"})
    return exam_schema.ExamSubmitRequest(category="고객_응대", answers=answers, **kwargs)


def test_category_title():
    assert exam_service.category_title("전체") == "전체 테스트"
    assert exam_service.category_title("고객_응대") == "고객 응대"


@pytest.mark.asyncio
async def test_start_exam_hides_answer_keys(test_db_session, catalog):
    response = await exam_service.start_exam(test_db_session, "고객_응대")

    assert response.total == 4
    assert response.category_title == "고객 응대"
    dumped = response.model_dump()
    for question in dumped["questions"]:
        assert "correct_answer" not in question
        assert "grading_criteria" not in question
        assert "model_answer" not in question


@pytest.mark.asyncio
async def test_start_exam_empty_category(test_db_session, catalog):
    """문제가 없는 카테고리는 오류가 아니라 빈 목록"""
    response = await exam_service.start_exam(test_db_session, "없는_카테고리")
    assert response.total == 0
    assert response.questions == []


@pytest.mark.asyncio
async def test_start_exam_full_test_samples_all_categories(test_db_session, catalog):
    test_db_session.add(
        Question(
            category="안전_교육",
            question="안전 문제",
            question_type=QUESTION_TYPE_MULTIPLE_CHOICE,
            options=["O", "X"],
            correct_answer=[0],
            max_score=10,
        )
    )
    await test_db_session.commit()

    response = await exam_service.start_exam(test_db_session, "전체")

    assert response.total == 5
    assert response.category_title == "전체 테스트"
    assert {q.category for q in response.questions} == {"고객_응대", "안전_교육"}


@pytest.mark.asyncio
async def test_submit_exam_end_to_end(test_db_session, manager, catalog):
    """객관식 3문제 정답 + 주관식 15/20 -> 90점, 4/4"""
    grading = AIGradingResponse(score=15, feedback="좋은 답변", strengths=["공감"], improvements=["구체성"])
    with patch("app.services.ai_service.grade_subjective_answer", new_callable=AsyncMock, return_value=grading):
        response = await exam_service.submit_exam(test_db_session, manager, full_marks_request(catalog))

    assert response.score == 90
    assert response.correct_count == 4
    assert response.total_count == 4
    assert response.save_error is None
    assert response.test_result_id is not None

    stored = await test_db_session.get(ExamResult, response.test_result_id)
    assert stored.score == 90
    assert stored.category_scores == {}

    rows = (await test_db_session.execute(select(SubjectiveAnswer))).scalars().all()
    assert len(rows) == 1
    assert rows[0].status == STATUS_AI_GRADED
    assert rows[0].ai_score == 15
    assert rows[0].test_result_id == response.test_result_id
    assert json.loads(rows[0].ai_feedback)["strengths"] == ["공감"]


@pytest.mark.asyncio
async def test_submit_exam_grading_failure_records_pending(test_db_session, manager, catalog):
    with patch(
        "app.services.ai_service.grade_subjective_answer",
        new_callable=AsyncMock,
        side_effect=GradingFailedError(),
    ):
        response = await exam_service.submit_exam(test_db_session, manager, full_marks_request(catalog))

    # 30 / 50
    assert response.score == 60
    assert response.correct_count == 3
    subjective_outcome = response.outcomes[3]
    assert subjective_outcome.grading_status == "grading_failed"
    assert subjective_outcome.awarded_score == 0

    row = (await test_db_session.execute(select(SubjectiveAnswer))).scalar_one()
    assert row.status == STATUS_PENDING
    assert row.ai_score is None


@pytest.mark.asyncio
async def test_submit_exam_save_failure_is_soft(test_db_session, manager, catalog):
    grading = AIGradingResponse(score=20)
    with patch("app.services.ai_service.grade_subjective_answer", new_callable=AsyncMock, return_value=grading):
        with patch.object(
            exam_result_crud,
            "create_exam_result",
            new_callable=AsyncMock,
            side_effect=SQLAlchemyError("insert failed"),
        ):
            response = await exam_service.submit_exam(test_db_session, manager, full_marks_request(catalog))

    assert response.test_result_id is None
    assert response.save_error == SAVE_ERROR_MESSAGE
    assert response.score == 100


@pytest.mark.asyncio
async def test_submit_exam_completes_retest(test_db_session, manager, admin, catalog):
    assignment = RetestAssignment(admin_id=admin.id, manager_id=manager.id, category="고객_응대")
    test_db_session.add(assignment)
    await test_db_session.commit()

    grading = AIGradingResponse(score=10)
    with patch("app.services.ai_service.grade_subjective_answer", new_callable=AsyncMock, return_value=grading):
        await exam_service.submit_exam(
            test_db_session, manager, full_marks_request(catalog, retest_assignment_id=assignment.id)
        )

    await test_db_session.refresh(assignment)
    assert assignment.status == RETEST_COMPLETED
    assert assignment.completed_at is not None


@pytest.mark.asyncio
async def test_submit_exam_rejects_other_managers_retest(test_db_session, manager, admin, catalog):
    assignment = RetestAssignment(admin_id=admin.id, manager_id=admin.id, category="고객_응대")
    test_db_session.add(assignment)
    await test_db_session.commit()

    with pytest.raises(RetestAssignmentNotFoundError):
        await exam_service.submit_exam(
            test_db_session, manager, full_marks_request(catalog, retest_assignment_id=assignment.id)
        )
    await test_db_session.refresh(assignment)
    assert assignment.status == RETEST_PENDING


@pytest.mark.asyncio
async def test_submit_exam_unknown_question(test_db_session, manager, catalog):
    request = exam_schema.ExamSubmitRequest(
        category="고객_응대",
        answers=[{"question_id": 9999, "selected": [0]}],
    )
    with pytest.raises(QuestionNotFoundError):
        await exam_service.submit_exam(test_db_session, manager, request)


@pytest.mark.asyncio
async def test_submit_exam_invalid_option(test_db_session, manager, catalog):
    request = exam_schema.ExamSubmitRequest(
        category="고객_응대",
        answers=[{"question_id": catalog[0].id, "selected": [7]}],
    )
    with pytest.raises(InvalidAttemptStateError):
        await exam_service.submit_exam(test_db_session, manager, request)
    count = len((await test_db_session.execute(select(ExamResult))).scalars().all())
    assert count == 0


@pytest.mark.asyncio
async def test_grade_answer_requires_subjective_with_content(test_db_session, catalog):
    with pytest.raises(InvalidRequestError):
        await exam_service.grade_answer(
            test_db_session, exam_schema.GradeRequest(question_id=catalog[0].id, answer_text="답")
        )
    with pytest.raises(InvalidRequestError):
        await exam_service.grade_answer(
            test_db_session, exam_schema.GradeRequest(question_id=catalog[3].id, answer_text="   ")
        )


@pytest.mark.asyncio
async def test_grade_answer_does_not_persist(test_db_session, catalog):
    grading = AIGradingResponse(score=14, feedback="양호")
    with patch(
        "app.services.ai_service.grade_subjective_answer", new_callable=AsyncMock, return_value=grading
    ) as mock_grade:
        result = await exam_service.grade_answer(
            test_db_session, exam_schema.GradeRequest(question_id=catalog[3].id, answer_text="공감합니다")
        )

    assert result.score == 14
    assert result.max_score == 20
    ai_request = mock_grade.await_args.args[0]
    assert ai_request.grading_criteria == "공감 표현, 해결책 제시"
    assert ai_request.max_score == 20
    rows = (await test_db_session.execute(select(SubjectiveAnswer))).scalars().all()
    assert rows == []


@pytest.mark.asyncio
async def test_get_exam_list_and_results(test_db_session, manager, catalog):
    for score in (40, 80):
        await exam_result_crud.create_exam_result(
            test_db_session, user_id=manager.id, category="고객_응대", score=score, correct_count=2, total_count=4
        )

    listing = await exam_service.get_exam_list(test_db_session, manager)
    categories = {c.category: c for c in listing.categories}
    assert categories["고객_응대"].question_count == 4
    assert categories["전체"].title == "전체 테스트"
    assert len(listing.recent_results) == 2

    history = await exam_service.get_my_results(test_db_session, manager)
    assert history.total == 2


@pytest.mark.asyncio
async def test_get_result_detail_only_own(test_db_session, manager, admin):
    result = await exam_result_crud.create_exam_result(
        test_db_session, user_id=admin.id, category="고객_응대", score=50, correct_count=1, total_count=2
    )

    with pytest.raises(ResultNotFoundError):
        await exam_service.get_result_detail(test_db_session, manager, result.id)

    detail = await exam_service.get_result_detail(test_db_session, admin, result.id)
    assert detail.result.score == 50
    assert detail.subjective_answers == []


@pytest.mark.asyncio
async def test_get_manager_scores(test_db_session, manager, admin):
    for score in (70, 85):
        await exam_result_crud.create_exam_result(
            test_db_session, user_id=manager.id, category="고객_응대", score=score, correct_count=1, total_count=1
        )

    response = await exam_service.get_manager_scores(test_db_session)

    assert response.total == 1
    summary = response.managers[0]
    assert summary.username == "manager1"
    assert summary.average_score == 77.5
    assert summary.total_tests == 2
