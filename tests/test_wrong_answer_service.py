"""오답 복습 테스트"""
import pytest
from unittest.mock import AsyncMock, patch
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.crud import exam_result as exam_result_crud, wrong_answer_review as wrong_answer_review_crud
from app.exceptions import ResultNotFoundError
from app.models.educational_post import EducationalPost
from app.models.exam_result import ExamResult
from app.models.question import QUESTION_TYPE_MULTIPLE_CHOICE, QUESTION_TYPE_SUBJECTIVE, Question
from app.models.wrong_answer_review import WrongAnswerReview
from app.schemas.review import WrongAnswerReviewRequest
from app.services import wrong_answer_service


@pytest.fixture
async def setup(test_db_session, manager):
    post = EducationalPost(title="응대 매뉴얼", category="고객_응대", content="본문")
    test_db_session.add(post)
    await test_db_session.flush()

    questions = [
        Question(
            category="고객_응대",
            question="복수 정답 문제",
            question_type=QUESTION_TYPE_MULTIPLE_CHOICE,
            options=["A", "B", "C"],
            correct_answer=[0, 2],
            max_score=10,
            related_post_id=post.id,
        ),
        Question(
            category="고객_응대",
            question="단일 정답 문제",
            question_type=QUESTION_TYPE_MULTIPLE_CHOICE,
            options=["O", "X"],
            correct_answer=[1],
            max_score=10,
        ),
        Question(
            category="고객_응대",
            question="주관식",
            question_type=QUESTION_TYPE_SUBJECTIVE,
            grading_criteria="기준",
            max_score=10,
        ),
    ]
    test_db_session.add_all(questions)
    await test_db_session.commit()

    result = await exam_result_crud.create_exam_result(
        test_db_session, user_id=manager.id, category="고객_응대", score=40, correct_count=1, total_count=3
    )
    return result, questions


@pytest.mark.asyncio
async def test_get_review_questions_excludes_subjective(test_db_session, manager, setup):
    result, questions = setup

    response = await wrong_answer_service.get_review_questions(test_db_session, manager, result.id)

    assert response.total == 2
    assert response.category_title == "고객 응대"
    first = response.questions[0]
    assert first.correct_answer == [0, 2]
    assert first.related_post_title == "응대 매뉴얼"
    assert response.questions[1].related_post_title is None


@pytest.mark.asyncio
async def test_get_review_questions_explicit_ids(test_db_session, manager, setup):
    result, questions = setup

    response = await wrong_answer_service.get_review_questions(
        test_db_session, manager, result.id, [questions[1].id, questions[2].id]
    )

    assert [q.id for q in response.questions] == [questions[1].id]


@pytest.mark.asyncio
async def test_get_review_questions_missing_result(test_db_session, manager):
    with pytest.raises(ResultNotFoundError):
        await wrong_answer_service.get_review_questions(test_db_session, manager, 404)


@pytest.mark.asyncio
async def test_submit_review_does_not_mutate_result(test_db_session, manager, setup):
    """복습 제출은 기록만 추가하고 원래 결과는 그대로"""
    result, questions = setup
    request = WrongAnswerReviewRequest(
        test_result_id=result.id,
        answers=[
            {"question_id": questions[0].id, "selected": [2, 0]},
            {"question_id": questions[1].id, "selected": [0]},
            {"question_id": questions[2].id, "selected": []},
        ],
    )

    response = await wrong_answer_service.submit_review(test_db_session, manager, request)

    assert response.total_count == 2
    assert response.correct_count == 1
    assert response.score == 50
    assert [item.is_correct for item in response.items] == [True, False]

    stored = (
        await test_db_session.execute(
            select(ExamResult).where(ExamResult.id == result.id).execution_options(populate_existing=True)
        )
    ).scalar_one()
    assert stored.score == 40
    assert stored.correct_count == 1
    assert stored.total_count == 3

    reviews = (await test_db_session.execute(select(WrongAnswerReview))).scalars().all()
    assert len(reviews) == 2
    assert reviews[0].review_answer == {"selected": [0, 2]}


@pytest.mark.asyncio
async def test_submit_review_twice_appends(test_db_session, manager, setup):
    result, questions = setup
    request = WrongAnswerReviewRequest(
        test_result_id=result.id,
        answers=[{"question_id": questions[1].id, "selected": [1]}],
    )

    await wrong_answer_service.submit_review(test_db_session, manager, request)
    await wrong_answer_service.submit_review(test_db_session, manager, request)

    reviews = await wrong_answer_review_crud.get_wrong_answer_reviews_by_result(test_db_session, result.id)
    assert len(reviews) == 2


@pytest.mark.asyncio
async def test_submit_review_ignores_other_category(test_db_session, manager, setup):
    result, questions = setup
    other = Question(
        category="매장_운영",
        question="다른 카테고리 문제",
        question_type=QUESTION_TYPE_MULTIPLE_CHOICE,
        options=["A", "B"],
        correct_answer=[0],
        max_score=10,
    )
    test_db_session.add(other)
    await test_db_session.commit()

    request = WrongAnswerReviewRequest(
        test_result_id=result.id,
        answers=[
            {"question_id": questions[1].id, "selected": [1]},
            {"question_id": other.id, "selected": [0]},
        ],
    )
    response = await wrong_answer_service.submit_review(test_db_session, manager, request)

    assert [item.question_id for item in response.items] == [questions[1].id]
    assert response.total_count == 1


@pytest.mark.asyncio
async def test_submit_review_full_test_allows_any_category(test_db_session, manager, setup):
    _, questions = setup
    other = Question(
        category="매장_운영",
        question="다른 카테고리 문제",
        question_type=QUESTION_TYPE_MULTIPLE_CHOICE,
        options=["A", "B"],
        correct_answer=[0],
        max_score=10,
    )
    test_db_session.add(other)
    await test_db_session.commit()
    full_result = await exam_result_crud.create_exam_result(
        test_db_session, user_id=manager.id, category="전체", score=0, correct_count=0, total_count=2
    )

    request = WrongAnswerReviewRequest(
        test_result_id=full_result.id,
        answers=[
            {"question_id": questions[1].id, "selected": [1]},
            {"question_id": other.id, "selected": [0]},
        ],
    )
    response = await wrong_answer_service.submit_review(test_db_session, manager, request)

    assert response.total_count == 2
    assert response.correct_count == 2


@pytest.mark.asyncio
async def test_submit_review_insert_failure_still_returns_score(test_db_session, manager, setup):
    result, questions = setup
    request = WrongAnswerReviewRequest(
        test_result_id=result.id,
        answers=[{"question_id": questions[1].id, "selected": [1]}],
    )

    with patch.object(
        wrong_answer_review_crud,
        "create_wrong_answer_reviews",
        new_callable=AsyncMock,
        side_effect=SQLAlchemyError("insert failed"),
    ):
        response = await wrong_answer_service.submit_review(test_db_session, manager, request)

    assert response.score == 100
    assert response.correct_count == 1
