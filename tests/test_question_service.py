"""Question Service 테스트"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import InvalidQuestionError, InvalidRequestError, PostNotFoundError, QuestionNotFoundError
from app.models.educational_post import EducationalPost
from app.schemas import question as question_schema
from app.schemas.ai import AIQuestionDraftResponse
from app.services import question_service


@pytest.fixture
def mock_db_session():
    """모킹된 DB 세션"""
    return AsyncMock(spec=AsyncSession)


def objective_fields(**overrides) -> dict:
    fields = {
        "question_type": "multiple_choice",
        "options": ["A", "B", "C"],
        "correct_answer": [0],
        "grading_criteria": None,
    }
    fields.update(overrides)
    return fields


def test_scalar_correct_answer_is_normalized():
    request = question_schema.QuestionCreateRequest(
        category="고객_응대",
        question="문제",
        options=["A", "B"],
        correct_answer=1,
    )
    assert request.correct_answer == [1]

    request = question_schema.QuestionCreateRequest(
        category="고객_응대",
        question="문제",
        options=["A", "B", "C"],
        correct_answer=[2, 0, 2],
    )
    assert request.correct_answer == [0, 2]


def test_boolean_correct_answer_rejected():
    with pytest.raises(ValidationError):
        question_schema.QuestionCreateRequest(
            category="고객_응대", question="문제", options=["A", "B"], correct_answer=True
        )


def test_validate_objective_fields():
    question_service.validate_question_fields(objective_fields())

    with pytest.raises(InvalidQuestionError):
        question_service.validate_question_fields(objective_fields(options=["A"]))
    with pytest.raises(InvalidQuestionError):
        question_service.validate_question_fields(objective_fields(correct_answer=[]))
    with pytest.raises(InvalidQuestionError):
        question_service.validate_question_fields(objective_fields(correct_answer=[3]))
    with pytest.raises(InvalidQuestionError):
        question_service.validate_question_fields(objective_fields(grading_criteria="기준"))


def test_validate_subjective_fields():
    question_service.validate_question_fields(
        {"question_type": "subjective", "grading_criteria": "공감", "options": None, "correct_answer": None}
    )

    with pytest.raises(InvalidQuestionError):
        question_service.validate_question_fields({"question_type": "subjective", "grading_criteria": "  "})
    with pytest.raises(InvalidQuestionError):
        question_service.validate_question_fields(
            {"question_type": "subjective", "grading_criteria": "공감", "options": ["A", "B"]}
        )


@pytest.mark.asyncio
async def test_create_update_delete_question(test_db_session):
    created = await question_service.create_question(
        test_db_session,
        question_schema.QuestionCreateRequest(
            category="고객_응대",
            question="인사 예절로 올바른 것은?",
            options=["A", "B", "C", "D"],
            correct_answer=[1, 3],
        ),
    )
    assert created.max_score == 10
    assert created.correct_answer == [1, 3]

    # 주관식으로 바꾸려면 객관식 필드를 비워야 함
    with pytest.raises(InvalidQuestionError):
        await question_service.update_question(
            test_db_session,
            created.id,
            question_schema.QuestionUpdateRequest(question_type="subjective", grading_criteria="기준"),
        )

    updated = await question_service.update_question(
        test_db_session,
        created.id,
        question_schema.QuestionUpdateRequest(
            question_type="subjective",
            grading_criteria="예절 항목 2개 이상",
            options=None,
            correct_answer=None,
            max_score=20,
        ),
    )
    assert updated.question_type == "subjective"
    assert updated.options is None
    assert updated.max_score == 20

    listing = await question_service.list_questions(test_db_session, "고객_응대")
    assert listing.total == 1

    await question_service.delete_question(test_db_session, created.id)
    with pytest.raises(QuestionNotFoundError):
        await question_service.get_question(test_db_session, created.id)


@pytest.mark.asyncio
async def test_create_question_unknown_post(test_db_session):
    with pytest.raises(PostNotFoundError):
        await question_service.create_question(
            test_db_session,
            question_schema.QuestionCreateRequest(
                category="고객_응대",
                question="문제",
                question_type="subjective",
                grading_criteria="기준",
                related_post_id=999,
            ),
        )


@pytest.mark.asyncio
async def test_generate_draft_from_post(test_db_session):
    post = EducationalPost(title="응대 매뉴얼", category="고객_응대", content="고객 응대 시 먼저 공감한다." * 500)
    test_db_session.add(post)
    await test_db_session.commit()

    draft = AIQuestionDraftResponse(
        question="가장 먼저 해야 할 일은?",
        options=["공감", "반박", "무시", "전달"],
        correct_answer=0,
    )
    with patch(
        "app.services.ai_service.generate_question_draft", new_callable=AsyncMock, return_value=draft
    ) as mock_ai:
        result = await question_service.generate_question_draft(
            test_db_session,
            question_schema.QuestionDraftRequest(category="고객_응대", post_id=post.id),
        )

    assert result.options == ["공감", "반박", "무시", "전달"]
    ai_request = mock_ai.await_args.args[0]
    assert ai_request.question_type == "multiple_choice"
    assert ai_request.content.startswith("고객 응대")


@pytest.mark.asyncio
async def test_generate_draft_requires_source(mock_db_session):
    with pytest.raises(InvalidRequestError):
        await question_service.generate_question_draft(
            mock_db_session,
            question_schema.QuestionDraftRequest(category="고객_응대"),
        )


@pytest.mark.asyncio
async def test_generate_draft_post_not_found(mock_db_session):
    from app.crud import educational_post as post_crud

    with patch.object(post_crud, "get_post_by_id", new_callable=AsyncMock, return_value=None):
        with pytest.raises(PostNotFoundError):
            await question_service.generate_question_draft(
                mock_db_session,
                question_schema.QuestionDraftRequest(category="고객_응대", post_id=1),
            )


@pytest.mark.asyncio
async def test_generate_draft_from_content(mock_db_session):
    draft = MagicMock(spec=AIQuestionDraftResponse)
    with patch(
        "app.services.ai_service.generate_question_draft", new_callable=AsyncMock, return_value=draft
    ) as mock_ai:
        result = await question_service.generate_question_draft(
            mock_db_session,
            question_schema.QuestionDraftRequest(
                category="고객_응대", question_type="subjective", content="교육 자료 본문"
            ),
        )

    assert result is draft
    assert mock_ai.await_args.args[0].question_type == "subjective"
