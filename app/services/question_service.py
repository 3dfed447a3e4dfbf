import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import educational_post as post_crud, question as question_crud
from app.exceptions import InvalidQuestionError, InvalidRequestError, PostNotFoundError, QuestionNotFoundError
from app.models.question import QUESTION_TYPE_MULTIPLE_CHOICE, QUESTION_TYPE_SUBJECTIVE
from app.schemas import ai, question as question_schema
from app.services import ai_service

logger = logging.getLogger(__name__)

MIN_OPTION_COUNT = 2


def validate_question_fields(fields: dict[str, Any]) -> None:
    """문제 유형과 내용의 일관성 검증

    객관식은 선택지와 정답만, 주관식은 채점 기준만 채워져 있어야 한다.
    """
    question_type = fields.get("question_type")
    options = fields.get("options")
    correct_answer = fields.get("correct_answer")
    grading_criteria = (fields.get("grading_criteria") or "").strip()

    if question_type == QUESTION_TYPE_MULTIPLE_CHOICE:
        if not options or len(options) < MIN_OPTION_COUNT:
            raise InvalidQuestionError(f"객관식 문제는 선택지가 {MIN_OPTION_COUNT}개 이상 필요합니다.")
        if any(not (option or "").strip() for option in options):
            raise InvalidQuestionError("빈 선택지가 있습니다.")
        if not correct_answer:
            raise InvalidQuestionError("객관식 문제는 정답이 필요합니다.")
        out_of_range = [i for i in correct_answer if not 0 <= i < len(options)]
        if out_of_range:
            raise InvalidQuestionError(f"정답 인덱스가 선택지 범위를 벗어났습니다: {out_of_range}")
        if grading_criteria:
            raise InvalidQuestionError("객관식 문제에는 채점 기준을 입력할 수 없습니다.")
    elif question_type == QUESTION_TYPE_SUBJECTIVE:
        if not grading_criteria:
            raise InvalidQuestionError("주관식 문제는 채점 기준이 필요합니다.")
        if options or correct_answer:
            raise InvalidQuestionError("주관식 문제에는 선택지와 정답을 입력할 수 없습니다.")
    else:
        raise InvalidQuestionError(f"알 수 없는 문제 유형입니다: {question_type}")


async def get_question(session: AsyncSession, question_id: int) -> question_schema.QuestionResponse:
    question = await question_crud.get_question_by_id(session, question_id)
    if not question:
        raise QuestionNotFoundError(question_id)
    return question_schema.QuestionResponse.model_validate(question)


async def list_questions(
    session: AsyncSession,
    category: str | None = None,
) -> question_schema.QuestionListResponse:
    questions = await question_crud.get_questions(session, category=category)
    responses = [question_schema.QuestionResponse.model_validate(q) for q in questions]
    return question_schema.QuestionListResponse(questions=responses, total=len(responses))


async def _require_post(session: AsyncSession, post_id: int | None) -> None:
    if post_id is not None and not await post_crud.get_post_by_id(session, post_id):
        raise PostNotFoundError(post_id)


async def create_question(
    session: AsyncSession,
    request: question_schema.QuestionCreateRequest,
) -> question_schema.QuestionResponse:
    """문제 생성"""
    fields = request.model_dump()
    validate_question_fields(fields)
    await _require_post(session, request.related_post_id)

    question = await question_crud.create_question(session, **fields)
    logger.info(
        f"문제 생성: question_id={question.id}, category={question.category}, "
        f"question_type={question.question_type}"
    )
    return question_schema.QuestionResponse.model_validate(question)


async def update_question(
    session: AsyncSession,
    question_id: int,
    request: question_schema.QuestionUpdateRequest,
) -> question_schema.QuestionResponse:
    """문제 수정 (수정 후 상태 기준으로 유형 검증)"""
    question = await question_crud.get_question_by_id(session, question_id)
    if not question:
        raise QuestionNotFoundError(question_id)

    changes = request.model_dump(exclude_unset=True)
    for required in ("category", "question", "question_type", "max_score", "question_image_urls"):
        if required in changes and changes[required] is None:
            raise InvalidQuestionError(f"{required} 값은 비워둘 수 없습니다.")

    merged = {
        "question_type": question.question_type,
        "options": question.options,
        "correct_answer": question.correct_answer,
        "grading_criteria": question.grading_criteria,
        **changes,
    }
    validate_question_fields(merged)
    if "related_post_id" in changes:
        await _require_post(session, changes["related_post_id"])

    question = await question_crud.update_question(session, question, changes)
    logger.info(f"문제 수정: question_id={question_id}, fields={sorted(changes)}")
    return question_schema.QuestionResponse.model_validate(question)


async def delete_question(session: AsyncSession, question_id: int) -> None:
    """문제 삭제 (주관식 답변/복습 기록은 FK cascade로 함께 삭제)"""
    question = await question_crud.get_question_by_id(session, question_id)
    if not question:
        raise QuestionNotFoundError(question_id)
    await question_crud.delete_question(session, question)
    logger.info(f"문제 삭제: question_id={question_id}")


async def generate_question_draft(
    session: AsyncSession,
    request: question_schema.QuestionDraftRequest,
) -> ai.AIQuestionDraftResponse:
    """교육 게시물 또는 본문으로 AI 문제 초안 생성 (저장하지 않음)"""
    if request.post_id is not None:
        post = await post_crud.get_post_by_id(session, request.post_id)
        if not post:
            raise PostNotFoundError(request.post_id)
        content = post.content
    else:
        content = request.content

    if not (content or "").strip():
        raise InvalidRequestError("post_id 또는 content 중 하나는 필수입니다")

    draft = await ai_service.generate_question_draft(
        ai.AIQuestionDraftRequest(
            content=content,
            question_type=request.question_type,
            category=request.category,
        )
    )
    logger.info(
        f"AI 문제 초안 생성: category={request.category}, question_type={request.question_type}, "
        f"post_id={request.post_id}"
    )
    return draft
