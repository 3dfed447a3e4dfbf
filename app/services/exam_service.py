import json
import logging
from datetime import datetime, timezone
from functools import partial

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.crud import (
    exam_result as exam_result_crud,
    question as question_crud,
    retest as retest_crud,
    subjective_answer as subjective_answer_crud,
)
from app.exceptions import (
    InvalidRequestError,
    QuestionNotFoundError,
    ResultNotFoundError,
    RetestAssignmentNotFoundError,
)
from app.models.question import Question
from app.models.retest_assignment import RETEST_PENDING
from app.models.subjective_answer import STATUS_AI_GRADED, STATUS_PENDING
from app.models.user import User
from app.schemas import (
    ai as ai_schema,
    exam as exam_schema,
    question as question_schema,
    review as review_schema,
    user as user_schema,
)
from app.services import ai_service, retest_service
from app.services.attempt_session import AttemptSession
from app.services.grading import ScoreSummary

logger = logging.getLogger(__name__)


def category_title(category: str) -> str:
    """카테고리 표시 이름 ('전체'는 전체 테스트, 밑줄은 공백)"""
    if category == settings.full_test_category:
        return "전체 테스트"
    return category.replace("_", " ")


async def grade_with_ai(
    question: Question,
    answer_text: str,
    image_url: str | None,
) -> ai_schema.AIGradingResponse:
    """응시 세션에서 사용하는 주관식 채점기"""
    request = ai_schema.AIGradingRequest(
        question=question.question,
        answer_text=answer_text or "",
        image_url=image_url,
        grading_criteria=question.grading_criteria or "",
        model_answer=question.model_answer,
        max_score=question.max_score,
    )
    return await ai_service.grade_subjective_answer(request)


async def get_exam_list(
    session: AsyncSession,
    user: User,
) -> exam_schema.ExamListResponse:
    """테스트 목록 (카테고리별 문제 수 + 최근 결과)"""
    counts = await question_crud.get_question_counts_by_category(session)
    categories = [
        exam_schema.CategorySummary(category=category, title=category_title(category), question_count=count)
        for category, count in counts.items()
    ]
    if counts:
        categories.append(
            exam_schema.CategorySummary(
                category=settings.full_test_category,
                title=category_title(settings.full_test_category),
                question_count=min(sum(counts.values()), settings.full_test_question_count),
            )
        )

    recent = await exam_result_crud.get_exam_results_by_user(
        session, user.id, limit=settings.recent_results_limit
    )
    return exam_schema.ExamListResponse(
        categories=categories,
        recent_results=[exam_schema.ExamResultResponse.model_validate(r) for r in recent],
    )


async def load_attempt_questions(
    session: AsyncSession,
    category: str,
    question_ids: list[int] | None = None,
) -> list[Question]:
    """응시 문제 구성 (문제 ID 지정 > '전체' 랜덤 > 카테고리 전체)"""
    if question_ids:
        return await question_crud.get_questions_by_ids(session, question_ids)
    if category == settings.full_test_category:
        return list(await question_crud.get_random_questions(session, settings.full_test_question_count))
    return list(await question_crud.get_questions(session, category=category))


def _to_start_response(
    category: str,
    questions: list[Question],
    retest_assignment_id: int | None = None,
) -> exam_schema.ExamStartResponse:
    question_responses = [question_schema.AttemptQuestionResponse.model_validate(q) for q in questions]
    return exam_schema.ExamStartResponse(
        category=category,
        category_title=category_title(category),
        retest_assignment_id=retest_assignment_id,
        questions=question_responses,
        total=len(question_responses),
    )


async def start_exam(
    session: AsyncSession,
    category: str,
) -> exam_schema.ExamStartResponse:
    """응시 시작 (문제가 없는 카테고리는 빈 목록)"""
    questions = await load_attempt_questions(session, category)
    if not questions:
        logger.info(f"응시 가능한 문제 없음: category={category}")
    return _to_start_response(category, questions)


async def start_retest(
    session: AsyncSession,
    user: User,
    assignment_id: int,
) -> exam_schema.ExamStartResponse:
    """본인에게 배정된 대기 중 재시험으로 응시 시작"""
    assignment = await retest_crud.get_retest_assignment_by_id(session, assignment_id)
    if not assignment or assignment.manager_id != user.id:
        raise RetestAssignmentNotFoundError(assignment_id)
    if assignment.status != RETEST_PENDING:
        raise InvalidRequestError("이미 완료된 재시험입니다.")

    category = assignment.category or settings.full_test_category
    questions = await load_attempt_questions(session, category, assignment.question_ids)
    return _to_start_response(category, questions, retest_assignment_id=assignment.id)


async def grade_answer(
    session: AsyncSession,
    request: exam_schema.GradeRequest,
) -> exam_schema.GradingResultSchema:
    """주관식 답안 잠정 채점 (저장하지 않음)"""
    question = await question_crud.get_question_by_id(session, request.question_id)
    if not question:
        raise QuestionNotFoundError(request.question_id)
    if not question.is_subjective:
        raise InvalidRequestError("주관식 문제만 AI 채점을 요청할 수 있습니다.")
    if not (request.answer_text or "").strip() and not request.image_url:
        raise InvalidRequestError("답변 텍스트 또는 이미지가 필요합니다.")

    result = await grade_with_ai(question, request.answer_text or "", request.image_url)
    return exam_schema.GradingResultSchema(max_score=question.max_score, **result.model_dump())


def _feedback_json(grading: ai_schema.AIGradingResponse) -> str:
    return json.dumps(
        {
            "feedback": grading.feedback,
            "strengths": grading.strengths,
            "improvements": grading.improvements,
        },
        ensure_ascii=False,
    )


async def _record_subjective_answers(
    session: AsyncSession,
    user_id: int,
    test_result_id: int,
    attempt: AttemptSession,
) -> None:
    """답변한 주관식 문제마다 답변 기록 저장 (행 단위 실패는 로그만)"""
    for question, answer in zip(attempt.questions, attempt.answers):
        if not question.is_subjective or not answer.has_content:
            continue
        grading = answer.grading
        try:
            await subjective_answer_crud.create_subjective_answer(
                session,
                question_id=question.id,
                user_id=user_id,
                test_result_id=test_result_id,
                answer_text=answer.answer_text or None,
                image_url=answer.image_url,
                ai_score=grading.score if grading else None,
                ai_feedback=_feedback_json(grading) if grading else None,
                ai_graded_at=datetime.now(timezone.utc) if grading else None,
                status=STATUS_AI_GRADED if grading else STATUS_PENDING,
            )
        except Exception as e:
            logger.error(
                f"주관식 답변 저장 실패: test_result_id={test_result_id}, "
                f"question_id={question.id}, error_type={type(e).__name__}",
                exc_info=True,
            )
            await session.rollback()


def _build_outcomes(attempt: AttemptSession, summary: ScoreSummary) -> list[exam_schema.QuestionOutcome]:
    outcomes = []
    for question, answer, outcome in zip(attempt.questions, attempt.answers, summary.outcomes):
        grading = None
        if answer.grading is not None:
            grading = exam_schema.GradingResultSchema(
                max_score=question.max_score, **answer.grading.model_dump()
            )
        outcomes.append(
            exam_schema.QuestionOutcome(
                question_id=question.id,
                question_type=question.question_type,
                awarded_score=outcome.score,
                max_score=question.max_score,
                is_correct=outcome.is_correct,
                selected=sorted(answer.selected),
                correct_answer=None if question.is_subjective else sorted(question.correct_answer_set),
                grading=grading,
                grading_status=answer.grading_status if question.is_subjective else None,
            )
        )
    return outcomes


async def submit_exam(
    session: AsyncSession,
    user: User,
    request: exam_schema.ExamSubmitRequest,
) -> exam_schema.ExamSubmitResponse:
    """응시 제출

    주관식 채점 결과는 클라이언트 값을 사용하지 않고 서버에서 다시 채점한다.
    결과 저장에 실패해도 계산된 점수는 save_error와 함께 반환한다.
    """
    question_ids = [a.question_id for a in request.answers]
    questions = await question_crud.get_questions_by_ids(session, question_ids)
    found_ids = {q.id for q in questions}
    for question_id in question_ids:
        if question_id not in found_ids:
            raise QuestionNotFoundError(question_id)
    # 저장 실패 후 rollback으로 만료되지 않도록 세션에서 분리
    for question in questions:
        session.expunge(question)
    user_id = user.id

    if request.retest_assignment_id is not None:
        assignment = await retest_crud.get_retest_assignment_by_id(session, request.retest_assignment_id)
        if not assignment or assignment.manager_id != user_id:
            raise RetestAssignmentNotFoundError(request.retest_assignment_id)

    attempt = AttemptSession(
        questions,
        category=request.category,
        grader=grade_with_ai,
        retest_assignment_id=request.retest_assignment_id,
    )
    answers_by_id = {a.question_id: a for a in request.answers}
    for index, question in enumerate(attempt.questions):
        submitted = answers_by_id[question.id]
        if question.is_subjective:
            attempt.set_answer_text(question.id, submitted.answer_text or "")
            attempt.attach_image(question.id, submitted.image_url)
        else:
            for option_index in submitted.selected:
                attempt.select_option(index, option_index)

    async def record(attempt: AttemptSession, summary: ScoreSummary) -> int:
        try:
            result = await exam_result_crud.create_exam_result(
                session,
                user_id=user_id,
                category=attempt.category,
                score=summary.percentage,
                correct_count=summary.correct_count,
                total_count=summary.total_count,
            )
        except Exception:
            await session.rollback()
            raise
        result_id = result.id
        await _record_subjective_answers(session, user_id, result_id, attempt)
        return result_id

    outcome = await attempt.submit(
        record,
        retest_completer=partial(retest_service.complete_retest, session),
    )
    summary = outcome.summary

    logger.info(
        f"테스트 제출: user_id={user_id}, category={request.category}, "
        f"score={summary.percentage}, correct={summary.correct_count}/{summary.total_count}, "
        f"test_result_id={outcome.test_result_id}"
    )
    return exam_schema.ExamSubmitResponse(
        test_result_id=outcome.test_result_id,
        category=request.category,
        score=summary.percentage,
        correct_count=summary.correct_count,
        total_count=summary.total_count,
        outcomes=_build_outcomes(attempt, summary),
        save_error=outcome.save_error,
    )


async def get_my_results(
    session: AsyncSession,
    user: User,
) -> exam_schema.ExamResultListResponse:
    """본인 테스트 결과 이력"""
    results = await exam_result_crud.get_exam_results_by_user(session, user.id)
    responses = [exam_schema.ExamResultResponse.model_validate(r) for r in results]
    return exam_schema.ExamResultListResponse(results=responses, total=len(responses))


async def get_result_detail(
    session: AsyncSession,
    user: User,
    result_id: int,
) -> review_schema.ExamResultDetailResponse:
    """테스트 결과 상세 (관리자는 모든 결과 조회 가능)"""
    result = await exam_result_crud.get_exam_result_by_id(
        session, result_id, user_id=None if user.is_admin else user.id
    )
    if not result:
        raise ResultNotFoundError(result_id)

    answers = await subjective_answer_crud.get_subjective_answers_by_result(session, result.id)
    subjective_answers = [
        review_schema.ResultSubjectiveAnswer(
            **review_schema.SubjectiveAnswerResponse.model_validate(a).model_dump(),
            question=a.question.question,
            max_score=a.question.max_score,
            category=a.question.category,
        )
        for a in answers
    ]
    return review_schema.ExamResultDetailResponse(
        result=exam_schema.ExamResultResponse.model_validate(result),
        subjective_answers=subjective_answers,
    )


async def get_manager_scores(session: AsyncSession) -> user_schema.ManagerScoreListResponse:
    """매니저별 평균 점수 요약"""
    rows = await exam_result_crud.get_manager_score_summaries(session)
    managers = [
        user_schema.ManagerScoreSummary(
            user_id=user.id,
            username=user.username,
            name=user.name,
            average_score=round(float(average), 1) if average is not None else None,
            total_tests=count,
        )
        for user, average, count in rows
    ]
    return user_schema.ManagerScoreListResponse(managers=managers, total=len(managers))
