import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import question as question_crud, retest as retest_crud, user as user_crud
from app.exceptions import InvalidRequestError, QuestionNotFoundError, UserNotFoundError
from app.models.retest_assignment import RETEST_PENDING
from app.models.user import ROLE_MANAGER, User
from app.schemas import retest as retest_schema

logger = logging.getLogger(__name__)


def _to_list_response(assignments) -> retest_schema.RetestListResponse:
    responses = [retest_schema.RetestResponse.model_validate(a) for a in assignments]
    return retest_schema.RetestListResponse(assignments=responses, total=len(responses))


async def create_retest(
    session: AsyncSession,
    admin: User,
    request: retest_schema.RetestCreateRequest,
) -> retest_schema.RetestResponse:
    """매니저에게 재시험 배정"""
    manager = await user_crud.get_user_by_id(session, request.manager_id)
    if not manager:
        raise UserNotFoundError(request.manager_id)
    if manager.role != ROLE_MANAGER:
        raise InvalidRequestError("매니저에게만 재시험을 배정할 수 있습니다.")

    question_ids = list(dict.fromkeys(request.question_ids)) if request.question_ids else None
    if question_ids:
        questions = await question_crud.get_questions_by_ids(session, question_ids)
        found_ids = {q.id for q in questions}
        for question_id in question_ids:
            if question_id not in found_ids:
                raise QuestionNotFoundError(question_id)

    assignment = await retest_crud.create_retest_assignment(
        session,
        admin_id=admin.id,
        manager_id=manager.id,
        category=request.category,
        question_ids=question_ids,
        reason=request.reason,
    )
    logger.info(
        f"재시험 배정: assignment_id={assignment.id}, manager_id={manager.id}, "
        f"category={request.category}, question_count={len(question_ids or [])}"
    )
    return retest_schema.RetestResponse.model_validate(assignment)


async def list_retests(
    session: AsyncSession,
    manager_id: int | None = None,
    status: str | None = None,
) -> retest_schema.RetestListResponse:
    """재시험 배정 목록 (관리자용)"""
    assignments = await retest_crud.get_retest_assignments(session, manager_id=manager_id, status=status)
    return _to_list_response(assignments)


async def get_my_pending_retests(
    session: AsyncSession,
    user: User,
) -> retest_schema.RetestListResponse:
    """본인에게 배정된 대기 중 재시험"""
    assignments = await retest_crud.get_retest_assignments(session, manager_id=user.id, status=RETEST_PENDING)
    return _to_list_response(assignments)


async def complete_retest(session: AsyncSession, assignment_id: int) -> bool:
    """재시험 완료 처리 (이미 완료된 배정은 변경하지 않음)"""
    changed = await retest_crud.complete_retest_assignment(session, assignment_id)
    if not changed:
        logger.info(f"재시험 완료 처리 생략 (대기 상태 아님): assignment_id={assignment_id}")
    return changed
