"""재시험 배정 테스트"""
import pytest

from app.exceptions import (
    InvalidRequestError,
    QuestionNotFoundError,
    RetestAssignmentNotFoundError,
    UserNotFoundError,
)
from app.models.question import QUESTION_TYPE_MULTIPLE_CHOICE, Question
from app.models.retest_assignment import RETEST_COMPLETED, RETEST_PENDING, RetestAssignment
from app.schemas.retest import RetestCreateRequest
from app.services import exam_service, retest_service


@pytest.fixture
async def questions(test_db_session):
    items = [
        Question(
            category=category,
            question=f"{category} 문제",
            question_type=QUESTION_TYPE_MULTIPLE_CHOICE,
            options=["A", "B"],
            correct_answer=[0],
            max_score=10,
        )
        for category in ("고객_응대", "고객_응대", "안전_교육")
    ]
    test_db_session.add_all(items)
    await test_db_session.commit()
    return items


@pytest.mark.asyncio
async def test_create_retest(test_db_session, admin, manager, questions):
    response = await retest_service.create_retest(
        test_db_session,
        admin,
        RetestCreateRequest(
            manager_id=manager.id,
            question_ids=[questions[2].id, questions[0].id, questions[2].id],
            reason="60점 미만",
        ),
    )

    assert response.status == RETEST_PENDING
    assert response.admin_id == admin.id
    assert response.question_ids == [questions[2].id, questions[0].id]
    assert response.completed_at is None


@pytest.mark.asyncio
async def test_create_retest_validates_target(test_db_session, admin, manager, questions):
    with pytest.raises(UserNotFoundError):
        await retest_service.create_retest(test_db_session, admin, RetestCreateRequest(manager_id=999))
    with pytest.raises(InvalidRequestError):
        await retest_service.create_retest(test_db_session, admin, RetestCreateRequest(manager_id=admin.id))
    with pytest.raises(QuestionNotFoundError):
        await retest_service.create_retest(
            test_db_session, admin, RetestCreateRequest(manager_id=manager.id, question_ids=[999])
        )


@pytest.mark.asyncio
async def test_complete_retest_is_idempotent(test_db_session, admin, manager):
    """두 번째 완료 처리는 아무것도 바꾸지 않음"""
    assignment = RetestAssignment(admin_id=admin.id, manager_id=manager.id, category="고객_응대")
    test_db_session.add(assignment)
    await test_db_session.commit()

    assert await retest_service.complete_retest(test_db_session, assignment.id) is True
    await test_db_session.refresh(assignment)
    first_completed_at = assignment.completed_at
    assert assignment.status == RETEST_COMPLETED
    assert first_completed_at is not None

    assert await retest_service.complete_retest(test_db_session, assignment.id) is False
    await test_db_session.refresh(assignment)
    assert assignment.status == RETEST_COMPLETED
    assert assignment.completed_at == first_completed_at


@pytest.mark.asyncio
async def test_my_pending_retests(test_db_session, admin, manager):
    test_db_session.add_all(
        [
            RetestAssignment(admin_id=admin.id, manager_id=manager.id, category="고객_응대"),
            RetestAssignment(
                admin_id=admin.id, manager_id=manager.id, category="안전_교육", status=RETEST_COMPLETED
            ),
        ]
    )
    await test_db_session.commit()

    mine = await retest_service.get_my_pending_retests(test_db_session, manager)
    assert mine.total == 1
    assert mine.assignments[0].category == "고객_응대"

    everything = await retest_service.list_retests(test_db_session)
    assert everything.total == 2
    completed = await retest_service.list_retests(test_db_session, status=RETEST_COMPLETED)
    assert completed.total == 1


@pytest.mark.asyncio
async def test_start_retest_seeds_from_scope(test_db_session, admin, manager, questions):
    by_category = RetestAssignment(admin_id=admin.id, manager_id=manager.id, category="고객_응대")
    by_ids = RetestAssignment(
        admin_id=admin.id, manager_id=manager.id, question_ids=[questions[2].id, questions[0].id]
    )
    test_db_session.add_all([by_category, by_ids])
    await test_db_session.commit()

    response = await exam_service.start_retest(test_db_session, manager, by_category.id)
    assert response.total == 2
    assert response.retest_assignment_id == by_category.id

    response = await exam_service.start_retest(test_db_session, manager, by_ids.id)
    assert [q.id for q in response.questions] == [questions[2].id, questions[0].id]


@pytest.mark.asyncio
async def test_start_retest_rejects_completed_or_foreign(test_db_session, admin, manager):
    completed = RetestAssignment(
        admin_id=admin.id, manager_id=manager.id, category="고객_응대", status=RETEST_COMPLETED
    )
    test_db_session.add(completed)
    await test_db_session.commit()

    with pytest.raises(InvalidRequestError):
        await exam_service.start_retest(test_db_session, manager, completed.id)
    with pytest.raises(RetestAssignmentNotFoundError):
        await exam_service.start_retest(test_db_session, admin, completed.id)
