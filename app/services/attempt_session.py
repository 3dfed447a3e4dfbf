"""응시 세션 상태 머신

한 사용자가 한 번 응시하는 동안의 답안, 현재 문제 위치, 주관식 잠정 채점 상태를 메모리에 보관한다.
제출 전까지는 아무것도 저장하지 않으며, 제출 시 결과 기록기(recorder)를 통해 한 번 저장한다.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from app.exceptions import InvalidAttemptStateError
from app.models.question import Question
from app.schemas.ai import AIGradingResponse
from app.services.grading import ScoreSummary, score_attempt

logger = logging.getLogger(__name__)

SESSION_IN_PROGRESS = "in_progress"
SESSION_SUBMITTING = "submitting"
SESSION_COMPLETED = "completed"

GRADING_UNGRADED = "ungraded"
GRADING_IN_FLIGHT = "grading"
GRADING_GRADED = "graded"
GRADING_FAILED = "grading_failed"

SAVE_ERROR_MESSAGE = "결과 저장 중 오류가 발생했습니다."

# (문제, 답변 텍스트, 이미지 URL) -> 잠정 채점 결과
Grader = Callable[[Question, str, str | None], Awaitable[AIGradingResponse]]


@dataclass
class AnswerState:
    """문제별 답안 상태"""
    selected: set[int] = field(default_factory=set)
    answer_text: str = ""
    image_url: str | None = None
    grading: AIGradingResponse | None = None
    grading_status: str = GRADING_UNGRADED
    grading_error: str | None = None

    @property
    def has_content(self) -> bool:
        return bool(self.answer_text.strip()) or bool(self.image_url)


@dataclass
class AttemptOutcome:
    """제출 결과 (저장 실패여도 계산된 점수는 유지)"""
    summary: ScoreSummary
    test_result_id: int | None = None
    save_error: str | None = None


class AttemptSession:
    def __init__(
        self,
        questions: list[Question],
        category: str,
        grader: Grader,
        retest_assignment_id: int | None = None,
    ):
        self.questions = list(questions)
        self.category = category
        self.retest_assignment_id = retest_assignment_id
        self.answers = [AnswerState() for _ in self.questions]
        self.state = SESSION_IN_PROGRESS
        self.cursor = 0
        self._grader = grader
        self._index_by_id = {q.id: i for i, q in enumerate(self.questions)}

    @property
    def current_question(self) -> Question | None:
        if not self.questions:
            return None
        return self.questions[self.cursor]

    @property
    def answered_count(self) -> int:
        count = 0
        for question, answer in zip(self.questions, self.answers):
            if question.is_subjective:
                count += answer.has_content
            else:
                count += bool(answer.selected)
        return count

    @property
    def progress(self) -> float:
        """답변 완료 비율 (0~100)"""
        if not self.questions:
            return 0.0
        return self.answered_count / len(self.questions) * 100

    def _require_in_progress(self) -> None:
        if self.state != SESSION_IN_PROGRESS:
            raise InvalidAttemptStateError(f"진행 중인 응시가 아닙니다: state={self.state}")

    def _index_of(self, question_id: int) -> int:
        try:
            return self._index_by_id[question_id]
        except KeyError:
            raise InvalidAttemptStateError(f"이번 응시에 포함되지 않은 문제입니다: {question_id}")

    def _subjective_index(self, question_id: int) -> int:
        index = self._index_of(question_id)
        if not self.questions[index].is_subjective:
            raise InvalidAttemptStateError(f"주관식 문제가 아닙니다: {question_id}")
        return index

    def move_to(self, index: int) -> None:
        if 0 <= index < len(self.questions):
            self.cursor = index

    def next(self) -> None:
        self.move_to(self.cursor + 1)

    def prev(self) -> None:
        self.move_to(self.cursor - 1)

    def select_option(self, question_index: int, option_index: int) -> None:
        """객관식 선택지 토글 (다중 정답 지원)"""
        self._require_in_progress()
        if not 0 <= question_index < len(self.questions):
            raise InvalidAttemptStateError(f"잘못된 문제 위치입니다: {question_index}")
        question = self.questions[question_index]
        if question.is_subjective:
            raise InvalidAttemptStateError(f"객관식 문제가 아닙니다: {question.id}")
        option_count = len(question.options or [])
        if not 0 <= option_index < option_count:
            raise InvalidAttemptStateError(
                f"잘못된 선택지입니다: question_id={question.id}, option={option_index}"
            )

        selected = self.answers[question_index].selected
        if option_index in selected:
            selected.discard(option_index)
        else:
            selected.add(option_index)

    def set_answer_text(self, question_id: int, text: str) -> None:
        self._require_in_progress()
        self.answers[self._subjective_index(question_id)].answer_text = text or ""

    def attach_image(self, question_id: int, url: str | None) -> None:
        self._require_in_progress()
        self.answers[self._subjective_index(question_id)].image_url = url or None

    async def request_grading(self, question_id: int) -> bool:
        """주관식 답안 AI 잠정 채점 (저장하지 않음, 실패 시 재요청 가능)

        Returns:
            채점 성공 여부
        """
        # 제출 중 일괄 채점은 허용, 제출 완료 후에는 거부
        if self.state == SESSION_COMPLETED:
            raise InvalidAttemptStateError(f"이미 제출된 응시입니다: state={self.state}")
        index = self._subjective_index(question_id)
        answer = self.answers[index]
        if not answer.has_content:
            raise InvalidAttemptStateError("답변 텍스트 또는 이미지가 필요합니다.")
        if answer.grading_status == GRADING_IN_FLIGHT:
            raise InvalidAttemptStateError(f"이미 채점 중입니다: {question_id}")

        answer.grading_status = GRADING_IN_FLIGHT
        answer.grading_error = None
        try:
            result = await self._grader(self.questions[index], answer.answer_text, answer.image_url)
        except Exception as e:
            logger.warning(
                f"주관식 AI 채점 실패: question_id={question_id}, "
                f"error_type={type(e).__name__}, error={str(e)[:200]}"
            )
            answer.grading_status = GRADING_FAILED
            answer.grading_error = getattr(e, "message", None) or "AI 채점 중 오류가 발생했습니다."
            return False

        # 이전 결과와 합치지 않고 통째로 교체
        answer.grading = result
        answer.grading_status = GRADING_GRADED
        return True

    def _ungraded_subjective_ids(self) -> list[int]:
        return [
            question.id
            for question, answer in zip(self.questions, self.answers)
            if question.is_subjective
            and answer.has_content
            and answer.grading is None
            and answer.grading_status != GRADING_IN_FLIGHT
        ]

    async def submit(
        self,
        recorder: Callable[["AttemptSession", ScoreSummary], Awaitable[int]],
        retest_completer: Callable[[int], Awaitable[Any]] | None = None,
    ) -> AttemptOutcome:
        """응시 제출

        1. 채점 결과가 없는 주관식 답안을 병렬로 AI 채점 (모두 끝날 때까지 대기)
        2. 배점 가중 점수 계산
        3. recorder로 결과 저장 (실패해도 계산된 결과는 반환)
        4. 재시험에서 시작한 응시면 재시험 완료 처리
        """
        self._require_in_progress()
        self.state = SESSION_SUBMITTING

        pending_ids = self._ungraded_subjective_ids()
        if pending_ids:
            logger.debug(f"제출 전 주관식 일괄 채점: count={len(pending_ids)}")
            await asyncio.gather(
                *(self.request_grading(qid) for qid in pending_ids),
                return_exceptions=True,
            )

        summary = score_attempt(self.questions, self.answers)
        outcome = AttemptOutcome(summary=summary)

        try:
            outcome.test_result_id = await recorder(self, summary)
        except Exception as e:
            logger.error(
                f"테스트 결과 저장 실패: category={self.category}, "
                f"score={summary.percentage}, error_type={type(e).__name__}",
                exc_info=True,
            )
            outcome.save_error = SAVE_ERROR_MESSAGE

        if self.retest_assignment_id is not None and retest_completer is not None:
            if outcome.test_result_id is not None:
                try:
                    await retest_completer(self.retest_assignment_id)
                except Exception as e:
                    # 결과는 저장됐으므로 로그만 남긴다 (배정은 pending으로 남음)
                    logger.error(
                        f"재시험 완료 처리 실패: retest_assignment_id={self.retest_assignment_id}, "
                        f"error_type={type(e).__name__}",
                        exc_info=True,
                    )
            else:
                logger.warning(
                    f"결과 저장 실패로 재시험 완료 처리 생략: "
                    f"retest_assignment_id={self.retest_assignment_id}"
                )

        self.state = SESSION_COMPLETED
        return outcome
