"""채점 엔진

객관식은 정답 인덱스 집합과의 완전 일치로, 주관식은 AI 채점 결과 점수로 판정한다.
두 방식 모두 grade(question, answer)로 호출한다.
"""
import math
from dataclasses import dataclass, field
from typing import Iterable, Protocol

from app.models.question import Question

# 주관식 정답 인정 기준: 배점의 60% 이상 (경계 포함)
SUBJECTIVE_PASS_NUMERATOR = 6
SUBJECTIVE_PASS_DENOMINATOR = 10


class ScoredGrading(Protocol):
    score: float


class GradableAnswer(Protocol):
    selected: set[int]
    grading: ScoredGrading | None


@dataclass(frozen=True)
class GradeOutcome:
    score: float
    is_correct: bool


@dataclass
class ScoreSummary:
    """응시 전체 채점 결과"""
    total_awarded: float = 0
    total_max: int = 0
    correct_count: int = 0
    total_count: int = 0
    outcomes: list[GradeOutcome] = field(default_factory=list)

    @property
    def percentage(self) -> int:
        return calculate_percentage(self.total_awarded, self.total_max)


def round_half_up(value: float) -> int:
    """사사오입 반올림 (round()의 은행가 반올림 대신)"""
    return int(math.floor(value + 0.5))


def calculate_percentage(awarded: float, maximum: float) -> int:
    """백분율 점수 (만점이 0이면 0)"""
    if maximum <= 0:
        return 0
    return round_half_up(100 * awarded / maximum)


def is_objective_correct(correct_answer: Iterable[int] | None, selected: Iterable[int]) -> bool:
    """선택 집합이 정답 집합과 정확히 같은지 (순서 무관, 부분/초과 집합은 오답)

    정답 집합이 비어있거나 형식이 깨진 경우 항상 오답이다.
    """
    if correct_answer is None:
        return False
    try:
        correct = frozenset(correct_answer)
    except TypeError:
        return False
    if not correct:
        return False
    return frozenset(selected) == correct


def is_subjective_correct(score: float, max_score: int) -> bool:
    """score >= 0.6 * max_score (정수 연산으로 비교)"""
    return score * SUBJECTIVE_PASS_DENOMINATOR >= max_score * SUBJECTIVE_PASS_NUMERATOR


def grade_objective(question: Question, selected: Iterable[int]) -> GradeOutcome:
    if is_objective_correct(question.correct_answer_set, selected):
        return GradeOutcome(score=question.max_score, is_correct=True)
    return GradeOutcome(score=0, is_correct=False)


def grade_subjective(question: Question, grading: ScoredGrading | None) -> GradeOutcome:
    # 채점 결과가 없으면 0점, 오답 (제출은 막지 않음)
    if grading is None:
        return GradeOutcome(score=0, is_correct=False)
    return GradeOutcome(
        score=grading.score,
        is_correct=is_subjective_correct(grading.score, question.max_score),
    )


def grade(question: Question, answer: GradableAnswer) -> GradeOutcome:
    """문제 유형에 맞는 채점 전략으로 채점"""
    if question.is_subjective:
        return grade_subjective(question, answer.grading)
    return grade_objective(question, answer.selected)


def score_attempt(questions: list[Question], answers: list[GradableAnswer]) -> ScoreSummary:
    """배점 가중 합산으로 응시 결과 계산"""
    summary = ScoreSummary(total_count=len(questions))
    for question, answer in zip(questions, answers):
        summary.total_max += question.max_score
        outcome = grade(question, answer)
        summary.total_awarded += outcome.score
        if outcome.is_correct:
            summary.correct_count += 1
        summary.outcomes.append(outcome)
    return summary
